"""
In-memory collaborators for the annotation controller.

Implements the highlighter, selection handler and relations layer
interfaces without any rendering, so the controller can be driven from
tests, scripts or the command line. The ``select``/``start_connection``/
``press`` style methods stand in for user input.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from ..core.annotation import (
    AnnotationController,
    AnnotationEvent,
    EventEmitter,
    EventType,
)
from ..core.annotation.collaborators import (
    Highlighter,
    RelationsLayer,
    SelectionHandler,
)
from ..core.annotation.model import Annotation, Relation
from ..core.annotation.utils import find_dangling_relations, split_relations

logger = logging.getLogger(__name__)


class Span:
    """Stand-in for a rendered highlight element."""

    def __init__(self, annotation: Annotation):
        self.annotation = annotation

    def __repr__(self):
        return f"Span({self.annotation.id!r})"


def _replace_key(items: Dict, old_key, new_key, value) -> Dict:
    """Replace ``old_key`` by ``new_key`` keeping the insertion order."""
    if old_key not in items:
        replaced = {k: v for k, v in items.items() if k != new_key}
        replaced[new_key] = value
        return replaced

    replaced = {}
    for key, existing in items.items():
        if key == old_key:
            replaced[new_key] = value
        elif key != new_key:
            replaced[key] = existing
    return replaced


class MemoryHighlighter(Highlighter):
    """
    Highlighter keeping annotations in insertion order.

    With ``auto_commit=False`` visual updates stay pending until
    ``commit()`` is called, like a renderer waiting for the next frame.
    """

    def __init__(self, auto_commit: bool = True, batch_size: int = 100):
        self.auto_commit = auto_commit
        self.batch_size = batch_size

        self._annotations: Dict[str, Annotation] = {}
        self._spans: Dict[str, Span] = {}
        self._pending: List[Callable[[], None]] = []

    async def init(self, annotations: List[Annotation]):
        # Relations are drawn by the relations layer
        to_render = [a for a in annotations if not a.is_relation]

        for start in range(0, len(to_render), self.batch_size):
            for annotation in to_render[start:start + self.batch_size]:
                self._annotations[annotation.id] = annotation
                self._spans[annotation.id] = Span(annotation)
            # Yield between batches
            await asyncio.sleep(0)

        logger.debug("Rendered %d annotations", len(to_render))

    def clear(self):
        self._annotations.clear()
        self._spans.clear()

    def add_or_update_annotation(
        self, annotation: Annotation, previous: Optional[Annotation] = None
    ):
        if previous is not None and not previous.is_selection:
            old_id = previous.id
        else:
            old_id = annotation.id

        self._annotations = _replace_key(
            self._annotations, old_id, annotation.id, annotation
        )

        span = self._spans.pop(old_id, None) or Span(annotation)
        span.annotation = annotation
        self._spans[annotation.id] = span

    def remove_annotation(self, annotation: Annotation):
        if annotation.is_selection:
            return
        self._annotations.pop(annotation.id, None)
        self._spans.pop(annotation.id, None)

    def override_id(self, original_id: str, forced_id: str) -> Optional[Annotation]:
        existing = self._annotations.get(original_id)
        if existing is None:
            return None

        updated = existing.clone(id=forced_id)
        self.add_or_update_annotation(updated, existing)
        return updated

    def find_annotation_spans(self, annotation: Annotation) -> List[Span]:
        if annotation.is_selection:
            return []
        span = self._spans.get(annotation.id)
        return [span] if span is not None else []

    def get_all_annotations(self) -> List[Annotation]:
        return list(self._annotations.values())

    def after_commit(self, callback: Callable[[], None]):
        self._pending.append(callback)
        if self.auto_commit:
            self.commit()

    @property
    def pending_commits(self) -> int:
        return len(self._pending)

    def commit(self) -> int:
        """Commit pending visual updates, running the deferred callbacks."""
        pending, self._pending = self._pending, []
        for callback in pending:
            callback()
        return len(pending)


class MemorySelectionHandler(SelectionHandler):
    """Selection handler fed with explicit ``select`` calls."""

    def __init__(self, read_only: bool = False):
        self.events = EventEmitter()
        self.enabled = True
        self.read_only = read_only
        self.current_selection = None

    def select(self, selection, element=None) -> bool:
        """
        Report a selection made by the user.

        Returns:
            True if the selection was emitted
        """
        if not self.enabled:
            return False
        # Read-only mode allows selecting existing annotations only
        if self.read_only and selection is not None and selection.is_selection:
            return False

        self.current_selection = selection
        self.events.emit(
            AnnotationEvent(
                EventType.SELECT, {"selection": selection, "element": element}
            )
        )
        return True

    def deselect(self) -> bool:
        return self.select(None)

    def clear_selection(self):
        self.current_selection = None


class MemoryRelationsLayer(RelationsLayer):
    """Relations layer resolving endpoints against a highlighter."""

    def __init__(self, highlighter: Highlighter):
        self.highlighter = highlighter
        self.events = EventEmitter()
        self.read_only = True
        self.drawing = False

        self._relations: Dict[str, Relation] = {}
        self._drawing_from: Optional[Annotation] = None

        # Relation annotations dropped by init because an endpoint is missing
        self.skipped: List[Annotation] = []

    async def init(self, annotations: List[Annotation]):
        _, relations = split_relations(annotations)
        rendered = self.highlighter.get_all_annotations()
        dangling = {
            r.id
            for r in find_dangling_relations(
                rendered + [relation.annotation for relation in relations]
            )
        }

        for relation in relations:
            if relation.id not in dangling:
                self._relations[relation.id] = relation
            else:
                logger.warning(
                    "Skipping relation %s: endpoint not found %s",
                    relation.id,
                    relation.endpoints,
                )
                self.skipped.append(relation.annotation)

        await asyncio.sleep(0)

    def clear(self):
        self._relations.clear()
        self.skipped.clear()
        self.reset_drawing()

    def add_or_update_relation(
        self, relation: Relation, previous: Optional[Relation] = None
    ):
        old_id = previous.id if previous is not None else relation.id
        self._relations = _replace_key(self._relations, old_id, relation.id, relation)

    def remove_relation(self, relation: Relation):
        self._relations.pop(relation.id, None)

    def destroy_connections_for(self, annotation: Annotation) -> List[Relation]:
        if annotation.is_selection:
            return []

        removed = [r for r in self._relations.values() if r.references(annotation.id)]
        for relation in removed:
            del self._relations[relation.id]
        return removed

    def override_target_annotation(self, original_id: str, forced_id: str):
        for relation in list(self._relations.values()):
            if relation.references(original_id):
                self._relations[relation.id] = relation.with_endpoint(
                    original_id, forced_id
                )

    def override_relation_id(self, original_id: str, forced_id: str):
        existing = self._relations.get(original_id)
        if existing is None:
            logger.debug("Relation %s no longer exists", original_id)
            return None

        updated = Relation(existing.annotation.clone(id=forced_id))
        self.add_or_update_relation(updated, existing)
        return updated

    def get_all_relations(self) -> List[Relation]:
        return list(self._relations.values())

    def find_relation(self, relation_id: str) -> Optional[Relation]:
        return self._relations.get(relation_id)

    def start_drawing(self):
        self.drawing = True

    def stop_drawing(self):
        self.drawing = False
        self.reset_drawing()

    def reset_drawing(self):
        self._drawing_from = None

    @property
    def is_connecting(self) -> bool:
        return self._drawing_from is not None

    # Simulated input

    def start_connection(self, annotation: Annotation) -> bool:
        if not self.drawing or self.read_only:
            return False
        self._drawing_from = annotation
        return True

    def complete_connection(self, annotation: Annotation) -> Optional[Relation]:
        """Finish the connector on ``annotation``; emits CREATE_RELATION."""
        if self._drawing_from is None:
            return None

        relation = Relation.create(self._drawing_from, annotation)
        self._drawing_from = None
        self.events.emit(
            AnnotationEvent(EventType.CREATE_RELATION, {"relation": relation})
        )
        return relation

    def click_relation(self, relation_id: str) -> Optional[Relation]:
        relation = self._relations.get(relation_id)
        if relation is None:
            return None
        self.events.emit(
            AnnotationEvent(EventType.SELECT_RELATION, {"relation": relation.clone()})
        )
        return relation

    def cancel_drawing(self):
        self.reset_drawing()
        self.events.emit(AnnotationEvent(EventType.CANCEL_DRAWING))


class KeyboardSource:
    """Source of KEYDOWN events."""

    def __init__(self):
        self.events = EventEmitter()

    def press(self, key: str):
        self.events.emit(AnnotationEvent(EventType.KEYDOWN, {"key": key}))


class ContentRoot:
    """Stand-in for the annotated content element."""

    def __init__(self, text: str = ""):
        self.text = text
        self.class_list = set()


def build_memory_controller(
    host=None, config=None, auto_commit: bool = True
) -> AnnotationController:
    """Create an activated controller wired to in-memory collaborators."""
    highlighter = MemoryHighlighter(auto_commit=auto_commit)
    controller = AnnotationController(
        highlighter=highlighter,
        selection_handler=MemorySelectionHandler(),
        relations_layer=MemoryRelationsLayer(highlighter),
        host=host,
        config=config,
        keyboard=KeyboardSource(),
        content_el=ContentRoot(),
    )
    return controller.activate()
