"""
Annotation lifecycle controller.

Pulls the strings between the selection detector, the highlight layer,
the relations layer and the editor popups. UI-agnostic - the editors are
described by ``render()`` and call back into the controller, the host
application is notified through an ``AnnotatorHost``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .collaborators import AnnotatorHost
from .config import make_config
from .events import AnnotationEvent, EventEmitter, EventType
from .identity import IdOverride
from .model import Annotation, Relation, strip_drafts
from .state import Action, ControllerState, Mode, initial_state, transition

logger = logging.getLogger(__name__)

NOSELECT_CLASS = "r6o-noselect"

ESCAPE_KEYS = ("Escape", "Esc")
ESCAPE_KEYCODE = 27


@dataclass
class EditorProps:
    """Describes the editor popup that should currently be shown."""

    kind: str
    props: Dict[str, Any] = field(default_factory=dict)


class AnnotationController:
    """
    Manages the annotation and relation editing lifecycle.

    This class handles:
    - Selection events (normal and headless mode)
    - Annotation and relation create/update/delete/cancel
    - Mode switching between annotation and relation drawing
    - Replacing local ids with ids issued by the host

    At most one editor is open at any time. Every state change is a
    separate commit, published as a STATE_CHANGED event on ``events``.
    """

    def __init__(
        self,
        highlighter,
        selection_handler,
        relations_layer,
        host: Optional[AnnotatorHost] = None,
        config=None,
        keyboard=None,
        content_el=None,
    ):
        """
        Initialize the controller.

        Args:
            highlighter: Highlight engine
            selection_handler: Selection detector
            relations_layer: Relation drawing layer
            host: Host application callbacks
            config: Annotator configuration, see ``make_config``
            keyboard: Source of KEYDOWN events, if any
            content_el: Content root carrying a ``class_list``, if any
        """
        self.highlighter = highlighter
        self.selection_handler = selection_handler
        self.relations_layer = relations_layer
        self.host = host if host is not None else AnnotatorHost()
        self.cfg = config if config is not None else make_config()
        self.keyboard = keyboard
        self.content_el = content_el

        self.state: ControllerState = initial_state(self.cfg)
        self.selection_handler.read_only = self.state.read_only

        # State commits, for UI components
        self.events = EventEmitter()

        self._active = False

    # Lifecycle

    def activate(self) -> "AnnotationController":
        """Subscribe to the collaborators' events."""
        if self._active:
            return self

        self.selection_handler.events.on(EventType.SELECT, self._handle_select)
        self.relations_layer.events.on(
            EventType.CREATE_RELATION, self._handle_edit_relation
        )
        self.relations_layer.events.on(
            EventType.SELECT_RELATION, self._handle_edit_relation
        )
        self.relations_layer.events.on(
            EventType.CANCEL_DRAWING, self._handle_cancel_drawing
        )
        if self.keyboard is not None:
            self.keyboard.events.on(EventType.KEYDOWN, self._handle_keydown)

        self._active = True
        logger.debug("Annotation controller activated")
        return self

    def close(self):
        """Release every subscription taken in ``activate``."""
        if not self._active:
            return

        self.selection_handler.events.off(EventType.SELECT, self._handle_select)
        self.relations_layer.events.off(
            EventType.CREATE_RELATION, self._handle_edit_relation
        )
        self.relations_layer.events.off(
            EventType.SELECT_RELATION, self._handle_edit_relation
        )
        self.relations_layer.events.off(
            EventType.CANCEL_DRAWING, self._handle_cancel_drawing
        )
        if self.keyboard is not None:
            self.keyboard.events.off(EventType.KEYDOWN, self._handle_keydown)

        self._active = False
        logger.debug("Annotation controller closed")

    def __enter__(self):
        return self.activate()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def active(self) -> bool:
        return self._active

    # State

    def _commit(self, action: Action) -> ControllerState:
        previous = self.state
        self.state = transition(previous, action)
        logger.debug(
            "Committed %s: %s", action.action_type.value, self.state.to_dict()
        )
        self.events.emit(
            AnnotationEvent(
                EventType.STATE_CHANGED,
                {"action": action, "state": self.state, "previous": previous},
            )
        )
        return self.state

    def _enable_selection(self):
        # The selection detector stays off while drawing relations
        if self.state.mode != Mode.RELATIONS:
            self.selection_handler.enabled = True

    def _clear_state(self):
        """Close the annotation editor."""
        self._commit(Action.clear_annotation())
        self._enable_selection()

    def on_changed(self):
        """Disable selection outside of the editor after the first change."""
        self.selection_handler.enabled = False

    # Selection

    def _handle_select(self, event: AnnotationEvent):
        self.handle_select(event.data.get("selection"), event.data.get("element"))

    def handle_select(self, selection, element=None):
        """
        Handle a selection on the text.

        Args:
            selection: Existing annotation, fresh selection, or None
            element: Element the selection was made on
        """
        if selection is None:
            self._clear_state()
        elif self.state.editor_disabled:
            self._on_headless_select(selection, element)
        else:
            self._on_normal_select(selection, element)

    def _on_normal_select(self, selection, element):
        # Two commits, so the editor is rebuilt instead of rebound
        self._commit(Action.clear_annotation())
        self._commit(Action.select_annotation(selection, element))

        if not selection.is_selection:
            self.host.on_annotation_selected(selection.clone(), element)

    def _on_headless_select(self, selection, element):
        if not selection.is_selection:
            # Selection of existing annotation
            self.host.on_annotation_selected(selection.clone(), element)
        else:
            # Text selection becomes an annotation right away
            undrafted = selection.clone(bodies=strip_drafts(selection.bodies))
            self.create_annotation(undrafted.to_annotation())

    # Annotation CRUD

    def create_annotation(self, annotation, previous=None):
        """'Ok' on the editor for a new annotation."""
        return self._create_or_update_annotation(
            "on_annotation_created", annotation, previous
        )

    def update_annotation(self, annotation, previous=None):
        """'Ok' on the editor for an existing annotation."""
        return self._create_or_update_annotation(
            "on_annotation_updated", annotation, previous
        )

    def _create_or_update_annotation(
        self, method: str, annotation, previous=None
    ) -> Annotation:
        """Common handler for annotation CREATE or UPDATE."""
        if annotation.is_selection:
            annotation = annotation.to_annotation()

        updated = annotation.clone()
        self.highlighter.add_or_update_annotation(updated, previous)

        if method == "on_annotation_created":
            self.host.on_annotation_created(
                updated.clone(), self.override_annotation_id(updated)
            )
        else:
            self.host.on_annotation_updated(
                updated.clone(), previous.clone() if previous is not None else None
            )

        if not self.state.editor_disabled:
            spans = self.highlighter.find_annotation_spans(updated)
            if spans:
                self._commit(Action.select_annotation(updated, spans[0]))
            else:
                logger.debug("No rendered span for %s, closing editor", updated.id)
                self._clear_state()

        return updated

    def _is_rendered(self, annotation) -> bool:
        if annotation.is_selection:
            return False
        return any(a.id == annotation.id for a in self.highlighter.get_all_annotations())

    def _is_selected(self, annotation) -> bool:
        selected = self.state.selected_annotation
        if selected is None:
            return False
        return selected is annotation or annotation.is_equal(selected)

    def delete_annotation(self, annotation):
        """'Delete' on the annotation editor."""
        if self._is_rendered(annotation) or self._is_selected(annotation):
            # Delete connections first, relations must not dangle
            self.relations_layer.destroy_connections_for(annotation)

            self._clear_state()
            self.selection_handler.clear_selection()
            self.highlighter.remove_annotation(annotation)
        else:
            logger.debug("Annotation is not rendered, nothing to remove")

        self.host.on_annotation_deleted(annotation.clone())

    def cancel_annotation(self, annotation=None):
        """
        Cancel button on the annotation editor.

        The host receives the annotation being edited, or None if it was
        a selection that was never confirmed.
        """
        if annotation is None:
            annotation = self.state.selected_annotation

        self._clear_state()
        self.selection_handler.clear_selection()

        if annotation is None or annotation.is_selection:
            self.host.on_cancel_selected(None)
        else:
            self.host.on_cancel_selected(annotation.clone())

    def _handle_keydown(self, event: AnnotationEvent):
        data = event.data
        if data.get("key") in ESCAPE_KEYS or data.get("which") == ESCAPE_KEYCODE:
            # Only the annotation editor reacts to Escape
            if self.state.annotation_editor_open:
                self.cancel_annotation()

    # Relation CRUD

    def _handle_edit_relation(self, event: AnnotationEvent):
        self.edit_relation(event.data["relation"])

    def _handle_cancel_drawing(self, event: AnnotationEvent):
        self.close_relations_editor()

    def edit_relation(self, relation: Relation):
        """Open an existing or newly drawn relation for editing."""
        self._commit(Action.edit_relation(relation))

    def close_relations_editor(self):
        self._commit(Action.clear_relation())
        self.relations_layer.reset_drawing()

    def create_or_update_relation(self, relation: Relation, previous=None):
        """'Ok' on the relation editor popup."""
        self.relations_layer.add_or_update_relation(relation, previous)
        self.close_relations_editor()

        # The editor reports creation and update the same way. An empty
        # previous relation means this one was just drawn.
        # TODO: a relation updated to zero bodies is reported as created on its
        # next edit; needs a creation marker from the relations layer.
        is_new = previous is None or len(previous.annotation.bodies) == 0

        if is_new:
            self.host.on_annotation_created(
                relation.annotation.clone(),
                self.override_relation_id(relation.id, relation.annotation.clone()),
            )
        else:
            self.host.on_annotation_updated(
                relation.annotation.clone(), previous.annotation.clone()
            )

    def delete_relation(self, relation: Relation):
        """'Delete' on the relation editor popup."""
        self.relations_layer.remove_relation(relation)
        self.close_relations_editor()
        self.host.on_annotation_deleted(relation.annotation.clone())

    # Id reconciliation

    def override_annotation_id(self, original: Annotation) -> IdOverride:
        """
        Let the host replace the autogenerated id of an annotation.

        Usually the override arrives right after creation, but it may come
        with considerable delay, after further edits, after the annotation
        was deleted, or after relations to it were drawn.

        Args:
            original: Annotation as it was created

        Returns:
            Override request, resolved with ``apply(forced_id)``
        """
        return IdOverride(
            original.id, self._override_annotation_id, target=original.clone()
        )

    def _override_annotation_id(self, original_id: str, forced_id: str):
        # Force the editors to close first, otherwise their annotations
        # will be orphaned
        if self.state.editor_open:
            self.relations_layer.reset_drawing()
            self._commit(Action.clear_all())
            self._enable_selection()

        updated = self.highlighter.override_id(original_id, forced_id)
        if updated is None:
            logger.debug("Annotation %s no longer exists", original_id)
            return None

        def update_dependent_relations():
            if self._is_rendered(updated):
                self.relations_layer.override_target_annotation(
                    original_id, forced_id
                )
            else:
                # Deleted before the swap was committed
                logger.debug("Annotation %s deleted, dropping its relations", forced_id)
                self.relations_layer.destroy_connections_for(
                    updated.clone(id=original_id)
                )

        # Relations look up their endpoints on the rendered annotations
        self.highlighter.after_commit(update_dependent_relations)
        return updated

    def override_relation_id(self, original_id: str, target=None) -> IdOverride:
        """
        Let the host replace the autogenerated id of a relation.

        Relations have no dependents, only the relation editor needs to be
        closed if it is open on this relation.
        """
        return IdOverride(original_id, self._override_relation_id, target=target)

    def _override_relation_id(self, original_id: str, forced_id: str):
        selected = self.state.selected_relation
        if selected is not None and selected.id == original_id:
            self._commit(Action.clear_relation())
        self.relations_layer.override_relation_id(original_id, forced_id)

    # External API

    def add_annotation(self, annotation: Annotation):
        self.highlighter.add_or_update_annotation(annotation.clone())

    def get_annotations(self) -> List[Annotation]:
        """All annotations, relations included, as detached clones."""
        annotations = self.highlighter.get_all_annotations()
        relations = [r.annotation for r in self.relations_layer.get_all_relations()]
        return [a.clone() for a in annotations + relations]

    def remove_annotation(self, annotation: Annotation):
        self.relations_layer.destroy_connections_for(annotation)
        self.highlighter.remove_annotation(annotation)

        # If the editor is currently open on this annotation, close it
        if self._is_selected(annotation):
            self._clear_state()

        # Same for a relation editor open on one of the destroyed relations
        selected = self.state.selected_relation
        if (
            selected is not None
            and not annotation.is_selection
            and selected.references(annotation.id)
        ):
            self._commit(Action.clear_relation())

    def select_annotation(self, annotation: Optional[Annotation] = None):
        """
        Select an annotation programmatically, or deselect.

        Returns:
            The selected annotation, or None
        """
        # De-select in any case
        self._commit(Action.clear_annotation())

        if annotation is None:
            return None

        spans = self.highlighter.find_annotation_spans(annotation)
        if not spans:
            return None

        self._commit(Action.select_annotation(spans[0].annotation, spans[0]))
        return spans[0].annotation.clone()

    async def set_annotations(self, annotations: List[Annotation]):
        """Replace all annotations and relations."""
        self.highlighter.clear()
        self.relations_layer.clear()

        clones = [a.clone() for a in annotations]

        # Relations need their endpoint annotations in place
        await self.highlighter.init(clones)
        await self.relations_layer.init(clones)
        logger.debug("Loaded %d annotations", len(clones))

    def set_mode(self, mode):
        mode = Mode.parse(mode)
        self._commit(Action.set_mode(mode))

        if mode == Mode.RELATIONS:
            self.selection_handler.enabled = False

            self.relations_layer.read_only = False
            self.relations_layer.start_drawing()
        else:
            self.selection_handler.enabled = True

            self.relations_layer.read_only = True
            self.relations_layer.stop_drawing()

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def disable_select(self) -> bool:
        return not self.selection_handler.enabled

    @disable_select.setter
    def disable_select(self, disable: bool):
        if self.content_el is not None:
            if disable:
                self.content_el.class_list.add(NOSELECT_CLASS)
            else:
                self.content_el.class_list.discard(NOSELECT_CLASS)

        self.selection_handler.enabled = not disable

    @property
    def read_only(self) -> bool:
        return self.state.read_only

    @read_only.setter
    def read_only(self, read_only: bool):
        self.selection_handler.read_only = read_only
        # The relations layer follows the mode, see set_mode
        self._commit(Action.set_read_only(read_only))

    @property
    def widgets(self):
        return list(self.state.widgets)

    @widgets.setter
    def widgets(self, widgets):
        self._commit(Action.set_widgets(widgets))

    @property
    def disable_editor(self) -> bool:
        return self.state.editor_disabled

    @disable_editor.setter
    def disable_editor(self, disabled: bool):
        self._commit(Action.set_editor_disabled(disabled))

    # Editors

    def render(self) -> Optional[EditorProps]:
        """Props of the editor popup to show, or None."""
        state = self.state
        # The editor opens when something is selected, unless headless
        if not state.editor_open or state.editor_disabled:
            return None

        if state.selected_annotation is not None:
            return EditorProps(
                "annotation",
                {
                    "annotation": state.selected_annotation,
                    "selected_element": state.selected_dom_element,
                    "auto_position": self.cfg.editor_auto_position,
                    "read_only": state.read_only
                    or bool(state.selected_annotation.read_only),
                    "allow_empty": self.cfg.allow_empty,
                    "widgets": list(state.widgets),
                    "on_changed": self.on_changed,
                    "on_annotation_created": self.create_annotation,
                    "on_annotation_updated": self.update_annotation,
                    "on_annotation_deleted": self.delete_annotation,
                    "on_cancel": self.cancel_annotation,
                },
            )

        return EditorProps(
            "relation",
            {
                "relation": state.selected_relation,
                "vocabulary": self.cfg.relation_vocabulary,
                "on_relation_created": self.create_or_update_relation,
                "on_relation_updated": self.create_or_update_relation,
                "on_relation_deleted": self.delete_relation,
                "on_cancel": self.close_relations_editor,
            },
        )
