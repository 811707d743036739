"""
Interfaces of the components the controller talks to.

The controller only relies on the methods declared here; rendering,
hit-testing and input handling live in the implementations.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from .events import EventEmitter
from .model import Annotation, Relation


class Highlighter(ABC):
    """Maps annotation identity to rendered spans."""

    @abstractmethod
    async def init(self, annotations: List[Annotation]):
        """Render an initial annotation set."""

    @abstractmethod
    def clear(self):
        pass

    @abstractmethod
    def add_or_update_annotation(
        self, annotation: Annotation, previous: Optional[Annotation] = None
    ):
        """Add ``annotation``, replacing ``previous`` (or its own id) in place."""

    @abstractmethod
    def remove_annotation(self, annotation: Annotation):
        pass

    @abstractmethod
    def override_id(self, original_id: str, forced_id: str) -> Optional[Annotation]:
        """Swap an id, returning the updated annotation or None if unknown."""

    @abstractmethod
    def find_annotation_spans(self, annotation: Annotation) -> List[Any]:
        """Rendered spans of an annotation; each span has an ``annotation``."""

    @abstractmethod
    def get_all_annotations(self) -> List[Annotation]:
        pass

    @abstractmethod
    def after_commit(self, callback: Callable[[], None]):
        """Run ``callback`` once pending visual updates have been committed."""


class SelectionHandler(ABC):
    """Turns raw input into SELECT events."""

    events: EventEmitter
    enabled: bool
    read_only: bool

    @abstractmethod
    def clear_selection(self):
        """Drop the pending raw selection."""


class RelationsLayer(ABC):
    """Maps relation identity to rendered connectors."""

    events: EventEmitter
    read_only: bool

    @abstractmethod
    async def init(self, annotations: List[Annotation]):
        """Connect the relation-shaped annotations of an initial set."""

    @abstractmethod
    def clear(self):
        pass

    @abstractmethod
    def add_or_update_relation(
        self, relation: Relation, previous: Optional[Relation] = None
    ):
        pass

    @abstractmethod
    def remove_relation(self, relation: Relation):
        pass

    @abstractmethod
    def destroy_connections_for(self, annotation: Annotation):
        """Remove every relation with an endpoint on ``annotation``."""

    @abstractmethod
    def override_target_annotation(self, original_id: str, forced_id: str):
        """Rewrite endpoint references from ``original_id`` to ``forced_id``."""

    @abstractmethod
    def override_relation_id(self, original_id: str, forced_id: str):
        pass

    @abstractmethod
    def get_all_relations(self) -> List[Relation]:
        pass

    @abstractmethod
    def start_drawing(self):
        pass

    @abstractmethod
    def stop_drawing(self):
        pass

    @abstractmethod
    def reset_drawing(self):
        """Drop the connector currently being drawn, if any."""


class AnnotatorHost:
    """
    Callbacks into the host application.

    All arguments are detached clones. Subclass and override what you need.
    """

    def on_annotation_selected(self, annotation: Annotation, element):
        pass

    def on_annotation_created(self, annotation: Annotation, id_override):
        pass

    def on_annotation_updated(self, annotation: Annotation, previous):
        pass

    def on_annotation_deleted(self, annotation: Annotation):
        pass

    def on_cancel_selected(self, annotation: Optional[Annotation]):
        pass
