"""
Event system for the annotation workflow.

Provides a decoupled way for the selection detector, the relations layer
and the keyboard to notify the controller, and for the controller to
notify UI components about state commits, without depending on a specific
UI framework.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during annotation."""

    # Selection detector
    SELECT = "select"

    # Relations layer
    CREATE_RELATION = "createRelation"
    SELECT_RELATION = "selectRelation"
    CANCEL_DRAWING = "cancelDrawing"

    # Keyboard
    KEYDOWN = "keydown"

    # Controller
    STATE_CHANGED = "state_changed"


@dataclass
class AnnotationEvent:
    """Event that occurs during annotation."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if callback in self._listeners.get(event_type, []):
            self._listeners[event_type].remove(callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        # Listeners may unsubscribe while being notified
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                # Log but don't crash on listener errors
                logger.exception("Error in %s listener", event.event_type.value)

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
