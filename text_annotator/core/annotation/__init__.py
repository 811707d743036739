"""
Core annotation module - UI-agnostic annotation lifecycle.

This module provides the controller that decides which editor is open,
turns selection and relation events into create/update/delete operations
and reconciles local ids with ids issued by the host application.
"""

from .controller import AnnotationController, EditorProps
from .events import AnnotationEvent, EventType, EventEmitter
from .identity import IdOverride
from .model import Annotation, Relation, Selection
from .state import (
    Action,
    ActionType,
    ControllerState,
    Mode,
    StateTransitionError,
    transition,
)

__all__ = [
    "AnnotationController",
    "EditorProps",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "IdOverride",
    "Annotation",
    "Relation",
    "Selection",
    "Action",
    "ActionType",
    "ControllerState",
    "Mode",
    "StateTransitionError",
    "transition",
]
