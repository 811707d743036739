"""
State management for the annotation controller.

The controller state is an immutable value. Every change goes through
``transition(state, action)``, which returns the next state and keeps the
editor invariants:

- an annotation and a relation are never selected at the same time
- a selected DOM element exists exactly when an annotation is selected
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .model import Annotation, Relation, Selection


class StateTransitionError(ValueError):
    """Raised when an action would break a controller state invariant."""


class Mode(Enum):
    NORMAL = "NORMAL"
    HEADLESS = "HEADLESS"
    RELATIONS = "RELATIONS"

    @classmethod
    def parse(cls, value: Union["Mode", str]) -> "Mode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown mode: {value!r}") from None


class ActionType(Enum):
    SELECT_ANNOTATION = "select_annotation"
    CLEAR_ANNOTATION = "clear_annotation"
    EDIT_RELATION = "edit_relation"
    CLEAR_RELATION = "clear_relation"
    CLEAR_ALL = "clear_all"
    SET_MODE = "set_mode"
    SET_READ_ONLY = "set_read_only"
    SET_WIDGETS = "set_widgets"
    SET_EDITOR_DISABLED = "set_editor_disabled"


@dataclass(frozen=True)
class Action:
    """A requested state change."""

    action_type: ActionType
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def select_annotation(cls, annotation, element) -> "Action":
        return cls(
            ActionType.SELECT_ANNOTATION,
            {"annotation": annotation, "element": element},
        )

    @classmethod
    def clear_annotation(cls) -> "Action":
        return cls(ActionType.CLEAR_ANNOTATION)

    @classmethod
    def edit_relation(cls, relation: Relation) -> "Action":
        return cls(ActionType.EDIT_RELATION, {"relation": relation})

    @classmethod
    def clear_relation(cls) -> "Action":
        return cls(ActionType.CLEAR_RELATION)

    @classmethod
    def clear_all(cls) -> "Action":
        return cls(ActionType.CLEAR_ALL)

    @classmethod
    def set_mode(cls, mode: Mode) -> "Action":
        return cls(ActionType.SET_MODE, {"mode": mode})

    @classmethod
    def set_read_only(cls, read_only: bool) -> "Action":
        return cls(ActionType.SET_READ_ONLY, {"read_only": read_only})

    @classmethod
    def set_widgets(cls, widgets) -> "Action":
        return cls(ActionType.SET_WIDGETS, {"widgets": tuple(widgets or ())})

    @classmethod
    def set_editor_disabled(cls, disabled: bool) -> "Action":
        return cls(ActionType.SET_EDITOR_DISABLED, {"disabled": disabled})


@dataclass(frozen=True)
class ControllerState:
    """Complete state of the annotation controller."""

    selected_annotation: Optional[Union[Annotation, Selection]] = None
    selected_dom_element: Any = None
    selected_relation: Optional[Relation] = None
    mode: Mode = Mode.NORMAL
    read_only: bool = False
    editor_disabled: bool = False
    widgets: Tuple[Any, ...] = ()

    @property
    def annotation_editor_open(self) -> bool:
        return self.selected_annotation is not None

    @property
    def relation_editor_open(self) -> bool:
        return self.selected_relation is not None

    @property
    def editor_open(self) -> bool:
        return self.annotation_editor_open or self.relation_editor_open

    def to_dict(self):
        """Convert to dictionary for logging and debugging."""
        annotation = self.selected_annotation
        return {
            "selected_annotation": (
                None
                if annotation is None
                else ("<selection>" if annotation.is_selection else annotation.id)
            ),
            "selected_relation": (
                None if self.selected_relation is None else self.selected_relation.id
            ),
            "mode": self.mode.value,
            "read_only": self.read_only,
            "editor_disabled": self.editor_disabled,
            "num_widgets": len(self.widgets),
        }


def _select_annotation(state: ControllerState, payload) -> ControllerState:
    annotation, element = payload["annotation"], payload["element"]
    if annotation is None:
        raise StateTransitionError("Cannot select a missing annotation")
    if element is None:
        raise StateTransitionError(
            "An annotation can only be selected together with its element"
        )
    return replace(
        state,
        selected_annotation=annotation,
        selected_dom_element=element,
        selected_relation=None,
    )


def _clear_annotation(state: ControllerState, payload) -> ControllerState:
    return replace(state, selected_annotation=None, selected_dom_element=None)


def _edit_relation(state: ControllerState, payload) -> ControllerState:
    if payload["relation"] is None:
        raise StateTransitionError("Cannot edit a missing relation")
    return replace(
        state,
        selected_annotation=None,
        selected_dom_element=None,
        selected_relation=payload["relation"],
    )


def _clear_relation(state: ControllerState, payload) -> ControllerState:
    return replace(state, selected_relation=None)


def _clear_all(state: ControllerState, payload) -> ControllerState:
    return replace(
        state,
        selected_annotation=None,
        selected_dom_element=None,
        selected_relation=None,
    )


def _set_mode(state: ControllerState, payload) -> ControllerState:
    mode = payload["mode"]
    if mode == Mode.RELATIONS:
        # Entering relations mode closes the annotation editor
        return replace(
            state, mode=mode, selected_annotation=None, selected_dom_element=None
        )
    if state.mode == Mode.RELATIONS:
        # Leaving relations mode closes the relation editor and returns to
        # the headless setting in place before, unless HEADLESS is asked for
        disabled = state.editor_disabled or mode == Mode.HEADLESS
    else:
        disabled = mode == Mode.HEADLESS
    return replace(
        state,
        mode=Mode.HEADLESS if disabled else Mode.NORMAL,
        selected_relation=None,
        editor_disabled=disabled,
    )


def _set_read_only(state: ControllerState, payload) -> ControllerState:
    return replace(state, read_only=bool(payload["read_only"]))


def _set_widgets(state: ControllerState, payload) -> ControllerState:
    return replace(state, widgets=payload["widgets"])


def _set_editor_disabled(state: ControllerState, payload) -> ControllerState:
    disabled = bool(payload["disabled"])
    if state.mode == Mode.RELATIONS:
        return replace(state, editor_disabled=disabled)
    return replace(
        state,
        editor_disabled=disabled,
        mode=Mode.HEADLESS if disabled else Mode.NORMAL,
    )


_TRANSITIONS: Dict[ActionType, Callable[[ControllerState, Dict], ControllerState]] = {
    ActionType.SELECT_ANNOTATION: _select_annotation,
    ActionType.CLEAR_ANNOTATION: _clear_annotation,
    ActionType.EDIT_RELATION: _edit_relation,
    ActionType.CLEAR_RELATION: _clear_relation,
    ActionType.CLEAR_ALL: _clear_all,
    ActionType.SET_MODE: _set_mode,
    ActionType.SET_READ_ONLY: _set_read_only,
    ActionType.SET_WIDGETS: _set_widgets,
    ActionType.SET_EDITOR_DISABLED: _set_editor_disabled,
}


def transition(state: ControllerState, action: Action) -> ControllerState:
    """Compute the state following ``action``."""
    return _TRANSITIONS[action.action_type](state, action.payload)


def initial_state(cfg) -> ControllerState:
    """Build the initial state from an annotator configuration."""
    disabled = bool(cfg.get("disable_editor", False))
    return ControllerState(
        mode=Mode.HEADLESS if disabled else Mode.NORMAL,
        read_only=bool(cfg.get("read_only", False)),
        editor_disabled=disabled,
        widgets=tuple(cfg.get("widgets") or ()),
    )
