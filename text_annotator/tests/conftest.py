"""
Test fixtures and utilities for text_annotator tests.

Provides a controller wired to in-memory collaborators and a mocked host.
"""

import asyncio

import pytest
from unittest.mock import Mock

from text_annotator.core.annotation import (
    AnnotationController,
    Annotation,
    EventType,
    Relation,
    Selection,
)
from text_annotator.core.annotation.collaborators import AnnotatorHost
from text_annotator.core.annotation.config import make_config
from text_annotator.interfaces import (
    ContentRoot,
    KeyboardSource,
    MemoryHighlighter,
    MemoryRelationsLayer,
    MemorySelectionHandler,
)


@pytest.fixture
def host():
    """Host application with every callback mocked."""
    return Mock(spec=AnnotatorHost)


@pytest.fixture
def config():
    return make_config(env={})


@pytest.fixture
def highlighter():
    return MemoryHighlighter()


@pytest.fixture
def selection_handler():
    return MemorySelectionHandler()


@pytest.fixture
def relations_layer(highlighter):
    return MemoryRelationsLayer(highlighter)


@pytest.fixture
def keyboard():
    return KeyboardSource()


@pytest.fixture
def content_el():
    return ContentRoot("In the beginning was the word")


@pytest.fixture
def controller(
    highlighter, selection_handler, relations_layer, host, config, keyboard, content_el
):
    """Activated controller, closed after the test."""
    controller = AnnotationController(
        highlighter=highlighter,
        selection_handler=selection_handler,
        relations_layer=relations_layer,
        host=host,
        config=config,
        keyboard=keyboard,
        content_el=content_el,
    )
    with controller:
        yield controller


@pytest.fixture
def commits(controller):
    """Every state committed by the controller, in order."""
    states = []
    controller.events.on(
        EventType.STATE_CHANGED, lambda event: states.append(event.data["state"])
    )
    return states


def make_annotation(annotation_id, value="note", start=0, end=5, **kwargs):
    return Annotation(
        id=annotation_id,
        bodies=[{"type": "TextualBody", "purpose": "commenting", "value": value}],
        target={
            "selector": [
                {"type": "TextPositionSelector", "start": start, "end": end}
            ]
        },
        **kwargs,
    )


def make_selection(start=0, end=5, bodies=None):
    return Selection(
        target={
            "selector": [
                {"type": "TextPositionSelector", "start": start, "end": end}
            ]
        },
        bodies=list(bodies or []),
    )


def make_relation(from_annotation, to_annotation, relation_id="#rel-1", label="cites"):
    bodies = [{"type": "TextualBody", "purpose": "tagging", "value": label}]
    return Relation.create(
        from_annotation, to_annotation, bodies=bodies, relation_id=relation_id
    )


def load(controller, annotations):
    asyncio.run(controller.set_annotations(annotations))


def assert_state_invariants(state):
    """Invariants that hold for every committed controller state."""
    assert not (
        state.selected_annotation is not None and state.selected_relation is not None
    ), "Annotation and relation editors open at the same time"
    assert (state.selected_dom_element is None) == (
        state.selected_annotation is None
    ), "Selected element does not match selected annotation"
