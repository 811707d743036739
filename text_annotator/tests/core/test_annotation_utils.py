"""
Tests for annotation set utilities.
"""

import json

import pytest

from text_annotator.core.annotation.utils import (
    annotations_from_json,
    annotations_to_json,
    body_values,
    find_dangling_relations,
    is_local_id,
    load_annotations,
    save_annotations,
    split_relations,
)

from conftest import make_annotation, make_relation


@pytest.fixture
def annotation_set():
    a, b = make_annotation("a"), make_annotation("b")
    return [a, b, make_relation(a, b).annotation]


def test_from_json_list(annotation_set):
    data = annotations_to_json(annotation_set)
    assert annotations_from_json(data) == annotation_set


def test_from_json_collection(annotation_set):
    data = {"type": "AnnotationCollection", "items": annotations_to_json(annotation_set)}
    assert [a.id for a in annotations_from_json(data)] == ["a", "b", "#rel-1"]


def test_from_json_single_annotation():
    assert annotations_from_json({"id": "x", "body": []})[0].id == "x"


def test_from_json_rejects_scalars():
    with pytest.raises(ValueError):
        annotations_from_json("nope")


def test_save_and_load(tmp_path, annotation_set):
    path = tmp_path / "annotations.json"
    save_annotations(annotation_set, path)

    assert json.loads(path.read_text())[0]["id"] == "a"
    assert load_annotations(path) == annotation_set


def test_split_relations(annotation_set):
    texts, relations = split_relations(annotation_set)
    assert [a.id for a in texts] == ["a", "b"]
    assert [r.endpoints for r in relations] == [("a", "b")]


def test_find_dangling_relations(annotation_set):
    assert find_dangling_relations(annotation_set) == []
    dangling = find_dangling_relations(annotation_set[1:])
    assert [r.id for r in dangling] == ["#rel-1"]


def test_is_local_id():
    assert is_local_id("#5f0c")
    assert not is_local_id("https://example.org/annotations/1")


def test_body_values():
    annotation = make_annotation("a", value="hello")
    annotation.bodies.append({"type": "TextualBody", "value": "x"})
    annotation.bodies.append({"type": "SpecificResource", "source": "http://x"})
    assert body_values(annotation) == ["commenting:hello", "x"]


def test_from_json_relation_with_plain_id_targets(annotation_set):
    data = annotations_to_json(annotation_set[:2])
    data.append({"id": "r", "motivation": "linking", "target": ["a", "z"]})

    dangling = find_dangling_relations(annotations_from_json(data))

    assert [r.endpoints for r in dangling] == [("a", "z")]
