"""
Tests for the annotation data model.
"""

import pytest

from text_annotator.core.annotation.model import (
    LINKING,
    Annotation,
    Relation,
    generate_local_id,
    strip_drafts,
)

from conftest import make_annotation, make_selection


class TestAnnotation:
    def test_clone_is_detached(self):
        annotation = make_annotation("a1")
        clone = annotation.clone()

        clone.bodies[0]["value"] = "changed"
        clone.target["selector"][0]["start"] = 99

        assert annotation.bodies[0]["value"] == "note"
        assert annotation.target["selector"][0]["start"] == 0
        assert clone.id == "a1"

    def test_clone_with_changes(self):
        annotation = make_annotation("a1")
        clone = annotation.clone(id="srv-1")

        assert clone.id == "srv-1"
        assert annotation.id == "a1"
        assert clone.bodies == annotation.bodies

    def test_is_equal_compares_ids(self):
        assert make_annotation("a1").is_equal(make_annotation("a1", value="other"))
        assert not make_annotation("a1").is_equal(make_annotation("a2"))
        assert not make_annotation("a1").is_equal(None)
        assert not make_annotation("a1").is_equal(make_selection())

    def test_w3c_roundtrip(self):
        annotation = make_annotation("a1", read_only=True)
        data = annotation.to_dict()

        assert data["type"] == "Annotation"
        assert data["body"] == annotation.bodies
        assert data["readOnly"] is True
        assert Annotation.from_dict(data) == annotation

    def test_from_dict_single_body(self):
        annotation = Annotation.from_dict(
            {"id": "a1", "body": {"value": "x"}, "target": {"source": "doc"}}
        )
        assert annotation.bodies == [{"value": "x"}]
        assert not annotation.read_only

    def test_from_dict_requires_id(self):
        with pytest.raises(ValueError):
            Annotation.from_dict({"body": []})

    def test_is_relation_shape(self):
        a, b = make_annotation("a"), make_annotation("b")
        relation = Relation.create(a, b)

        assert relation.annotation.is_relation
        assert relation.annotation.motivation == LINKING
        assert not a.is_relation


class TestSelection:
    def test_to_annotation_generates_local_id(self):
        selection = make_selection(bodies=[{"value": "x", "draft": True}])
        annotation = selection.to_annotation()

        assert annotation.id.startswith("#")
        assert annotation.bodies == [{"value": "x", "draft": True}]
        assert not annotation.is_selection
        assert selection.is_selection

    def test_to_annotation_with_id(self):
        assert make_selection().to_annotation("fixed").id == "fixed"

    def test_strip_drafts(self):
        bodies = [{"value": "x", "draft": True}, {"value": "y"}]
        assert strip_drafts(bodies) == [{"value": "x"}, {"value": "y"}]
        # Input is left untouched
        assert bodies[0]["draft"] is True

    def test_local_ids_are_unique(self):
        assert generate_local_id() != generate_local_id()


class TestRelation:
    def test_endpoints(self):
        relation = Relation.create(make_annotation("a"), make_annotation("b"))
        assert relation.endpoints == ("a", "b")
        assert relation.references("a")
        assert not relation.references("c")
        assert relation.id == relation.annotation.id

    def test_with_endpoint_rewrites_references(self):
        relation = Relation.create(
            make_annotation("local-1"), make_annotation("b"), relation_id="r"
        )
        rewritten = relation.with_endpoint("local-1", "srv-9")

        assert rewritten.endpoints == ("srv-9", "b")
        assert relation.endpoints == ("local-1", "b")
        assert rewritten.id == "r"

    def test_self_relation_rewrites_both_ends(self):
        a = make_annotation("local-1")
        rewritten = Relation.create(a, a).with_endpoint("local-1", "srv-9")
        assert rewritten.endpoints == ("srv-9", "srv-9")

    def test_clone_is_detached(self):
        relation = Relation.create(make_annotation("a"), make_annotation("b"))
        clone = relation.clone()
        clone.annotation.bodies.append({"value": "x"})
        assert relation.annotation.bodies == []

    def test_plain_id_targets(self):
        annotation = Annotation.from_dict(
            {"id": "r", "motivation": "linking", "target": ["a", "b"]}
        )
        relation = Relation(annotation)

        assert relation.endpoints == ("a", "b")
        rewritten = relation.with_endpoint("a", "srv-a")
        assert rewritten.annotation.target == ["srv-a", "b"]
        assert annotation.target == ["a", "b"]

    def test_from_dict_rejects_invalid_endpoints(self):
        with pytest.raises(ValueError):
            Annotation.from_dict(
                {"id": "r", "motivation": "linking", "target": [{"source": "a"}, 3]}
            )
