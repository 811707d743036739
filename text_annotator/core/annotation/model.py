"""
Annotation data model.

Contains the entities the controller moves between the selection detector,
the highlight engine, the relations layer and the host application.
Entities are always cloned before being handed over to another component.
"""

import copy
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

W3C_CONTEXT = "http://www.w3.org/ns/anno.jsonld"

LINKING = "linking"


def generate_local_id() -> str:
    """Generate a local, not yet host-confirmed identifier."""
    return f"#{uuid.uuid4()}"


def strip_drafts(bodies: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return copies of the bodies without their draft markers."""
    return [{k: v for k, v in body.items() if k != "draft"} for body in bodies]


def target_id(ref) -> str:
    """Id of a relation endpoint, given as a plain id or as ``{"id": ...}``."""
    if isinstance(ref, str):
        return ref
    if isinstance(ref, dict) and isinstance(ref.get("id"), str):
        return ref["id"]
    raise ValueError(f"Invalid relation endpoint: {ref!r}")


@dataclass
class Annotation:
    """A content-anchored note with bodies and a target."""

    id: str
    bodies: List[Dict[str, Any]] = field(default_factory=list)
    target: Any = None
    motivation: Optional[str] = None
    read_only: bool = False

    is_selection = False

    def clone(self, **changes) -> "Annotation":
        """Deep copy, optionally replacing some fields."""
        cloned = copy.deepcopy(self)
        if changes:
            cloned = replace(cloned, **changes)
        return cloned

    def is_equal(self, other: Optional["Annotation"]) -> bool:
        if other is None or other.is_selection:
            return False
        return self.id == other.id

    @property
    def is_relation(self) -> bool:
        """Relations are annotations linking two endpoint annotations."""
        return (
            self.motivation == LINKING
            and isinstance(self.target, list)
            and len(self.target) == 2
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a W3C Web Annotation dictionary."""
        data = {
            "@context": W3C_CONTEXT,
            "id": self.id,
            "type": "Annotation",
            "body": copy.deepcopy(self.bodies),
            "target": copy.deepcopy(self.target),
        }
        if self.motivation:
            data["motivation"] = self.motivation
        if self.read_only:
            data["readOnly"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Annotation":
        """Create from a W3C Web Annotation dictionary."""
        if "id" not in data:
            raise ValueError("Annotation without id")

        body = data.get("body", [])
        if isinstance(body, dict):
            body = [body]

        annotation = cls(
            id=data["id"],
            bodies=copy.deepcopy(body),
            target=copy.deepcopy(data.get("target")),
            motivation=data.get("motivation"),
            read_only=bool(data.get("readOnly", False)),
        )
        if annotation.is_relation:
            for ref in annotation.target:
                target_id(ref)
        return annotation


@dataclass
class Selection:
    """
    A fresh, unconfirmed text selection.

    Bodies added while the editor is open carry a ``draft`` marker until the
    selection is turned into an annotation.
    """

    target: Any
    bodies: List[Dict[str, Any]] = field(default_factory=list)
    read_only: bool = False

    is_selection = True

    def clone(self, **changes) -> "Selection":
        cloned = copy.deepcopy(self)
        if changes:
            cloned = replace(cloned, **changes)
        return cloned

    def is_equal(self, other) -> bool:
        return other is self

    def to_annotation(self, annotation_id: Optional[str] = None) -> Annotation:
        return Annotation(
            id=annotation_id or generate_local_id(),
            bodies=copy.deepcopy(self.bodies),
            target=copy.deepcopy(self.target),
        )


def _rewrite_ref(ref, forced_id):
    if isinstance(ref, str):
        return forced_id
    return {**ref, "id": forced_id}


@dataclass
class Relation:
    """A typed connector between two annotations."""

    annotation: Annotation

    @property
    def id(self) -> str:
        return self.annotation.id

    @property
    def endpoints(self) -> Tuple[str, str]:
        """Ids of the (from, to) annotations."""
        start, end = self.annotation.target
        return target_id(start), target_id(end)

    def references(self, annotation_id: str) -> bool:
        return annotation_id in self.endpoints

    def clone(self) -> "Relation":
        return Relation(self.annotation.clone())

    def with_endpoint(self, original_id: str, forced_id: str) -> "Relation":
        """Clone with every endpoint reference to ``original_id`` rewritten."""
        target = [
            _rewrite_ref(ref, forced_id)
            if target_id(ref) == original_id
            else copy.deepcopy(ref)
            for ref in self.annotation.target
        ]
        return Relation(self.annotation.clone(target=target))

    @classmethod
    def create(
        cls,
        from_annotation: Annotation,
        to_annotation: Annotation,
        bodies: Optional[List[Dict[str, Any]]] = None,
        relation_id: Optional[str] = None,
    ) -> "Relation":
        return cls(
            Annotation(
                id=relation_id or generate_local_id(),
                bodies=list(bodies or []),
                target=[{"id": from_annotation.id}, {"id": to_annotation.id}],
                motivation=LINKING,
            )
        )
