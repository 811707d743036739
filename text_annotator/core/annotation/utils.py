"""
Pure utility functions for annotation sets.

These functions have no side effects beyond the files they are asked to
read or write, and can be tested in isolation.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from .model import Annotation, Relation


def annotations_from_json(data: Union[List, Dict]) -> List[Annotation]:
    """
    Parse W3C Web Annotations.

    Args:
        data: A list of annotation dicts, or an AnnotationCollection-like
            dict with an ``items`` list

    Returns:
        Parsed annotations, in input order
    """
    if isinstance(data, dict):
        data = data.get("items", [data] if "id" in data else [])
    if not isinstance(data, list):
        raise ValueError("Expected a list of annotations")
    return [Annotation.from_dict(item) for item in data]


def annotations_to_json(annotations: Iterable[Annotation]) -> List[Dict[str, Any]]:
    return [a.to_dict() for a in annotations]


def load_annotations(path: Union[str, Path]) -> List[Annotation]:
    with open(path, "r", encoding="utf-8") as f:
        return annotations_from_json(json.load(f))


def save_annotations(annotations: Iterable[Annotation], path: Union[str, Path]):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(annotations_to_json(annotations), f, indent=2, ensure_ascii=False)
        f.write("\n")


def split_relations(
    annotations: Iterable[Annotation],
) -> Tuple[List[Annotation], List[Relation]]:
    """Separate text annotations from relations."""
    texts, relations = [], []
    for annotation in annotations:
        if annotation.is_relation:
            relations.append(Relation(annotation))
        else:
            texts.append(annotation)
    return texts, relations


def find_dangling_relations(annotations: Iterable[Annotation]) -> List[Relation]:
    """Relations with at least one endpoint missing from the set."""
    texts, relations = split_relations(annotations)
    known = {a.id for a in texts}
    return [r for r in relations if not all(e in known for e in r.endpoints)]


def is_local_id(annotation_id: str) -> bool:
    """Local ids are generated as ``#<uuid>`` until the host replaces them."""
    return annotation_id.startswith("#")


def body_values(annotation: Annotation) -> List[str]:
    """Short text rendition of the bodies, for listings."""
    values = []
    for body in annotation.bodies:
        value = body.get("value")
        if value is None:
            continue
        purpose = body.get("purpose")
        values.append(f"{purpose}:{value}" if purpose else str(value))
    return values
