"""
Example host application for the annotation controller.

This demonstrates how a host wires its persistence layer to the
controller callbacks, and answers creations with permanent ids.

Usage:
    pip install -e .
    python examples/host_example.py
"""

import asyncio
import logging
import uuid

from text_annotator.core.annotation import Annotation, Selection
from text_annotator.core.annotation.collaborators import AnnotatorHost
from text_annotator.interfaces import build_memory_controller

logger = logging.getLogger("host_example")


class BackendHost(AnnotatorHost):
    """Pretends to store annotations on a server."""

    def __init__(self):
        self.saved = {}

    def on_annotation_created(self, annotation, id_override):
        permanent_id = f"https://example.org/annotations/{uuid.uuid4().hex[:8]}"
        self.saved[permanent_id] = annotation.clone(id=permanent_id)
        logger.info("Stored %s as %s", annotation.id, permanent_id)
        id_override.apply(permanent_id)

    def on_annotation_updated(self, annotation, previous):
        self.saved[annotation.id] = annotation
        logger.info("Updated %s", annotation.id)

    def on_annotation_deleted(self, annotation):
        self.saved.pop(annotation.id, None)
        logger.info("Deleted %s", annotation.id)


def main():
    logging.basicConfig(level=logging.INFO)

    host = BackendHost()
    controller = build_memory_controller(host=host)
    controller.disable_editor = True

    existing = Annotation(
        id="https://example.org/annotations/intro",
        bodies=[{"type": "TextualBody", "value": "Introduction"}],
        target={"selector": [{"type": "TextPositionSelector", "start": 0, "end": 12}]},
    )
    asyncio.run(controller.set_annotations([existing]))

    # Headless mode: a text selection is stored right away
    controller.selection_handler.select(
        Selection(
            target={"selector": [{"type": "TextPositionSelector", "start": 20, "end": 31}]},
            bodies=[{"type": "TextualBody", "value": "Key term", "draft": True}],
        ),
        element=None,
    )

    for annotation in controller.get_annotations():
        print(annotation.id, [body["value"] for body in annotation.bodies])

    controller.close()


if __name__ == "__main__":
    main()
