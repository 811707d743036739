import asyncio
import logging
from gettext import gettext as _

from text_annotator.core.annotation.config import make_config
from text_annotator.core.annotation.model import Relation
from text_annotator.core.annotation.utils import (
    body_values,
    is_local_id,
    load_annotations,
)
from text_annotator.interfaces import build_memory_controller
from text_annotator.utils.misc import incrf

logger = logging.getLogger(__name__)


def describe(annotation) -> str:
    values = ", ".join(body_values(annotation)) or "-"
    marker = " *" if is_local_id(annotation.id) else ""
    if annotation.is_relation:
        start, end = Relation(annotation).endpoints
        return f"{annotation.id}{marker} [{start} -> {end}] {values}"
    return f"{annotation.id}{marker} {values}"


def handle(args):
    annotations = load_annotations(args.input)
    logger.debug(
        _("Read {n} annotations from {path}").format(n=len(annotations), path=args.input)
    )

    controller = build_memory_controller(config=make_config(read_only=True))
    try:
        asyncio.run(controller.set_annotations(annotations))
        loaded = controller.get_annotations()
        skipped = list(controller.relations_layer.skipped)
    finally:
        controller.close()

    if args.ids_only:
        for annotation in loaded:
            print(annotation.id)
        return 0

    texts = [a for a in loaded if not a.is_relation]
    relations = [a for a in loaded if a.is_relation]

    counter = incrf()
    print(_("Annotations: {n}").format(n=len(texts)))
    for annotation in texts:
        print(f"  {next(counter)}. {describe(annotation)}")

    print(_("Relations: {n}").format(n=len(relations)))
    for annotation in relations:
        print(f"  {next(counter)}. {describe(annotation)}")

    if skipped:
        print(_("Dangling relations: {n}").format(n=len(skipped)))
        for annotation in skipped:
            print(f"  - {describe(annotation)}")
        return 1
    return 0
