import asyncio
import json
import logging
from gettext import gettext as _

from text_annotator.core.annotation.utils import load_annotations, save_annotations
from text_annotator.interfaces import build_memory_controller

logger = logging.getLogger(__name__)


def load_mapping(path):
    with open(path, "r", encoding="utf-8") as f:
        mapping = json.load(f)
    if not isinstance(mapping, dict):
        raise ValueError(_("Id mapping must be a JSON object"))
    return {str(k): str(v) for k, v in mapping.items()}


def reconcile(controller, mapping):
    """
    Apply an id mapping through the controller's override requests.

    Returns:
        Number of ids replaced
    """
    by_id = {a.id: a for a in controller.get_annotations()}
    replaced = 0
    for local_id, permanent_id in mapping.items():
        annotation = by_id.get(local_id)
        if annotation is None:
            logger.warning(_("No annotation with id {id}").format(id=local_id))
            continue

        if annotation.is_relation:
            request = controller.override_relation_id(local_id, annotation)
        else:
            request = controller.override_annotation_id(annotation)
        request.apply(permanent_id)
        replaced += 1
    return replaced


def handle(args):
    annotations = load_annotations(args.input)
    mapping = load_mapping(args.mapping)

    controller = build_memory_controller()
    try:
        asyncio.run(controller.set_annotations(annotations))
        replaced = reconcile(controller, mapping)
        save_annotations(controller.get_annotations(), args.output)
    finally:
        controller.close()

    logger.info(
        _("Replaced {n} ids, wrote {path}").format(n=replaced, path=args.output)
    )
    return 0
