# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Replace local annotation ids with permanent ones")


def command(subparser):
    subparser.add_argument("input", type=Path)
    subparser.add_argument(
        "mapping",
        type=Path,
        help=_("JSON object mapping local ids to permanent ids"),
    )
    subparser.add_argument("-o", "--output", dest="output", type=Path, required=True)

    def handle(args):
        from .reconcile import handle as reconcile_handle

        return reconcile_handle(args)

    return handle
