from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("List the annotations and relations of a JSON export")


def command(subparser):
    subparser.add_argument("input", type=Path)
    subparser.add_argument(
        "--ids-only",
        dest="ids_only",
        action="store_true",
        help=_("Only print annotation ids"),
    )

    def handle(args):
        from .inspect_export import handle as inspect_handle

        return inspect_handle(args)

    return handle
