import text_annotator.utils.i18n  # noqa: F401

"""CLI interface for text_annotator project.

Subcommands live in packages beside this module, each exposing
``COMMAND_DESCRIPTION`` and ``command(subparser)``.
"""

import importlib
import logging
import sys
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path

from text_annotator.utils.misc import read_version

logger = logging.getLogger(__name__)


def add_subcommand(subparsers, name: str, submodule):
    subparser = subparsers.add_parser(name, help=submodule.COMMAND_DESCRIPTION)
    common_flags(subparser)
    handler = submodule.command(subparser)
    subparser.set_defaults(fn=handler)


def common_flags(parser):
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help=_("Give more details about what is happening"),
    )  # noqa: E501
    parser.add_argument(
        "-V",
        "--version",
        dest="is_show_version",
        action="store_true",
        help=_("Print version and exit"),
    )  # noqa: E501


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="text_annotator", formatter_class=ArgumentDefaultsHelpFormatter
    )
    common_flags(parser)
    subparsers = parser.add_subparsers()

    for module in sorted(Path(__file__).parent.glob("*/__init__.py")):
        if str(module).find("pycache") > 0:
            continue
        module_name = module.parent.name
        subcommand_module = importlib.import_module(
            f"text_annotator.cli.{module_name}"
        )
        add_subcommand(subparsers, module_name, subcommand_module)

    return parser


def main(argv=None):
    """
    The main function executes on commands:
    `python -m text_annotator` and `$ text_annotator `.
    """
    logging.basicConfig()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)

    version = read_version()
    if args.is_show_version:
        print(version)
        return 0
    logger.debug(f"{_('Starting')} text_annotator v{version}")

    fn = args.__dict__.get("fn")
    args.__dict__["fn"] = None
    if fn is not None:
        return fn(args)

    parser.print_help()
    return 0
