"""Argument parsing functionality for depupdate."""

import argparse

from cli_config import ASK_LEVELS
from constants import Constants

ASK_HELP = """\
Start in interactive ask mode. Without a value the selector is shown for
every package ("all"). With a value it is only shown for packages in that
state: blocked (can't be updated at all due to overrides or min age), semi
(can be updated, but not to latest), latest (will be updated to latest),
nonlatest (blocked + semi), changed (semi + latest), none."""


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depupdate",
        description=(
            "depupdate - update every dependency in package.json under "
            "per-package policies and a minimum release age"
        ),
        add_help=True,
    )

    parser.add_argument("--ask",
                        dest="ASK",
                        help=ASK_HELP,
                        nargs="?",
                        const="all",
                        default=None,
                        type=str.lower,
                        choices=ASK_LEVELS)
    parser.add_argument("--min-age",
                        dest="MIN_AGE",
                        help="Minimum age in minutes a release must have before it is adopted.",
                        action="store",
                        type=float)
    parser.add_argument("--tool",
                        dest="TOOL",
                        help="Package manager to query and install with (default: auto-detect).",
                        action="store",
                        type=str,
                        choices=Constants.TOOL_CHOICES)
    parser.add_argument("--catalog",
                        dest="CATALOG",
                        help="Where version information comes from: the package manager or the registry API.",
                        action="store",
                        type=str,
                        choices=Constants.CATALOG_SOURCES)
    parser.add_argument("--no-install",
                        dest="NO_INSTALL",
                        help="Only update package.json and remove lock files, do not install.",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help=f"Path to the config file (default: ./{Constants.CONFIG_FILE}).",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
