"""depupdate - update npm dependencies under per-package policies

Reads the nearest package.json, resolves every dependency of the selected
groups against its version catalog, optionally asks the operator to pick a
version, writes the manifest back and re-installs from scratch.

    Returns:
        int: Exit code
"""
import logging
import os
import sys
from dataclasses import replace

from args import parse_args
from cli_config import load_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from errors import DepUpdateError, InstallError, ManifestError
from installer import run_install
from registry.npm.catalog import make_catalog_client
from registry.npm.manifest import find_package_json, read_manifest, write_manifest
from report import ReportPrinter
from selector import VersionSelector
from updater import Updater
from versioning.models import AskScope

logger = logging.getLogger(__name__)


def _report_error(exc: DepUpdateError) -> None:
    logging.error("%s", exc)
    if exc.hint:
        logging.error("Hint: %s", exc.hint)


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        manifest = read_manifest(find_package_json())
    except ManifestError as exc:
        _report_error(exc)
        return ExitCodes.FILE_ERROR.value

    project_dir = os.path.dirname(manifest.path)
    config = load_config(project_dir, args)
    if config.ask is not AskScope.NONE and not sys.stdin.isatty():
        logging.warning("Ask mode needs an interactive terminal, continuing without it.")
        config = replace(config, ask=AskScope.NONE)

    printer = ReportPrinter()
    updater = Updater(
        config,
        make_catalog_client(config.catalog, config.tool, config.registry_url),
        selector=VersionSelector() if config.ask is not AskScope.NONE else None,
        printer=printer,
    )

    try:
        outcomes = updater.update_manifest(manifest)
    except KeyboardInterrupt:
        logging.warning("Interrupted, package.json left unchanged.")
        return ExitCodes.INTERRUPTED.value

    try:
        write_manifest(manifest)
    except ManifestError as exc:
        _report_error(exc)
        return ExitCodes.FILE_ERROR.value

    if config.install != "none":
        printer.line("= Installing =")
    try:
        run_install(config, project_dir)
    except InstallError as exc:
        _report_error(exc)
        return ExitCodes.INSTALL_ERROR.value
    except OSError as exc:
        logging.error("Could not clean %s: %s", project_dir, exc)
        return ExitCodes.FILE_ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="main",
                outcome="success",
                count=len(outcomes),
            )
        )
    return ExitCodes.SUCCESS.value


def cli():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
