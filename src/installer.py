"""Clean re-install through the configured package manager.

Lock files and ``node_modules`` are removed first so the freshly written
manifest is installed from scratch.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import Any, Callable, List, Optional

from cli_config import UpdaterConfig
from common.logging_utils import extra_context, Timer
from constants import Constants
from errors import InstallError

logger = logging.getLogger(__name__)


def clean_project(project_dir: str) -> None:
    """Delete lock files and node_modules, ignoring ones that do not exist."""
    for lock_file in Constants.LOCK_FILES:
        path = os.path.join(project_dir, lock_file)
        if os.path.isfile(path):
            os.remove(path)
            logger.debug("Removed %s", path)
    shutil.rmtree(os.path.join(project_dir, Constants.NODE_MODULES_DIR), ignore_errors=True)


def _shared_install_args(config: UpdaterConfig) -> List[str]:
    args = []
    if config.cli.force:
        args.append("--force")
    if config.cli.global_install:
        args.append("--global")
    if config.cli.ignore_scripts:
        args.append("--ignore-scripts")
    if config.cli.loglevel != "notice":
        args.append(f"--loglevel={config.cli.loglevel}")
    return args


def build_commands(config: UpdaterConfig) -> List[List[str]]:
    """Command lines to run, in order, for the configured tool."""
    tool = config.tool.split()
    install = tool + ["install"] + _shared_install_args(config)
    commands = [install]

    if config.tool == "npm":
        if config.install == "prod":
            install.append("--omit=dev")
        if config.dedupe:
            install.append("--prefer-dedupe")
        if config.cli.foreground_scripts:
            install.append("--foreground-scripts")
        if config.cli.fund_hide:
            install.append("--no-fund")
        if config.cli.legacy:
            install.append("--legacy-peer-deps")
    elif config.tool.endswith("pnpm"):
        dedupe = tool + ["dedupe"]
        if config.install == "prod":
            install.append("--prod")
            dedupe.append("--prod")
        if config.cli.global_install:
            dedupe.append("--global")
        if config.cli.legacy:
            install.append("--strict-peer-dependencies=false")
            dedupe.append("--strict-peer-dependencies=false")
        if config.dedupe:
            commands.append(dedupe)
    elif config.tool.endswith("bun"):
        if config.install == "prod":
            install.append("--omit=dev")
        if config.cli.legacy:
            install.append("--strict-peer-dependencies=false")

    if config.audit and not config.tool.endswith("bun"):
        audit = tool + ["audit", "fix"]
        if config.tool == "npm" and config.cli.fund_hide:
            audit.append("--no-fund")
        commands.append(audit)
    return commands


def run_install(
    config: UpdaterConfig,
    project_dir: str,
    runner: Optional[Callable[..., Any]] = None,
) -> None:
    """Clean the project and run the install commands.

    Raises:
        InstallError: If a package manager command cannot start or exits
            with a non-zero status.
    """
    run = runner or subprocess.run
    clean_project(project_dir)
    if config.install == "none":
        logger.info("Skipping install, lock files and node_modules removed.")
        return
    for command in build_commands(config):
        logger.debug("Running %s", " ".join(command))
        with Timer() as t:
            try:
                run(command, cwd=project_dir, check=True)
            except FileNotFoundError as exc:
                raise InstallError(
                    f"{command[0]} is not installed",
                    hint="Set 'tool' in depupdate.yml to an available package manager.",
                ) from exc
            except subprocess.CalledProcessError as exc:
                raise InstallError(
                    f"'{' '.join(command)}' exited with status {exc.returncode}"
                ) from exc
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="subprocess",
                component="installer",
                action=command[1] if len(command) > 1 else command[0],
                outcome="success",
                duration_ms=t.duration_ms(),
            ),
        )
