"""Runtime configuration: project config file, overrides file and CLI flags.

The result is a single frozen ``UpdaterConfig`` built once at startup and
passed explicitly to every component. Invalid settings are ignored with a
warning so a typo in the config file never stops an update run.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

import yaml

from constants import Constants, Tools
from versioning.models import AskScope

logger = logging.getLogger(__name__)

ASK_LEVELS = [scope.value for scope in AskScope]


@dataclass(frozen=True)
class InstallFlags:
    """Flags forwarded to the package manager install command."""
    force: bool = False
    foreground_scripts: bool = True
    fund_hide: bool = True
    global_install: bool = False
    ignore_scripts: bool = False
    legacy: bool = False
    loglevel: str = "notice"


@dataclass(frozen=True)
class UpdaterConfig:
    """Immutable settings for one update run."""
    ask: AskScope = AskScope.NONE
    audit: bool = False
    dedupe: bool = True
    deps: Mapping[str, bool] = field(
        default_factory=lambda: {"prod": True, "dev": True, "optional": False, "peer": False}
    )
    install: str = "all"
    min_age: float = 0
    overrides: Mapping[str, str] = field(default_factory=dict)
    tool: str = "auto"
    catalog: str = "tool"
    registry_url: str = Constants.REGISTRY_URL_NPM
    cli: InstallFlags = field(default_factory=InstallFlags)

    @property
    def dependency_groups(self) -> List[str]:
        """Manifest groups to update, in a fixed order."""
        return [group for key, group in Constants.DEP_GROUPS.items() if self.deps.get(key)]

    def policy_for(self, name: str) -> str:
        return self.overrides.get(name, Constants.DEFAULT_POLICY)


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a YAML (or ``.json``) config file into a dict.

    Missing files yield ``{}``; unreadable or malformed files are ignored
    with a warning.
    """
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring '%s' file, could not be parsed: %s", path, exc)
        return {}
    except yaml.YAMLError as exc:
        logger.warning("Ignoring '%s' file, invalid YAML: %s", path, exc)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring '%s' file, must be a mapping", path)
        return {}
    return data


def _merge_overrides(target: Dict[str, str], raw: Any, source: str) -> None:
    if not isinstance(raw, dict):
        logger.warning("Ignoring %s, must be a flat string-string object", source)
        return
    for key, value in raw.items():
        if not isinstance(value, str):
            logger.warning("Ignoring override '%s', value must be string", key)
            continue
        target[str(key)] = value


def load_overrides_file(path: str) -> Dict[str, str]:
    """Read the flat name -> policy JSON overrides file, if present."""
    overrides: Dict[str, str] = {}
    if not os.path.isfile(path):
        return overrides
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError):
        logger.warning("Ignoring '%s' file, invalid JSON", os.path.basename(path))
        return overrides
    _merge_overrides(overrides, raw, f"'{os.path.basename(path)}' file")
    return overrides


def _bool_setting(raw: Mapping[str, Any], key: str, default: bool, label: str) -> bool:
    value = raw.get(key)
    if isinstance(value, bool):
        return value
    if value is not None:
        logger.warning("Ignoring '%s', must be boolean", label)
    return default


def _choice_setting(raw: Mapping[str, Any], key: str, default: str, choices: List[str]) -> str:
    value = raw.get(key)
    if value in choices:
        return value
    if value is not None:
        logger.warning("Ignoring '%s', must be one of: %s", key, ", ".join(choices))
    return default


def build_config(raw: Mapping[str, Any], extra_overrides: Optional[Mapping[str, str]] = None) -> UpdaterConfig:
    """Validate a raw settings mapping into an ``UpdaterConfig``."""
    base = UpdaterConfig()

    deps = dict(base.deps)
    raw_deps = raw.get("deps")
    if isinstance(raw_deps, dict):
        for key in deps:
            deps[key] = _bool_setting(raw_deps, key, deps[key], f"deps.{key}")
    elif raw_deps is not None:
        logger.warning("Ignoring 'deps', must be a mapping")

    min_age = base.min_age
    raw_min_age = raw.get("min_age")
    if raw_min_age is not None:
        if isinstance(raw_min_age, (int, float)) and not isinstance(raw_min_age, bool):
            min_age = max(float(raw_min_age), 0)
        else:
            logger.warning("Ignoring 'min_age', must be number")

    overrides: Dict[str, str] = {}
    if raw.get("overrides") is not None:
        _merge_overrides(overrides, raw.get("overrides"), "'overrides'")
    overrides.update(extra_overrides or {})

    cli_defaults = base.cli
    raw_cli = raw.get("cli") if isinstance(raw.get("cli"), dict) else {}
    if raw.get("cli") is not None and not raw_cli:
        logger.warning("Ignoring 'cli', must be a mapping")
    cli = InstallFlags(
        force=_bool_setting(raw_cli, "force", cli_defaults.force, "cli.force"),
        foreground_scripts=_bool_setting(
            raw_cli, "foreground_scripts", cli_defaults.foreground_scripts, "cli.foreground_scripts"),
        fund_hide=_bool_setting(raw_cli, "fund_hide", cli_defaults.fund_hide, "cli.fund_hide"),
        global_install=_bool_setting(raw_cli, "global", cli_defaults.global_install, "cli.global"),
        ignore_scripts=_bool_setting(raw_cli, "ignore_scripts", cli_defaults.ignore_scripts, "cli.ignore_scripts"),
        legacy=_bool_setting(raw_cli, "legacy", cli_defaults.legacy, "cli.legacy"),
        loglevel=_choice_setting(
            raw_cli, "loglevel", cli_defaults.loglevel,
            ["silent", "error", "warn", "notice", "http", "info", "verbose", "silly"]),
    )

    registry_url = raw.get("registry_url", base.registry_url)
    if not isinstance(registry_url, str) or not registry_url.startswith(("http://", "https://")):
        logger.warning("Ignoring 'registry_url', must be an http(s) URL")
        registry_url = base.registry_url

    return UpdaterConfig(
        ask=AskScope(_choice_setting(raw, "ask", base.ask.value, ASK_LEVELS)),
        audit=_bool_setting(raw, "audit", base.audit, "audit"),
        dedupe=_bool_setting(raw, "dedupe", base.dedupe, "dedupe"),
        deps=deps,
        install=_choice_setting(raw, "install", base.install, Constants.INSTALL_MODES),
        min_age=min_age,
        overrides=overrides,
        tool=_choice_setting(raw, "tool", base.tool, Constants.TOOL_CHOICES),
        catalog=_choice_setting(raw, "catalog", base.catalog, Constants.CATALOG_SOURCES),
        registry_url=registry_url,
        cli=cli,
    )


def detect_tool(project_dir: str, which=shutil.which) -> str:
    """Pick the package manager from the lock file present in ``project_dir``.

    pnpm and bun fall back to their ``npx`` form when not on PATH.
    """
    lock_npm, lock_pnpm, lock_bun = Constants.LOCK_FILES
    if os.path.isfile(os.path.join(project_dir, lock_npm)):
        return Tools.NPM.value
    if os.path.isfile(os.path.join(project_dir, lock_pnpm)):
        return Tools.PNPM.value if which("pnpm") else Tools.NPX_PNPM.value
    if os.path.isfile(os.path.join(project_dir, lock_bun)):
        return Tools.BUN.value if which("bun") else Tools.NPX_BUN.value
    return Tools.NPM.value


def apply_cli_overrides(config: UpdaterConfig, args: Any) -> UpdaterConfig:
    """Return ``config`` with command line flags applied (CLI wins)."""
    changes: Dict[str, Any] = {}
    ask = getattr(args, "ASK", None)
    if ask:
        changes["ask"] = AskScope(ask)
    min_age = getattr(args, "MIN_AGE", None)
    if min_age is not None:
        changes["min_age"] = max(float(min_age), 0)
    tool = getattr(args, "TOOL", None)
    if tool:
        changes["tool"] = tool
    catalog = getattr(args, "CATALOG", None)
    if catalog:
        changes["catalog"] = catalog
    if getattr(args, "NO_INSTALL", False):
        changes["install"] = "none"
    return replace(config, **changes) if changes else config


def load_config(project_dir: str, args: Any = None) -> UpdaterConfig:
    """Build the run configuration for the project rooted at ``project_dir``."""
    config_path = getattr(args, "CONFIG", None) or os.path.join(project_dir, Constants.CONFIG_FILE)
    if getattr(args, "CONFIG", None) and not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
    raw = load_config_file(config_path)
    extra = load_overrides_file(os.path.join(project_dir, Constants.OVERRIDES_FILE))
    config = apply_cli_overrides(build_config(raw, extra), args)
    if config.tool == "auto":
        config = replace(config, tool=detect_tool(project_dir))
    logger.debug("Using %s with ask=%s, min_age=%s", config.tool, config.ask.value, config.min_age)
    return config
