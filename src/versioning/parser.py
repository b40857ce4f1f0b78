"""Classification of manifest version strings."""

from typing import Optional

from constants import Constants

from .models import Classification, VersionType


def classify_version(name: str, declared: str) -> Classification:
    """Determine the kind of dependency a manifest entry refers to.

    An ``npm:`` alias always wins. Otherwise a slash in the name or version
    of an unscoped package marks a git reference, refined to a URL or a local
    file by the version prefix. Everything else is a registry dependency.
    """
    if declared.startswith(Constants.ALIAS_PREFIX):
        return Classification(VersionType.ALIAS, alias_target(declared))

    has_slashes = "/" in name or "/" in declared
    if has_slashes and not name.startswith(Constants.SCOPE_PREFIX):
        if declared.startswith(("http:", "https:")):
            return Classification(VersionType.URL)
        if declared.startswith("file:"):
            return Classification(VersionType.FILE)
        return Classification(VersionType.GIT)

    return Classification(VersionType.REGISTRY)


def alias_target(declared: str) -> str:
    """Package an alias points at: everything before the last ``@``.

    ``npm:@scope/pkg@1.0.0`` gives ``@scope/pkg``. A target without any
    version part (``npm:@scope/pkg``) splits on its scope marker and yields
    ``""``, consistent with the last-``@`` rule.
    """
    stripped = declared[len(Constants.ALIAS_PREFIX):]
    return "@".join(stripped.split("@")[:-1])


def alias_version(declared: str) -> str:
    """Version part of an alias, everything after the last ``@``."""
    return declared.rsplit("@", 1)[-1]


def format_alias(target: str, version: str) -> str:
    """Rebuild an alias string for a newly resolved version."""
    return f"{Constants.ALIAS_PREFIX}{target}@{version}"


def strip_commitish(policy: str) -> Optional[str]:
    """Return the commit-ish a git policy names, or None for the default."""
    commitish = policy.lstrip("#")
    if not commitish or commitish == Constants.DEFAULT_POLICY:
        return None
    return commitish


def pin_git_reference(declared: str, commitish: str) -> str:
    """Replace any ``#...`` suffix of a git reference with ``commitish``."""
    return f"{declared.split('#')[0]}#{commitish}"
