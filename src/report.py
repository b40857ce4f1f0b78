"""Per-package result lines.

Each manifest entry yields exactly one line, in manifest order, grouped under
a ``= Updating <group> =`` header. The first two characters carry the
outcome:

``"  "`` unchanged, ``"> "`` updated, ``"~ "`` constrained by a policy,
``"! "`` newest version held back by the minimum age, ``"- "`` not a registry
dependency, ``"X "`` failure (a reason line follows on stderr).
"""

from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO

from constants import Constants
from versioning.models import Decision, FailureReason

PREFIX_UNCHANGED = "  "
PREFIX_UPDATED = "> "
PREFIX_POLICY = "~ "
PREFIX_HELD_BACK = "! "
PREFIX_SKIPPED = "- "
PREFIX_FAILED = "X "


def name_width(names: Iterable[str]) -> int:
    """Column width for package names, never below the default minimum."""
    return max([Constants.MIN_NAME_WIDTH] + [len(n) for n in names])


def pad_name(name: str, width: int) -> str:
    return f"{name.ljust(width)} "


def group_header(group: str) -> str:
    return f"= Updating {group} ="


def format_result(
    padded_name: str,
    current: str,
    wanted: str,
    policy: str,
    latest: Optional[str],
    newest: Optional[str],
) -> str:
    """Render the line of a successfully resolved package.

    Markers combine on one line; the prefix is the strongest of updated,
    policy-constrained and held-back.
    """
    status = PREFIX_UNCHANGED
    policy_part = ""
    too_new = ""
    if newest and wanted != newest:
        status = PREFIX_HELD_BACK
        too_new = f" !{newest}"
    if policy != Constants.DEFAULT_POLICY:
        status = PREFIX_POLICY
        policy_part = f" @{policy}"
        if policy != latest:
            policy_part += f" ~{latest}"
    update = ""
    if wanted != current:
        status = PREFIX_UPDATED
        update = f" > {wanted}"
    return f"{status}{padded_name}{current}{update}{policy_part}{too_new}"


def failure_reason(decision: Decision, policy: str, source: str) -> str:
    """Diagnostic text shown below a failed package line."""
    if decision.reason == FailureReason.AGE_BLOCKED_REGRESSION:
        return "current and more recent versions too new"
    if decision.reason == FailureReason.NO_SATISFYING_VERSION:
        return f"no {policy} version found"
    return f"{source} request error"


def format_failure(padded_name: str, current: str, policy: str, decision: Decision) -> str:
    line = f"{PREFIX_FAILED}{padded_name}{current} @{policy}"
    if decision.reason == FailureReason.AGE_BLOCKED_REGRESSION and decision.newest:
        line += f" !{decision.newest}"
    return line


def format_skipped(padded_name: str, label: str) -> str:
    return f"{PREFIX_SKIPPED}{padded_name}{label}"


class ReportPrinter:
    """Writes report lines to stdout and failure reasons to stderr."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def line(self, text: str) -> None:
        self.out.write(text + "\n")
        self.out.flush()

    def failure(self, text: str, reason: str) -> None:
        self.line(text)
        self.err.write(f"{PREFIX_FAILED}Failed, {reason}\n")
        self.err.flush()

    def erase_previous_line(self) -> None:
        """Remove the line written just before an interactive prompt."""
        if self.out.isatty():
            self.out.write("\x1b[1A\x1b[2K\r")
            self.out.flush()
