"""Status classification of resolved packages and the interactive ask gate."""

from typing import Dict, FrozenSet

from .models import AskScope, Decision, Status

_ASK_TRIGGERS: Dict[AskScope, FrozenSet[Status]] = {
    AskScope.ALL: frozenset({Status.UNCHANGED, Status.BLOCKED, Status.SEMI, Status.LATEST}),
    AskScope.BLOCKED: frozenset({Status.BLOCKED}),
    AskScope.SEMI: frozenset({Status.SEMI}),
    AskScope.LATEST: frozenset({Status.LATEST}),
    AskScope.NONLATEST: frozenset({Status.BLOCKED, Status.SEMI}),
    AskScope.CHANGED: frozenset({Status.SEMI, Status.LATEST}),
    AskScope.NONE: frozenset(),
}


def classify_status(current: str, decision: Decision) -> Status:
    """Bucket a decision relative to the declared version.

    Staying put is BLOCKED when the kept version is not the ``latest`` tag,
    UNCHANGED otherwise. Moving is LATEST when the target is the ``latest``
    tag, SEMI otherwise.
    """
    if decision.failed or decision.wanted is None:
        return Status.FAILED
    at_latest = decision.wanted == decision.latest
    if current == decision.wanted:
        return Status.UNCHANGED if at_latest else Status.BLOCKED
    return Status.LATEST if at_latest else Status.SEMI


def should_ask(scope: AskScope, status: Status) -> bool:
    """Whether the selector should be shown for a package with ``status``."""
    return status in _ASK_TRIGGERS[scope]
