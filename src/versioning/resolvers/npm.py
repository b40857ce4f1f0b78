"""NPM policy resolver using semantic versioning and release-age gating."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import semantic_version

from common.logging_utils import extra_context, is_debug_enabled

from ..models import Catalog, Decision, FailureReason

logger = logging.getLogger(__name__)

_RANGE_PREFIX_RE = re.compile(r"^[\s=v^~<>]+")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_release_time(value: Optional[str]) -> Optional[datetime]:
    """Parse a registry ISO 8601 timestamp; None when absent or malformed."""
    if not value or not isinstance(value, str):
        return None
    try:
        if value.endswith("Z"):
            parsed = datetime.fromisoformat(value[:-1])
        else:
            parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_version(value: Optional[str]) -> Optional[semantic_version.Version]:
    """Parse a concrete version, tolerating a leading range operator or ``v``."""
    if not value:
        return None
    try:
        return semantic_version.Version(value)
    except ValueError:
        pass
    try:
        return semantic_version.Version(_RANGE_PREFIX_RE.sub("", value))
    except ValueError:
        return None


def is_older(candidate: str, reference: str) -> bool:
    """True when ``candidate`` is semver-lower than ``reference``.

    A reference that does not parse as a version cannot be compared and is
    never considered newer.
    """
    cand = parse_version(candidate)
    ref = parse_version(reference)
    if cand is None or ref is None:
        return False
    return cand < ref


def find_by_range(versions: List[str], range_str: str) -> Optional[str]:
    """Pick a version by exact literal match, else the highest satisfying one.

    Args:
        versions: Candidate version strings.
        range_str: Literal version or npm range expression.

    Returns:
        The matched version string, or None when nothing satisfies the range
        or the range does not parse.
    """
    if range_str in versions:
        return range_str

    try:
        spec = semantic_version.NpmSpec(range_str)
    except ValueError:
        return None

    best: Optional[semantic_version.Version] = None
    best_raw: Optional[str] = None
    for raw in versions:
        try:
            ver = semantic_version.Version(raw)
        except ValueError:
            continue  # Skip invalid versions
        if spec.match(ver) and (best is None or ver > best):
            best, best_raw = ver, raw
    return best_raw


class NpmPolicyResolver:
    """Resolve the wanted and newest versions of a package under a policy.

    ``wanted`` only considers versions older than the configured minimum age;
    ``newest`` considers every published version. Both honour the same policy.
    """

    def __init__(
        self,
        min_age_minutes: float = 0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.min_age = timedelta(minutes=max(min_age_minutes, 0))
        self._clock = clock or _utcnow

    def age_eligible(self, catalog: Catalog) -> List[str]:
        """Versions with a known release time at least ``min_age`` old."""
        cutoff = self._clock() - self.min_age
        allowed = []
        for version in catalog.versions():
            released = parse_release_time(catalog.release_times.get(version))
            if released is not None and released <= cutoff:
                allowed.append(version)
        return allowed

    @staticmethod
    def policy_range(policy: str, catalog: Catalog) -> str:
        """Rewrite a dist-tag policy to ``<=<tag version>``, else keep it verbatim."""
        tagged = catalog.dist_tags.get(policy)
        if tagged:
            return f"<={tagged}"
        return policy

    def resolve(self, current: str, policy: str, catalog: Optional[Catalog]) -> Decision:
        """Decide which version a registry dependency should move to.

        Args:
            current: Declared version (alias version part for aliases).
            policy: Dist-tag, literal version or npm range.
            catalog: Registry snapshot, None when the query failed.

        Returns:
            Decision; ``failed`` is set when the declared version must be kept.
        """
        if catalog is None or not catalog.latest or not catalog.release_times:
            return self._fail(FailureReason.CATALOG_QUERY_FAILED, None, None)

        latest = catalog.latest
        all_versions = catalog.versions()
        allowed_versions = self.age_eligible(catalog)
        desired_range = self.policy_range(policy, catalog)

        wanted = find_by_range(allowed_versions, desired_range)
        newest = find_by_range(all_versions, desired_range)

        if newest and wanted != newest and (not wanted or is_older(wanted, current)):
            return self._fail(FailureReason.AGE_BLOCKED_REGRESSION, newest, latest)
        if not wanted:
            return self._fail(FailureReason.NO_SATISFYING_VERSION, newest, latest)

        if is_debug_enabled(logger):
            logger.debug(
                "Policy resolved",
                extra=extra_context(
                    event="decision",
                    component="resolver",
                    action="resolve",
                    outcome="resolved",
                    policy=policy,
                    wanted=wanted,
                    newest=newest,
                    eligible_count=len(allowed_versions),
                    candidate_count=len(all_versions),
                ),
            )
        return Decision(wanted=wanted, newest=newest, failed=False, latest=latest)

    @staticmethod
    def _fail(reason: FailureReason, newest: Optional[str], latest: Optional[str]) -> Decision:
        if is_debug_enabled(logger):
            logger.debug(
                "Policy resolution failed",
                extra=extra_context(
                    event="decision",
                    component="resolver",
                    action="resolve",
                    outcome=reason.value,
                    newest=newest,
                ),
            )
        return Decision(wanted=None, newest=newest, failed=True, latest=latest, reason=reason)
