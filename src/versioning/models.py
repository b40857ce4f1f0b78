"""Data models for version classification and policy resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional

from constants import Constants


class VersionType(Enum):
    """Lexical kind of a manifest version string."""
    REGISTRY = "semver"
    ALIAS = "alias"
    GIT = "git"
    URL = "url"
    FILE = "file"


class Status(Enum):
    """Outcome bucket of a resolved package."""
    UNCHANGED = "unchanged"
    BLOCKED = "blocked"
    SEMI = "semi"
    LATEST = "latest"
    FAILED = "failed"


class AskScope(Enum):
    """Which statuses engage the interactive selector."""
    ALL = "all"
    LATEST = "latest"
    NONLATEST = "nonlatest"
    SEMI = "semi"
    CHANGED = "changed"
    BLOCKED = "blocked"
    NONE = "none"


class FailureReason(Enum):
    """Why a package kept its declared version."""
    CATALOG_QUERY_FAILED = "catalog_query_failed"
    NO_SATISFYING_VERSION = "no_satisfying_version"
    AGE_BLOCKED_REGRESSION = "age_blocked_regression"


@dataclass
class ManifestEntry:
    """One dependency of a manifest group."""
    group: str  # "dependencies", "devDependencies", ...
    name: str
    declared_version: str


@dataclass(frozen=True)
class Classification:
    """Result of classifying a declared version string."""
    version_type: VersionType
    alias_target: Optional[str] = None


@dataclass(frozen=True)
class Catalog:
    """Registry snapshot for one package, fetched once per run."""
    dist_tags: Mapping[str, Optional[str]] = field(default_factory=dict)
    release_times: Mapping[str, Optional[str]] = field(default_factory=dict)

    @property
    def latest(self) -> Optional[str]:
        """Version the ``latest`` dist-tag points at, if any."""
        return self.dist_tags.get(Constants.LATEST_TAG)

    def versions(self) -> List[str]:
        """All published versions in registry order, minus synthetic keys."""
        return [v for v in self.release_times if v not in Constants.SYNTHETIC_TIME_KEYS]


@dataclass(frozen=True)
class Decision:
    """Policy resolution outcome for a registry package."""
    wanted: Optional[str]
    newest: Optional[str]
    failed: bool
    latest: Optional[str] = None
    reason: Optional[FailureReason] = None
