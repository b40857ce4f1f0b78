"""Sequential update of every dependency in the selected manifest groups.

For each entry the catalog is fetched, the policy resolved and, when the ask
gate fires, the selector shown, before the next entry starts. The manifest
object is mutated in memory only; writing it is left to the caller once all
entries are done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from cli_config import UpdaterConfig
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from errors import CatalogQueryError
from registry.npm.manifest import Manifest
from report import (
    ReportPrinter,
    failure_reason,
    format_failure,
    format_result,
    format_skipped,
    group_header,
    name_width,
    pad_name,
)
from selector import VersionSelector
from versioning.models import Catalog, Decision, ManifestEntry, Status, VersionType
from versioning.parser import (
    alias_version,
    classify_version,
    format_alias,
    pin_git_reference,
    strip_commitish,
)
from versioning.resolvers.npm import NpmPolicyResolver
from versioning.status import classify_status, should_ask

logger = logging.getLogger(__name__)


@dataclass
class PackageOutcome:
    """What happened to one manifest entry."""
    entry: ManifestEntry
    version: str
    status: Optional[Status] = None  # None when the entry is not a registry dependency
    decision: Optional[Decision] = None
    prompted: bool = False


class Updater:
    """Resolve, optionally ask about, and report every manifest entry."""

    def __init__(
        self,
        config: UpdaterConfig,
        catalog_client,
        resolver: Optional[NpmPolicyResolver] = None,
        selector: Optional[VersionSelector] = None,
        printer: Optional[ReportPrinter] = None,
    ):
        self.config = config
        self.catalog_client = catalog_client
        self.resolver = resolver or NpmPolicyResolver(config.min_age)
        self.selector = selector
        self.printer = printer or ReportPrinter()

    @property
    def _source_label(self) -> str:
        return self.config.tool if self.config.catalog == "tool" else "registry"

    def _fetch(self, package: str) -> Optional[Catalog]:
        try:
            return self.catalog_client.fetch(package)
        except CatalogQueryError as exc:
            logger.debug("Catalog query for %s failed: %s", package, exc)
            return None

    def _update_non_registry(self, entry: ManifestEntry, padded: str, version_type: VersionType,
                             policy: str) -> PackageOutcome:
        commitish = strip_commitish(policy)
        if commitish is None or version_type is not VersionType.GIT:
            self.printer.line(format_skipped(padded, version_type.value))
            return PackageOutcome(entry=entry, version=entry.declared_version)
        self.printer.line(format_skipped(padded, f"git#{commitish}"))
        return PackageOutcome(entry=entry, version=pin_git_reference(entry.declared_version, commitish))

    def update_entry(self, entry: ManifestEntry, padded: str) -> PackageOutcome:
        """Decide the new version string of one entry and print its line."""
        classification = classify_version(entry.name, entry.declared_version)
        policy = self.config.policy_for(entry.name)
        version_type = classification.version_type

        if version_type not in (VersionType.REGISTRY, VersionType.ALIAS):
            return self._update_non_registry(entry, padded, version_type, policy)

        is_alias = version_type is VersionType.ALIAS
        current = alias_version(entry.declared_version) if is_alias else entry.declared_version
        catalog = self._fetch(classification.alias_target if is_alias else entry.name)
        decision = self.resolver.resolve(current, policy, catalog)
        status = classify_status(current, decision)

        if is_debug_enabled(logger):
            logger.debug(
                "Package resolved",
                extra=extra_context(
                    event="decision",
                    component="updater",
                    action="update_entry",
                    outcome=status.value,
                    package=entry.name,
                ),
            )

        if decision.failed:
            self.printer.failure(
                format_failure(padded, current, policy, decision),
                failure_reason(decision, policy, self._source_label),
            )
            return PackageOutcome(entry=entry, version=entry.declared_version,
                                  status=status, decision=decision)

        wanted, newest, shown_policy = decision.wanted, decision.newest, policy
        prompted = False
        if self.selector is not None and should_ask(self.config.ask, status):
            self.printer.line(format_result(padded, current, wanted, policy, decision.latest, newest))
            wanted = self.selector.select(f"Select {entry.name} version", catalog.versions(), wanted)
            shown_policy = Constants.DEFAULT_POLICY if wanted == decision.latest else wanted
            newest = None
            prompted = True
            self.printer.erase_previous_line()

        self.printer.line(format_result(padded, current, wanted, shown_policy, decision.latest, newest))
        version = format_alias(classification.alias_target, wanted) if is_alias else wanted
        return PackageOutcome(entry=entry, version=version, status=status,
                              decision=decision, prompted=prompted)

    def update_manifest(self, manifest: Manifest) -> List[PackageOutcome]:
        """Process every selected group in manifest order, updating in memory."""
        groups = manifest.present_groups(self.config.dependency_groups)
        width = name_width(entry.name for entry in manifest.entries(groups))
        outcomes = []
        for group in groups:
            self.printer.line(group_header(group))
            for entry in list(manifest.entries([group])):
                outcome = self.update_entry(entry, pad_name(entry.name, width))
                manifest.set_version(entry, outcome.version)
                outcomes.append(outcome)
        return outcomes
