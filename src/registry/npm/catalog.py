"""NPM catalog clients: dist-tags and release times for one package.

Two sources are supported. ``ToolCatalogClient`` asks the configured package
manager (``npm view`` / ``pnpm view`` / ``bun info``) so registry settings
such as ``.npmrc`` auth are honoured. ``RegistryCatalogClient`` queries the
registry HTTP API directly.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any, Callable, List, Optional
from urllib.parse import quote

from common.http_client import get_json, new_session
from common.logging_utils import extra_context, is_debug_enabled, Timer, safe_url
from constants import Constants
from errors import CatalogQueryError
from versioning.models import Catalog

logger = logging.getLogger(__name__)


def _string_map(data: Any) -> Optional[dict]:
    """Keep only string keys with string-or-null values, preserving order."""
    if not isinstance(data, dict):
        return None
    return {
        str(key): value if isinstance(value, str) else None
        for key, value in data.items()
    }


def catalog_from_payload(dist_tags: Any, release_times: Any) -> Catalog:
    """Build a Catalog from raw JSON fragments.

    Raises:
        CatalogQueryError: If either fragment is not a JSON object.
    """
    tags = _string_map(dist_tags)
    times = _string_map(release_times)
    if tags is None or times is None:
        raise CatalogQueryError("registry response lacks dist-tags or time information")
    return Catalog(dist_tags=tags, release_times=times)


class RegistryCatalogClient:
    """Fetch catalogs from the npm registry HTTP API."""

    def __init__(self, base_url: str = Constants.REGISTRY_URL_NPM):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.session = new_session()

    def package_url(self, package: str) -> str:
        """Registry document URL; scoped names keep ``@`` and encode ``/``."""
        return self.base_url + quote(package, safe="@")

    def fetch(self, package: str) -> Catalog:
        """Return the catalog for ``package``.

        Raises:
            CatalogQueryError: On transport failure, non-200 status or a
                malformed document.
        """
        url = self.package_url(package)
        status_code, _, data = get_json(url, headers={"Accept": "application/json"}, session=self.session)
        if status_code != 200 or not isinstance(data, dict):
            logger.warning(
                "Registry query for %s failed (status %s)", package, status_code,
                extra=extra_context(
                    event="http_response",
                    component="catalog",
                    outcome="query_failed",
                    status_code=status_code,
                    target=safe_url(url),
                ),
            )
            raise CatalogQueryError(f"registry request for {package} failed")
        return catalog_from_payload(data.get("dist-tags"), data.get("time"))


class ToolCatalogClient:
    """Fetch catalogs by running the package manager's view command."""

    def __init__(self, tool: str, runner: Optional[Callable[..., Any]] = None):
        self.tool = tool
        self._runner = runner or subprocess.run

    @property
    def is_bun(self) -> bool:
        return self.tool.endswith("bun")

    def _run_json(self, argv: List[str]) -> Any:
        command = self.tool.split() + argv
        with Timer() as t:
            try:
                result = self._runner(
                    command,
                    capture_output=True,
                    text=True,
                    timeout=Constants.TOOL_QUERY_TIMEOUT,
                    check=False,
                )
            except (OSError, subprocess.SubprocessError) as exc:
                raise CatalogQueryError(f"{self.tool} request error: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "Catalog command finished",
                extra=extra_context(
                    event="subprocess",
                    component="catalog",
                    action=" ".join(command),
                    outcome="success" if result.returncode == 0 else "failure",
                    duration_ms=t.duration_ms(),
                ),
            )
        if result.returncode != 0:
            raise CatalogQueryError(f"{self.tool} request error")
        try:
            return json.loads(result.stdout)
        except (json.JSONDecodeError, TypeError) as exc:
            raise CatalogQueryError(f"{self.tool} gave invalid info") from exc

    def fetch(self, package: str) -> Catalog:
        """Return the catalog for ``package``.

        Raises:
            CatalogQueryError: When the command fails or prints unusable JSON.
        """
        if self.is_bun:
            dist_tags = self._run_json(["info", package, "--json", "dist-tags"])
            release_times = self._run_json(["info", package, "--json", "time"])
            return catalog_from_payload(dist_tags, release_times)
        parsed = self._run_json(["view", package, "--json", "time", "dist-tags"])
        if not isinstance(parsed, dict):
            raise CatalogQueryError(f"{self.tool} gave invalid info")
        return catalog_from_payload(parsed.get("dist-tags"), parsed.get("time"))


def make_catalog_client(source: str, tool: str, registry_url: str):
    """Build the catalog client selected by configuration."""
    if source == "registry":
        return RegistryCatalogClient(registry_url)
    return ToolCatalogClient(tool)
