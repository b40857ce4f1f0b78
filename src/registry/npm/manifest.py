"""package.json discovery, reading and writing with indentation preservation."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Union

from constants import Constants
from errors import ManifestError
from versioning.models import ManifestEntry

logger = logging.getLogger(__name__)

Indent = Union[int, str]


@dataclass
class Manifest:
    """Parsed package.json plus the formatting needed to write it back."""
    path: str
    data: Dict[str, Any]
    indent: Indent = 2

    def entries(self, groups: List[str]) -> Iterator[ManifestEntry]:
        """Yield entries of the selected dependency groups in manifest order."""
        for group in groups:
            deps = self.data.get(group)
            if not isinstance(deps, dict):
                continue
            for name, version in deps.items():
                if isinstance(version, str):
                    yield ManifestEntry(group=group, name=name, declared_version=version)

    def present_groups(self, groups: List[str]) -> List[str]:
        return [g for g in groups if isinstance(self.data.get(g), dict)]

    def set_version(self, entry: ManifestEntry, version: str) -> None:
        self.data[entry.group][entry.name] = version


def find_package_json(start_dir: Optional[str] = None) -> str:
    """Walk up from ``start_dir`` to the nearest directory holding package.json.

    Raises:
        ManifestError: If no package.json exists up to the filesystem root.
    """
    current = os.path.abspath(start_dir or os.getcwd())
    while True:
        candidate = os.path.join(current, Constants.PACKAGE_JSON_FILE)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    raise ManifestError(
        "No package.json found in the current directory",
        hint="Run depupdate from inside a Node.js project.",
    )


def detect_indent(text: str) -> Indent:
    """Indentation of the first indented line: a tab, or a count of spaces."""
    for line in text.split("\n"):
        if line.startswith("\t"):
            return "\t"
        if line.startswith(" "):
            return len(line) - len(line.lstrip())
    return 2


def read_manifest(path: str) -> Manifest:
    """Read and parse package.json.

    Raises:
        ManifestError: If the file cannot be read or is not a JSON object.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as exc:
        raise ManifestError(f"Could not read {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{path} does not contain a JSON object")
    return Manifest(path=path, data=data, indent=detect_indent(text))


def write_manifest(manifest: Manifest) -> None:
    """Serialize the manifest with its original indentation and a final newline.

    Raises:
        ManifestError: If the file cannot be written.
    """
    try:
        with open(manifest.path, "w", encoding="utf-8") as f:
            f.write(json.dumps(manifest.data, indent=manifest.indent, ensure_ascii=False))
            f.write("\n")
    except OSError as exc:
        raise ManifestError(f"Could not write {manifest.path}: {exc}") from exc
    logger.debug("Wrote %s", manifest.path)
