"""Exception hierarchy for depupdate.

DepUpdateError
├── ManifestError
├── CatalogQueryError
└── InstallError
"""
from __future__ import annotations

from typing import Optional


class DepUpdateError(Exception):
    """Base exception for all depupdate errors."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class ManifestError(DepUpdateError):
    """Raised when package.json cannot be located, read or parsed."""


class CatalogQueryError(DepUpdateError):
    """Raised by catalog adapters when a package query fails."""


class InstallError(DepUpdateError):
    """Raised when a package manager command exits unsuccessfully."""
