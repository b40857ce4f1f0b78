"""npm registry package.

This package provides npm package manager support:
- catalog.py: version catalog (dist-tags and release times) from the package
  manager CLI or the registry HTTP API
- manifest.py: package.json discovery, reading and writing
"""

from .catalog import (  # noqa: F401
    RegistryCatalogClient,
    ToolCatalogClient,
    catalog_from_payload,
    make_catalog_client,
)
from .manifest import (  # noqa: F401
    Manifest,
    find_package_json,
    read_manifest,
    write_manifest,
)

__all__ = [
    # Catalog
    "RegistryCatalogClient",
    "ToolCatalogClient",
    "catalog_from_payload",
    "make_catalog_client",
    # Manifest
    "Manifest",
    "find_package_json",
    "read_manifest",
    "write_manifest",
]
