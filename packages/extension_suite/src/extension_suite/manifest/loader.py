"""Load the manifest registry from TOML files."""

from __future__ import annotations

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

from extension_suite.manifest.models import ExtensionDescriptor
from extension_suite.manifest.registry import ManifestRegistry

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.toml"


def get_bundled_manifest_path() -> Path:
    """Return the path of the manifest shipped with the package."""
    return Path(resources.files("extension_suite.manifest").joinpath(MANIFEST_FILE))


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file, failing loudly when it does not exist."""
    if not path.exists():
        msg = f"Manifest file not found: {path}"
        raise FileNotFoundError(msg)
    with path.open("rb") as file:
        return tomllib.load(file)


def parse_manifest(data: dict[str, Any], base_url: str | None = None) -> ManifestRegistry:
    """Build a registry from already-parsed manifest data.

    Args:
        data: Mapping with an ``extensions`` array and an optional ``base_url``.
        base_url: Overrides the document's ``base_url`` when given.

    Returns:
        Registry preserving the order of the ``extensions`` array.
    """
    root = base_url or str(data.get("base_url", ""))
    descriptors: list[ExtensionDescriptor] = []
    for entry in data.get("extensions", []):
        url = str(entry.get("url", ""))
        if root and url:
            url = urljoin(root, url)
        descriptors.append(
            ExtensionDescriptor(
                id=str(entry.get("id", "")),
                name=str(entry.get("name", entry.get("id", ""))),
                description=str(entry.get("description", "")),
                url=url,
                critical=bool(entry.get("critical", False)),
                export_convention=entry.get("export_convention", "unknown"),
            )
        )
    return ManifestRegistry(descriptors)


def load_manifest(path: str | Path | None = None, base_url: str | None = None) -> ManifestRegistry:
    """Load the manifest from ``path``, or the bundled manifest when omitted."""
    manifest_path = Path(path).expanduser() if path else get_bundled_manifest_path()
    registry = parse_manifest(_load_toml_file(manifest_path), base_url=base_url)
    logger.debug("Loaded %d extension descriptors from %s", len(registry), manifest_path)
    return registry
