"""Manifest model, registry, and loading."""

from extension_suite.manifest.loader import get_bundled_manifest_path, load_manifest, parse_manifest
from extension_suite.manifest.models import ExportConvention, ExtensionDescriptor
from extension_suite.manifest.registry import ManifestRegistry

__all__ = [
    "ExportConvention",
    "ExtensionDescriptor",
    "ManifestRegistry",
    "get_bundled_manifest_path",
    "load_manifest",
    "parse_manifest",
]
