"""Host API shim surface exposed to loaded units."""

from extension_suite.host.ambient import get_host_api, host_api_scope
from extension_suite.host.shim import (
    HostApiCall,
    HostApiShim,
    HostApiShimFactory,
    ShimHandle,
)
from extension_suite.host.store import (
    JsonFileSettingsStore,
    MemorySettingsStore,
    SettingsStore,
    build_settings_store,
)

__all__ = [
    "HostApiCall",
    "HostApiShim",
    "HostApiShimFactory",
    "JsonFileSettingsStore",
    "MemorySettingsStore",
    "SettingsStore",
    "ShimHandle",
    "build_settings_store",
    "get_host_api",
    "host_api_scope",
]
