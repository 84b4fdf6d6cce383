from extension_suite.config import SuiteSettings, load_settings
from extension_suite.errors import (
    DispatchError,
    ExtensionNotFoundError,
    ExtensionSuiteError,
    FetchError,
    InstallInProgressError,
    LoadError,
    UnloadWarning,
)
from extension_suite.host import (
    HostApiShim,
    HostApiShimFactory,
    JsonFileSettingsStore,
    MemorySettingsStore,
    get_host_api,
)
from extension_suite.lifecycle import LifecycleManager, LoadedUnitRecord
from extension_suite.loading import (
    EntryPointKind,
    HttpSourceFetcher,
    SandboxedLoader,
    dispatch,
    resolve_entry_point,
)
from extension_suite.manifest import (
    ExportConvention,
    ExtensionDescriptor,
    ManifestRegistry,
    load_manifest,
)
from extension_suite.orchestrator import (
    InstallLogEntry,
    InstallOrchestrator,
    InstallReport,
    Severity,
    UnitStatus,
)
from extension_suite.suite import ExtensionSuite

__all__ = [
    "DispatchError",
    "EntryPointKind",
    "ExportConvention",
    "ExtensionDescriptor",
    "ExtensionNotFoundError",
    "ExtensionSuite",
    "ExtensionSuiteError",
    "FetchError",
    "HostApiShim",
    "HostApiShimFactory",
    "HttpSourceFetcher",
    "InstallInProgressError",
    "InstallLogEntry",
    "InstallOrchestrator",
    "InstallReport",
    "JsonFileSettingsStore",
    "LifecycleManager",
    "LoadError",
    "LoadedUnitRecord",
    "ManifestRegistry",
    "MemorySettingsStore",
    "SandboxedLoader",
    "Severity",
    "SuiteSettings",
    "UnitStatus",
    "UnloadWarning",
    "dispatch",
    "get_host_api",
    "load_manifest",
    "load_settings",
    "resolve_entry_point",
]
