"""Fetch, evaluate, and dispatch extension units."""

from extension_suite.loading.dispatch import (
    DispatchOutcome,
    EntryPoint,
    EntryPointKind,
    dispatch,
    module_handle,
    resolve_entry_point,
)
from extension_suite.loading.fetcher import HttpSourceFetcher, SourceFetcher
from extension_suite.loading.sandbox import ModuleArtifact, SandboxedLoader, materialize

__all__ = [
    "DispatchOutcome",
    "EntryPoint",
    "EntryPointKind",
    "HttpSourceFetcher",
    "ModuleArtifact",
    "SandboxedLoader",
    "SourceFetcher",
    "dispatch",
    "materialize",
    "module_handle",
    "resolve_entry_point",
]
