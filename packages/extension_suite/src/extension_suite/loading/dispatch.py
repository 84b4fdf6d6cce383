"""Resolve and run a loaded unit's initialization entry point."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from extension_suite.errors import DispatchError
from extension_suite.manifest.models import ExportConvention
from extension_suite.utils import capability

logger = logging.getLogger(__name__)


class EntryPointKind(str, Enum):
    """Recognized shapes, listed in dispatch priority order."""

    DEFAULT_ONLOAD = "default-onload"
    NAMED_ONLOAD = "named-onload"
    CALLABLE_DEFAULT = "callable-default"
    SELF_EXECUTING = "self-executing"


@dataclass(frozen=True)
class EntryPoint:
    """Resolved entry point: what to call, if anything."""

    kind: EntryPointKind
    target: Callable[..., Any] | None = None


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of a successful dispatch."""

    kind: EntryPointKind
    handle: Any


def resolve_entry_point(module: Any) -> EntryPoint:
    """Classify ``module`` by shape alone; exactly one kind applies."""
    default = getattr(module, "default", None)
    default_onload = capability(default, "onload")
    if default_onload is not None:
        return EntryPoint(EntryPointKind.DEFAULT_ONLOAD, default_onload)
    named_onload = capability(module, "onload")
    if named_onload is not None:
        return EntryPoint(EntryPointKind.NAMED_ONLOAD, named_onload)
    if callable(default):
        return EntryPoint(EntryPointKind.CALLABLE_DEFAULT, default)
    return EntryPoint(EntryPointKind.SELF_EXECUTING)


def module_handle(module: Any) -> Any:
    """Return what the lifecycle should keep: the default export, else the module."""
    default = getattr(module, "default", None)
    return default if default is not None else module


def _hint_matches(hint: ExportConvention, kind: EntryPointKind) -> bool:
    if hint is ExportConvention.UNKNOWN:
        return True
    if hint is ExportConvention.SELF_EXECUTING:
        return kind is EntryPointKind.SELF_EXECUTING
    return kind is not EntryPointKind.SELF_EXECUTING


async def dispatch(
    module: Any,
    host_api: Any,
    *,
    unit_id: str = "",
    hint: ExportConvention = ExportConvention.UNKNOWN,
) -> DispatchOutcome:
    """Invoke the unit's entry point with ``host_api=...`` and await it if needed.

    Raises:
        DispatchError: If the chosen entry point raises.
    """
    entry = resolve_entry_point(module)
    if not _hint_matches(hint, entry.kind):
        logger.info(
            "Export convention hint '%s' for %s disagrees with resolved shape '%s'",
            hint.value,
            unit_id,
            entry.kind.value,
        )

    if entry.target is None:
        logger.debug("Self-executing unit %s: evaluation was initialization", unit_id)
    else:
        try:
            result = entry.target(host_api=host_api)
            if inspect.isawaitable(result):
                await result
        except (Exception, SystemExit) as exc:
            raise DispatchError(unit_id, entry.kind.value, exc) from exc

    return DispatchOutcome(kind=entry.kind, handle=module_handle(module))
