"""Synthetic host API handed to each loaded unit.

Every operation is total: it records the call, logs it, and returns a value,
so a unit's own error handling around host calls never trips.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from itertools import count
from typing import TYPE_CHECKING, Any

from extension_suite.host.ambient import host_api_scope
from extension_suite.utils import utc_now

if TYPE_CHECKING:
    from collections.abc import Iterator

    from extension_suite.host.store import SettingsStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostApiCall:
    """One recorded invocation of the shim."""

    unit_id: str
    method: str
    args: tuple[Any, ...]
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class ShimHandle:
    """Opaque handle returned by shim operations that create things."""

    id: str
    kind: str
    config: dict[str, Any] = field(default_factory=dict)


def _as_config(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return dict(value)
    if value is None:
        return {}
    return {"value": value}


class SettingsPanel:
    """Settings panel surface; creates handles but renders nothing."""

    def __init__(self, shim: HostApiShim) -> None:
        self._shim = shim

    def create(self, config: Any = None) -> ShimHandle:
        self._shim.record("settings.panel.create", config)
        return self._shim.new_handle("panel", config)


class SettingsApi:
    """Per-unit view onto the shared store, keyed ``"{unit_id}:{key}"``."""

    def __init__(self, shim: HostApiShim, store: SettingsStore) -> None:
        self._shim = shim
        self._store = store
        self.panel = SettingsPanel(shim)

    def _key(self, key: Any) -> str:
        return f"{self._shim.unit_id}:{key}"

    def get(self, key: Any) -> str | None:
        self._shim.record("settings.get", key)
        return self._store.get(self._key(key))

    def set(self, key: Any, value: Any) -> None:
        self._shim.record("settings.set", key, value)
        self._store.set(self._key(key), str(value))


class CommandPalette:
    """Command palette surface; records registrations only."""

    def __init__(self, shim: HostApiShim) -> None:
        self._shim = shim

    def add_command(self, command: Any = None) -> ShimHandle:
        self._shim.record("ui.command_palette.add_command", command)
        handle = self._shim.new_handle("command", command)
        label = handle.config.get("label", handle.id)
        logger.info("Command added by %s: %s", self._shim.unit_id, label)
        return handle

    def remove_command(self, handle: Any = None) -> bool:
        self._shim.record("ui.command_palette.remove_command", handle)
        logger.info("Command removed by %s: %s", self._shim.unit_id, getattr(handle, "id", handle))
        return True


class UiApi:
    """UI surface: buttons, notifications, and the command palette."""

    def __init__(self, shim: HostApiShim) -> None:
        self._shim = shim
        self.command_palette = CommandPalette(shim)

    def create_button(self, config: Any = None) -> ShimHandle:
        self._shim.record("ui.create_button", config)
        return self._shim.new_handle("button", config)

    def show_notification(self, message: Any = "", severity: str = "info") -> bool:
        self._shim.record("ui.show_notification", message, severity)
        logger.info("Notification from %s: %s (%s)", self._shim.unit_id, message, severity)
        return True


class HostApiShim:
    """Fresh, single-use host API scoped to one unit id."""

    def __init__(self, unit_id: str, store: SettingsStore) -> None:
        self.unit_id = unit_id
        self.calls: list[HostApiCall] = []
        self.released = False
        self._handle_ids = count(1)
        self.settings = SettingsApi(self, store)
        self.ui = UiApi(self)

    def record(self, method: str, *args: Any) -> None:
        """Record a call for installation diagnostics."""
        self.calls.append(HostApiCall(unit_id=self.unit_id, method=method, args=args))
        if self.released:
            logger.debug("Late host API call from %s after release: %s", self.unit_id, method)
        else:
            logger.debug("Host API call from %s: %s", self.unit_id, method)

    def new_handle(self, kind: str, config: Any = None) -> ShimHandle:
        return ShimHandle(
            id=f"{self.unit_id}:{kind}:{next(self._handle_ids)}",
            kind=kind,
            config=_as_config(config),
        )

    def release(self) -> None:
        """Close the shim once its unit's entry point has returned."""
        if self.released:
            return
        self.released = True
        logger.debug("Released host API shim for %s after %d calls", self.unit_id, len(self.calls))


class HostApiShimFactory:
    """Builds per-unit shims backed by one shared settings store."""

    def __init__(self, store: SettingsStore) -> None:
        self.store = store

    def create(self, unit_id: str) -> HostApiShim:
        return HostApiShim(unit_id, self.store)

    @contextmanager
    def session(self, unit_id: str) -> Iterator[HostApiShim]:
        """Create a shim, expose it ambiently, and release it on every exit path."""
        shim = self.create(unit_id)
        try:
            with host_api_scope(shim):
                yield shim
        finally:
            shim.release()
