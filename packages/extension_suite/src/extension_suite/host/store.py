"""Process-wide persistent key-value stores backing unit settings."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    """String-to-string store shared by every unit, last write wins."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemorySettingsStore:
    """In-process store; contents live as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileSettingsStore:
    """Store persisted to a JSON object on disk.

    I/O failures are logged rather than raised so that host API calls made by
    units stay total.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._values: dict[str, str] = self._read()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable settings store at %s", self.path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings store at %s: not a JSON object", self.path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        except OSError:
            logger.warning("Failed to persist settings store to %s", self.path, exc_info=True)
            return
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle, indent=2, sort_keys=True)
            tmp_path.replace(self.path)
        except OSError:
            logger.warning("Failed to persist settings store to %s", self.path, exc_info=True)
            tmp_path.unlink(missing_ok=True)

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._write()


def build_settings_store(path: str | None) -> SettingsStore:
    """Return a file-backed store for ``path``, or an in-memory one."""
    if path:
        return JsonFileSettingsStore(path)
    return MemorySettingsStore()
