"""Track loaded units and drive their teardown with error isolation."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from extension_suite.errors import UnloadWarning
from extension_suite.utils import capability, utc_now

if TYPE_CHECKING:
    from extension_suite.loading.dispatch import DispatchOutcome
    from extension_suite.manifest.models import ExtensionDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedUnitRecord:
    """A unit whose entry point was dispatched successfully."""

    unit_id: str
    name: str
    module_handle: Any
    kind: str
    executed: bool = True
    attempts: int = 1
    loaded_at: datetime = field(default_factory=utc_now)


class LifecycleManager:
    """Owns the loaded-unit records, keyed by unit id in install order."""

    def __init__(self) -> None:
        self._records: dict[str, LoadedUnitRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._records

    @property
    def records(self) -> dict[str, LoadedUnitRecord]:
        """Return a snapshot of the loaded-unit records."""
        return dict(self._records)

    def get(self, unit_id: str) -> LoadedUnitRecord | None:
        return self._records.get(unit_id)

    def register(
        self, descriptor: ExtensionDescriptor, outcome: DispatchOutcome, *, attempts: int = 1
    ) -> LoadedUnitRecord:
        """Record a successfully dispatched unit."""
        if descriptor.id in self._records:
            logger.warning("Replacing record for %s without tearing it down first", descriptor.id)
        record = LoadedUnitRecord(
            unit_id=descriptor.id,
            name=descriptor.name,
            module_handle=outcome.handle,
            kind=outcome.kind.value,
            attempts=attempts,
        )
        self._records[descriptor.id] = record
        return record

    async def unload_all(self) -> list[UnloadWarning]:
        """Run every unit's ``onunload`` hook, then clear all records.

        A failing hook is captured as an ``UnloadWarning`` and does not stop
        the remaining units from being unloaded.
        """
        collected: list[UnloadWarning] = []
        for unit_id, record in list(self._records.items()):
            hook = capability(record.module_handle, "onunload")
            if hook is None:
                continue
            logger.info("Unloading %s...", record.name)
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:  # noqa: BLE001 - isolated teardown
                warning = UnloadWarning(unit_id, record.name, exc)
                logger.warning("%s", warning)
                collected.append(warning)
        self._records.clear()
        return collected

    def clear(self) -> None:
        """Forget every record without running teardown hooks."""
        self._records.clear()
