"""Sequential installer driving fetch, evaluation, and dispatch per unit."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from extension_suite.errors import (
    ExtensionNotFoundError,
    ExtensionSuiteError,
    InstallInProgressError,
)
from extension_suite.host.shim import HostApiShimFactory
from extension_suite.host.store import MemorySettingsStore
from extension_suite.lifecycle import LifecycleManager
from extension_suite.loading.dispatch import dispatch
from extension_suite.loading.sandbox import SandboxedLoader
from extension_suite.logging_utils import unit_log_context
from extension_suite.utils import utc_now

if TYPE_CHECKING:
    from extension_suite.lifecycle import LoadedUnitRecord
    from extension_suite.loading.dispatch import DispatchOutcome
    from extension_suite.loading.fetcher import SourceFetcher
    from extension_suite.manifest.models import ExtensionDescriptor
    from extension_suite.manifest.registry import ManifestRegistry

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY = 1.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0
MAX_RETRY_DELAY = 30.0  # seconds


class Severity(str, Enum):
    """Severity of an install log entry."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class UnitStatus(str, Enum):
    """Per-unit progress as seen by a view layer."""

    PENDING = "pending"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.ERROR: logging.ERROR,
}

StatusListener = Callable[[str, UnitStatus], None]


@dataclass(frozen=True)
class InstallLogEntry:
    """One line of the append-only install audit trail."""

    timestamp: datetime
    message: str
    severity: Severity = Severity.INFO


class InstallLog:
    """Append-only sequence of entries with non-decreasing timestamps."""

    def __init__(self) -> None:
        self._entries: list[InstallLogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[InstallLogEntry, ...]:
        return tuple(self._entries)

    def append(self, message: str, severity: Severity = Severity.INFO) -> InstallLogEntry:
        timestamp = utc_now()
        if self._entries and timestamp < self._entries[-1].timestamp:
            timestamp = self._entries[-1].timestamp
        entry = InstallLogEntry(timestamp=timestamp, message=message, severity=severity)
        self._entries.append(entry)
        logger.log(_LOG_LEVELS[severity], "%s", message)
        return entry

    def clear(self) -> None:
        self._entries.clear()


@dataclass(frozen=True)
class InstallReport:
    """Aggregate outcome of an ``install_all`` run."""

    success: int
    failure: int
    total: int
    log: tuple[InstallLogEntry, ...]
    statuses: dict[str, UnitStatus] = field(default_factory=dict)
    attempts: dict[str, int] = field(default_factory=dict)
    failed: tuple[str, ...] = ()
    critical_failures: tuple[str, ...] = ()

    @property
    def all_installed(self) -> bool:
        return self.failure == 0 and self.success == self.total


class InstallOrchestrator:
    """Install manifest units one at a time, isolating failures per unit."""

    def __init__(
        self,
        registry: ManifestRegistry,
        fetcher: SourceFetcher,
        *,
        lifecycle: LifecycleManager | None = None,
        shim_factory: HostApiShimFactory | None = None,
        loader: SandboxedLoader | None = None,
        pacing_delay: float = 0.0,
        max_retries: int = 0,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        status_listener: StatusListener | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Manifest whose order is the install order.
            fetcher: Source of unit code.
            lifecycle: Record keeper for loaded units.
            shim_factory: Builds a host API shim per unit.
            loader: Evaluates source text into module namespaces.
            pacing_delay: Seconds to wait between units; zero disables it.
            max_retries: Extra attempts per failing unit; zero disables retry.
            retry_delay: Delay before the first retry in seconds.
            backoff_multiplier: Multiplier for exponential backoff between retries.
            sleep: Awaitable sleep used for pacing and retry backoff.
            status_listener: Called on every unit status transition.
        """
        self.registry = registry
        self.lifecycle = lifecycle if lifecycle is not None else LifecycleManager()
        self._fetcher = fetcher
        self._shims = (
            shim_factory
            if shim_factory is not None
            else HostApiShimFactory(MemorySettingsStore())
        )
        self._loader = loader if loader is not None else SandboxedLoader()
        self._pacing_delay = pacing_delay
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._backoff_multiplier = backoff_multiplier
        self._sleep = sleep
        self._status_listener = status_listener
        self._log = InstallLog()
        self._statuses: dict[str, UnitStatus] = {}
        self._attempts: dict[str, int] = {}
        self._in_flight: set[str] = set()
        self.reset()

    @property
    def log(self) -> tuple[InstallLogEntry, ...]:
        """Return the install log in append order."""
        return self._log.entries

    @property
    def statuses(self) -> dict[str, UnitStatus]:
        """Return the current status of every manifest unit."""
        return dict(self._statuses)

    @property
    def attempts(self) -> dict[str, int]:
        """Return how many attempts each unit has used in this run."""
        return dict(self._attempts)

    def reset(self) -> None:
        """Clear the log and mark every manifest unit pending."""
        self._log.clear()
        self._statuses = dict.fromkeys(self.registry.ids(), UnitStatus.PENDING)
        self._attempts = {}

    def _set_status(self, unit_id: str, status: UnitStatus) -> None:
        self._statuses[unit_id] = status
        if self._status_listener is None:
            return
        try:
            self._status_listener(unit_id, status)
        except Exception:  # noqa: BLE001 - listener isolation
            logger.exception("Status listener failed for %s -> %s", unit_id, status.value)

    def _calculate_delay(self, attempt: int) -> float:
        delay = self._retry_delay * (self._backoff_multiplier ** (attempt - 1))
        return min(delay, MAX_RETRY_DELAY)

    async def _attempt(self, descriptor: ExtensionDescriptor) -> DispatchOutcome:
        with unit_log_context(descriptor.id):
            self._log.append(f"Fetching {descriptor.name} from {descriptor.source_location}")
            source = await self._fetcher.fetch(descriptor)
            self._log.append(f"Code retrieved ({len(source)} bytes)")

            with self._shims.session(descriptor.id) as shim:
                self._log.append(f"Importing module: {descriptor.name}")
                module = self._loader.load(descriptor.id, source, shim)
                outcome = await dispatch(
                    module, shim, unit_id=descriptor.id, hint=descriptor.export_convention
                )
            self._log.append(f"Executed {outcome.kind.value} entry point: {descriptor.name}")
        return outcome

    async def install_one(self, unit_id: str) -> LoadedUnitRecord:
        """Fetch, evaluate, and dispatch a single unit.

        A failing attempt is retried up to ``max_retries`` times with
        exponential backoff; only the final failure is reported.

        Raises:
            ExtensionNotFoundError: If the manifest has no such unit.
            InstallInProgressError: If the same unit is already being installed.
            FetchError: If the source could not be retrieved.
            LoadError: If evaluating the source raised.
            DispatchError: If the unit's entry point raised.
        """
        try:
            descriptor = self.registry.get(unit_id)
        except ExtensionNotFoundError as exc:
            self._log.append(f"{exc}", Severity.ERROR)
            raise
        if unit_id in self._in_flight:
            exc = InstallInProgressError(unit_id)
            self._log.append(f"{exc}", Severity.ERROR)
            raise exc

        self._log.append(f"Installing {descriptor.name}...")
        self._in_flight.add(unit_id)
        try:
            self._set_status(unit_id, UnitStatus.LOADING)
            attempt = 1
            while True:
                self._attempts[unit_id] = attempt
                try:
                    outcome = await self._attempt(descriptor)
                except ExtensionSuiteError as exc:
                    if attempt > self._max_retries:
                        raise
                    delay = self._calculate_delay(attempt)
                    self._log.append(
                        f"{descriptor.name} failed (attempt {attempt}/{self._max_retries + 1}), "
                        f"retrying in {delay:.1f}s: {exc}"
                    )
                    await self._sleep(delay)
                    attempt += 1
                else:
                    break
            record = self.lifecycle.register(descriptor, outcome, attempts=attempt)
        except Exception as exc:
            self._set_status(unit_id, UnitStatus.ERROR)
            label = " (critical)" if descriptor.critical else ""
            self._log.append(f"{descriptor.name}{label} failed: {exc}", Severity.ERROR)
            raise
        finally:
            self._in_flight.discard(unit_id)

        self._set_status(unit_id, UnitStatus.SUCCESS)
        self._log.append(f"{descriptor.name} installed successfully!", Severity.SUCCESS)
        return record

    async def install_all(self) -> InstallReport:
        """Install every manifest unit in declared order.

        A failing unit is counted and logged; the run always continues to the
        next unit, including after failures of units marked critical.
        """
        total = len(self.registry)
        self._log.append(f"Starting installation of {total} extensions...")
        success = 0
        failed: list[str] = []
        critical_failures: list[str] = []

        for index, descriptor in enumerate(self.registry):
            if index and self._pacing_delay > 0:
                await self._sleep(self._pacing_delay)
            try:
                await self.install_one(descriptor.id)
            except Exception:  # noqa: BLE001 - per-unit isolation
                logger.debug("Install of %s failed", descriptor.id, exc_info=True)
                failed.append(descriptor.id)
                if descriptor.critical:
                    critical_failures.append(descriptor.id)
                self._log.append(f"Continuing despite {descriptor.name} failure...")
            else:
                success += 1

        if success == total:
            self._log.append(
                f"Installation complete! All {success} extensions loaded.", Severity.SUCCESS
            )
        else:
            self._log.append(
                f"Installation finished: {success}/{total} successful, {len(failed)} failed."
            )

        return InstallReport(
            success=success,
            failure=len(failed),
            total=total,
            log=self._log.entries,
            statuses=self.statuses,
            attempts=self.attempts,
            failed=tuple(failed),
            critical_failures=tuple(critical_failures),
        )
