"""Suite entry points called by the host: ``onload`` and ``onunload``."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from extension_suite.config import SuiteSettings
from extension_suite.host.shim import HostApiShimFactory
from extension_suite.host.store import build_settings_store
from extension_suite.lifecycle import LifecycleManager
from extension_suite.loading.fetcher import HttpSourceFetcher
from extension_suite.manifest.loader import load_manifest
from extension_suite.orchestrator import InstallOrchestrator

if TYPE_CHECKING:
    from extension_suite.errors import UnloadWarning
    from extension_suite.host.store import SettingsStore
    from extension_suite.lifecycle import LoadedUnitRecord
    from extension_suite.loading.fetcher import SourceFetcher
    from extension_suite.manifest.registry import ManifestRegistry
    from extension_suite.orchestrator import InstallReport, StatusListener

logger = logging.getLogger(__name__)


class ExtensionSuite:
    """The orchestrator process as a whole, from ``onload`` to ``onunload``."""

    def __init__(
        self,
        registry: ManifestRegistry,
        fetcher: SourceFetcher,
        *,
        store: SettingsStore | None = None,
        settings: SuiteSettings | None = None,
        status_listener: StatusListener | None = None,
    ) -> None:
        self.settings = settings if settings is not None else SuiteSettings()
        self.registry = registry
        self.store = (
            store if store is not None else build_settings_store(self.settings.settings_store_path)
        )
        self.lifecycle = LifecycleManager()
        self.orchestrator = InstallOrchestrator(
            registry,
            fetcher,
            lifecycle=self.lifecycle,
            shim_factory=HostApiShimFactory(self.store),
            pacing_delay=self.settings.pacing_delay,
            max_retries=self.settings.max_retries,
            retry_delay=self.settings.retry_delay,
            backoff_multiplier=self.settings.backoff_multiplier,
            status_listener=status_listener,
        )
        self.host_api: Any = None
        self.last_report: InstallReport | None = None
        self._fetcher = fetcher
        self._owns_fetcher = False
        self._install_task: asyncio.Task[InstallReport] | None = None

    @classmethod
    def from_settings(
        cls, settings: SuiteSettings, *, status_listener: StatusListener | None = None
    ) -> ExtensionSuite:
        """Build a suite with the configured manifest, store, and HTTP fetcher."""
        registry = load_manifest(settings.manifest_path, base_url=settings.base_url)
        suite = cls(
            registry,
            HttpSourceFetcher(timeout=settings.fetch_timeout),
            settings=settings,
            status_listener=status_listener,
        )
        suite._owns_fetcher = True
        return suite

    @property
    def loaded(self) -> dict[str, LoadedUnitRecord]:
        return self.lifecycle.records

    async def onload(self, host_api: Any = None) -> None:
        """Reset suite state and optionally start installing every unit.

        An install run started by an earlier ``onload`` is allowed to finish
        before state is reset, so two runs never overlap.
        """
        logger.info("Extension suite loading...")
        await self._settle_install_task()
        self.host_api = host_api
        self.lifecycle.clear()
        self.orchestrator.reset()
        self.last_report = None
        if self.settings.auto_install:
            logger.info("Auto-starting installation of %d extensions", len(self.registry))
            self._install_task = asyncio.create_task(self._auto_install())
        logger.info("Extension suite ready")

    async def _auto_install(self) -> InstallReport:
        if self.settings.auto_install_delay > 0:
            await asyncio.sleep(self.settings.auto_install_delay)
        return await self.install_all()

    async def install_all(self) -> InstallReport:
        report = await self.orchestrator.install_all()
        self.last_report = report
        if report.all_installed:
            logger.info("Extension suite loaded successfully (%d/%d)", report.success, report.total)
        else:
            logger.warning(
                "Extension suite loaded with issues: %d/%d successful", report.success, report.total
            )
        return report

    async def install_one(self, unit_id: str) -> LoadedUnitRecord:
        return await self.orchestrator.install_one(unit_id)

    async def wait_for_install(self) -> InstallReport | None:
        """Wait for the auto-install run started by ``onload``, if any."""
        if self._install_task is None:
            return self.last_report
        return await self._install_task

    async def _settle_install_task(self) -> None:
        if self._install_task is None:
            return
        if not self._install_task.done():
            logger.info("Waiting for in-flight installation to finish")
        await asyncio.wait({self._install_task})
        self._install_task = None

    async def onunload(self) -> list[UnloadWarning]:
        """Tear down every loaded unit and clear suite state.

        An install run still in flight is allowed to finish first; there is no
        mid-install cancellation.
        """
        logger.info("Extension suite unloading...")
        await self._settle_install_task()
        warnings = await self.lifecycle.unload_all()
        self.orchestrator.reset()
        logger.info("Extension suite unloaded")
        return warnings

    async def aclose(self) -> None:
        """Release the HTTP fetcher this suite created, if any."""
        if self._owns_fetcher and isinstance(self._fetcher, HttpSourceFetcher):
            await self._fetcher.close()
