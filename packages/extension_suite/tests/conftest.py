from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _set_required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "EXTENSION_SUITE_MANIFEST",
        "EXTENSION_SUITE_BASE_URL",
        "EXTENSION_SUITE_SETTINGS_STORE",
        "EXTENSION_SUITE_PACING_DELAY",
        "EXTENSION_SUITE_AUTO_INSTALL_DELAY",
        "EXTENSION_SUITE_FETCH_TIMEOUT",
        "EXTENSION_SUITE_MAX_RETRIES",
        "EXTENSION_SUITE_RETRY_DELAY",
        "EXTENSION_SUITE_BACKOFF_MULTIPLIER",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("EXTENSION_SUITE_AUTO_INSTALL", "true")
    monkeypatch.setenv("EXTENSION_SUITE_LOG_LEVEL", "INFO")
