"""Pydantic models for suite settings."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from extension_suite.loading.fetcher import DEFAULT_FETCH_TIMEOUT
from extension_suite.orchestrator import DEFAULT_BACKOFF_MULTIPLIER, DEFAULT_RETRY_DELAY


class SuiteSettings(BaseModel, frozen=True):
    """Runtime configuration loaded from environment variables."""

    manifest_path: str | None = None
    base_url: str | None = None
    auto_install: bool = True
    auto_install_delay: float = Field(default=0.0, ge=0.0)
    pacing_delay: float = Field(default=0.0, ge=0.0)
    max_retries: int = Field(default=0, ge=0)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0.0)
    backoff_multiplier: float = Field(default=DEFAULT_BACKOFF_MULTIPLIER, ge=1.0)
    fetch_timeout: float = Field(default=DEFAULT_FETCH_TIMEOUT, gt=0.0)
    settings_store_path: str | None = None
    log_level: str = "INFO"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ValueError(msg) from None
    if value < 0:
        msg = f"{name} must not be negative, got {raw!r}"
        raise ValueError(msg)
    return value


def _parse_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ValueError(msg) from None
    if value < 0:
        msg = f"{name} must not be negative, got {raw!r}"
        raise ValueError(msg)
    return value


def load_settings() -> SuiteSettings:
    """Load settings from environment variables with defaults."""
    load_dotenv()

    fetch_timeout = _parse_float("EXTENSION_SUITE_FETCH_TIMEOUT", str(DEFAULT_FETCH_TIMEOUT))
    if fetch_timeout == 0:
        msg = "EXTENSION_SUITE_FETCH_TIMEOUT must be greater than zero"
        raise ValueError(msg)
    backoff_multiplier = _parse_float(
        "EXTENSION_SUITE_BACKOFF_MULTIPLIER", str(DEFAULT_BACKOFF_MULTIPLIER)
    )
    if backoff_multiplier < 1:
        msg = "EXTENSION_SUITE_BACKOFF_MULTIPLIER must be at least 1"
        raise ValueError(msg)

    return SuiteSettings(
        manifest_path=os.getenv("EXTENSION_SUITE_MANIFEST") or None,
        base_url=os.getenv("EXTENSION_SUITE_BASE_URL") or None,
        auto_install=_parse_bool(os.getenv("EXTENSION_SUITE_AUTO_INSTALL", "true")),
        auto_install_delay=_parse_float("EXTENSION_SUITE_AUTO_INSTALL_DELAY", "0"),
        pacing_delay=_parse_float("EXTENSION_SUITE_PACING_DELAY", "0"),
        max_retries=_parse_int("EXTENSION_SUITE_MAX_RETRIES", "0"),
        retry_delay=_parse_float("EXTENSION_SUITE_RETRY_DELAY", str(DEFAULT_RETRY_DELAY)),
        backoff_multiplier=backoff_multiplier,
        fetch_timeout=fetch_timeout,
        settings_store_path=os.getenv("EXTENSION_SUITE_SETTINGS_STORE") or None,
        log_level=os.getenv("EXTENSION_SUITE_LOG_LEVEL", "INFO"),
    )
