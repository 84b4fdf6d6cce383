"""Logging helpers for per-unit correlation."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(unit_id)s] %(name)s: %(message)s"

_current_unit_id: ContextVar[str | None] = ContextVar("extension_suite_unit_id", default=None)


def get_current_unit_id() -> str | None:
    """Return the id of the unit currently being installed, if any."""
    return _current_unit_id.get()


@contextmanager
def unit_log_context(unit_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``unit_id``."""
    token = _current_unit_id.set(unit_id)
    try:
        yield
    finally:
        _current_unit_id.reset(token)


class UnitContextFilter(logging.Filter):
    """Attach the current unit id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject unit_id into the log record."""
        record.unit_id = get_current_unit_id() or "-"
        return True


def install_unit_log_filter(handlers: Iterable[logging.Handler] | None = None) -> None:
    """Install unit context filters on log handlers.

    Args:
        handlers: Optional iterable of handlers to attach the filter to.
            Defaults to the root logger's handlers.
    """
    targets = list(handlers) if handlers is not None else list(logging.getLogger().handlers)
    for handler in targets:
        if any(isinstance(flt, UnitContextFilter) for flt in handler.filters):
            continue
        handler.addFilter(UnitContextFilter())


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with unit correlation for command-line use."""
    logging.basicConfig(level=level.upper(), format=DEFAULT_LOG_FORMAT)
    install_unit_log_filter()
