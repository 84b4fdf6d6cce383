"""Ambient channel through which unit code can reach its host API shim."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from extension_suite.host.shim import HostApiShim

_current_host_api: ContextVar[HostApiShim | None] = ContextVar(
    "extension_suite_host_api", default=None
)


def get_host_api() -> HostApiShim | None:
    """Return the shim of the unit currently being installed, if any."""
    return _current_host_api.get()


@contextmanager
def host_api_scope(shim: HostApiShim) -> Iterator[HostApiShim]:
    """Expose ``shim`` ambiently for exactly one unit's evaluation and dispatch."""
    token = _current_host_api.set(shim)
    try:
        yield shim
    finally:
        _current_host_api.reset(token)
