"""Shared helpers for the extension suite."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def capability(target: Any, name: str) -> Any | None:
    """Return a callable named ``name`` exposed by ``target``, if any.

    Mappings are probed by key, every other object by attribute.
    """
    if target is None:
        return None
    if isinstance(target, Mapping):
        candidate = target.get(name)
    else:
        candidate = getattr(target, name, None)
    return candidate if callable(candidate) else None
