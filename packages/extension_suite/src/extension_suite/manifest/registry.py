"""Ordered, read-only registry of extension descriptors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from extension_suite.errors import ExtensionNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from extension_suite.manifest.models import ExtensionDescriptor


class ManifestRegistry:
    """Static list of descriptors whose order is the install order.

    There is no dependency graph: units that others rely on must be declared
    first, and the declared order is preserved exactly.
    """

    def __init__(self, descriptors: Iterable[ExtensionDescriptor]) -> None:
        ordered = tuple(descriptors)
        by_id: dict[str, ExtensionDescriptor] = {}
        for descriptor in ordered:
            if descriptor.id in by_id:
                msg = f"Duplicate extension id in manifest: '{descriptor.id}'"
                raise ValueError(msg)
            by_id[descriptor.id] = descriptor
        self._descriptors = ordered
        self._by_id = by_id

    def __iter__(self) -> Iterator[ExtensionDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._by_id

    def ids(self) -> list[str]:
        """Return descriptor ids in declared order."""
        return [descriptor.id for descriptor in self._descriptors]

    def get(self, unit_id: str) -> ExtensionDescriptor:
        """Look up a descriptor by id.

        Raises:
            ExtensionNotFoundError: If no descriptor has this id.
        """
        try:
            return self._by_id[unit_id]
        except KeyError:
            raise ExtensionNotFoundError(unit_id) from None
