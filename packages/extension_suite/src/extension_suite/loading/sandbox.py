"""Evaluate fetched source text as an isolated module.

Modules built here appear in ``sys.modules`` only while their body runs: each
unit gets its own namespace, and the orchestrator's module graph is left
untouched once evaluation returns. The
isolation is about namespaces and API shimming, not about trust.
"""

from __future__ import annotations

import importlib.abc
import importlib.util
import linecache
import logging
import re
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from extension_suite.errors import LoadError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import CodeType, ModuleType

logger = logging.getLogger(__name__)

MEDIA_TYPE = "text/x-python"
UNIT_MODULE_PREFIX = "extension_suite.units"
INJECTED_HOST_API = "extension_api"

_UNSAFE_NAME_CHARS = re.compile(r"\W")


@dataclass(frozen=True)
class ModuleArtifact:
    """Source text materialized as a loadable module resource."""

    unit_id: str
    source: str
    media_type: str = MEDIA_TYPE

    @property
    def module_name(self) -> str:
        return f"{UNIT_MODULE_PREFIX}.{_UNSAFE_NAME_CHARS.sub('_', self.unit_id)}"

    @property
    def filename(self) -> str:
        return f"<extension:{self.unit_id}>"


@contextmanager
def materialize(artifact: ModuleArtifact) -> Iterator[ModuleArtifact]:
    """Register the artifact's source for tracebacks and drop it on exit."""
    lines = artifact.source.splitlines(keepends=True)
    linecache.cache[artifact.filename] = (len(artifact.source), None, lines, artifact.filename)
    try:
        yield artifact
    finally:
        linecache.cache.pop(artifact.filename, None)


@contextmanager
def registered(module: ModuleType) -> Iterator[ModuleType]:
    """Expose ``module`` in ``sys.modules`` while its body runs.

    Class-level machinery such as ``dataclasses`` resolves names through
    ``sys.modules[cls.__module__]``. Any previous entry under the same name is
    restored on exit.
    """
    name = module.__name__
    previous = sys.modules.get(name)
    sys.modules[name] = module
    try:
        yield module
    finally:
        if previous is not None:
            sys.modules[name] = previous
        else:
            sys.modules.pop(name, None)


class SourceTextLoader(importlib.abc.InspectLoader):
    """Import loader serving one artifact's source text."""

    def __init__(self, artifact: ModuleArtifact) -> None:
        self._artifact = artifact

    def get_source(self, fullname: str) -> str:
        return self._artifact.source

    def is_package(self, fullname: str) -> bool:
        return False

    def get_code(self, fullname: str) -> CodeType:
        return compile(self._artifact.source, self._artifact.filename, "exec", dont_inherit=True)

    def exec_module(self, module: ModuleType) -> None:
        exec(self.get_code(module.__name__), module.__dict__)  # noqa: S102


class SandboxedLoader:
    """Turn source text into an evaluated, isolated module namespace."""

    def new_module(self, artifact: ModuleArtifact) -> ModuleType:
        loader = SourceTextLoader(artifact)
        spec = importlib.util.spec_from_loader(
            artifact.module_name, loader, origin=artifact.filename
        )
        module = importlib.util.module_from_spec(spec)
        module.__file__ = artifact.filename
        return module

    def load(self, unit_id: str, source: str, host_api: Any = None) -> ModuleType:
        """Evaluate ``source`` with ``host_api`` bound in the module's globals.

        Raises:
            LoadError: If compiling or executing the source raises.
        """
        artifact = ModuleArtifact(unit_id=unit_id, source=source)
        with materialize(artifact):
            module = self.new_module(artifact)
            module.__dict__[INJECTED_HOST_API] = host_api
            try:
                with registered(module):
                    module.__loader__.exec_module(module)
            except (Exception, SystemExit) as exc:
                raise LoadError(unit_id, exc) from exc
        logger.debug(
            "Evaluated %s as %s (%s), exports: %s",
            unit_id,
            artifact.module_name,
            artifact.media_type,
            ", ".join(name for name in vars(module) if not name.startswith("__")),
        )
        return module
