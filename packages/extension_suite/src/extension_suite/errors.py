"""Error taxonomy for extension installation and teardown."""

from __future__ import annotations


class ExtensionSuiteError(Exception):
    """Base class for every error raised by the extension suite."""


class ExtensionNotFoundError(ExtensionSuiteError, LookupError):
    """No descriptor in the manifest matches the requested id."""

    def __init__(self, unit_id: str) -> None:
        self.unit_id = unit_id
        msg = f"Extension '{unit_id}' not found in manifest"
        super().__init__(msg)


class FetchError(ExtensionSuiteError):
    """Source text for a unit could not be retrieved."""

    def __init__(
        self, unit_id: str, url: str, reason: str, status_code: int | None = None
    ) -> None:
        self.unit_id = unit_id
        self.url = url
        self.reason = reason
        self.status_code = status_code
        if status_code is not None:
            msg = f"HTTP {status_code} fetching '{unit_id}' from {url}: {reason}"
        else:
            msg = f"Failed to fetch '{unit_id}' from {url}: {reason}"
        super().__init__(msg)


class LoadError(ExtensionSuiteError):
    """Evaluating a unit's source text raised."""

    def __init__(self, unit_id: str, cause: BaseException) -> None:
        self.unit_id = unit_id
        self.cause = cause
        msg = f"Evaluation of '{unit_id}' failed: {type(cause).__name__}: {cause}"
        super().__init__(msg)


class DispatchError(ExtensionSuiteError):
    """A unit's entry point raised while initializing."""

    def __init__(self, unit_id: str, kind: str, cause: BaseException) -> None:
        self.unit_id = unit_id
        self.kind = kind
        self.cause = cause
        msg = f"Entry point '{kind}' of '{unit_id}' failed: {type(cause).__name__}: {cause}"
        super().__init__(msg)


class InstallInProgressError(ExtensionSuiteError):
    """An install for the same unit id is already in flight."""

    def __init__(self, unit_id: str) -> None:
        self.unit_id = unit_id
        msg = f"Extension '{unit_id}' is already being installed"
        super().__init__(msg)


class UnloadWarning(ExtensionSuiteError):
    """A unit's own teardown hook raised.

    Collected during suite teardown and never raised.
    """

    def __init__(self, unit_id: str, name: str, cause: BaseException) -> None:
        self.unit_id = unit_id
        self.name = name
        self.cause = cause
        msg = f"Error unloading {name}: {type(cause).__name__}: {cause}"
        super().__init__(msg)
