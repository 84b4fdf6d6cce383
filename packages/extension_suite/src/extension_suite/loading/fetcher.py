"""Retrieve unit source text over HTTP."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import httpx

from extension_suite.errors import FetchError

if TYPE_CHECKING:
    from extension_suite.manifest.models import ExtensionDescriptor

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0


class SourceFetcher(Protocol):
    """Anything that can turn a descriptor into source text."""

    async def fetch(self, descriptor: ExtensionDescriptor) -> str: ...


class HttpSourceFetcher:
    """Fetch source text with an ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Optional preconfigured client; one is created when omitted.
            timeout: Transport timeout in seconds for a created client.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, descriptor: ExtensionDescriptor) -> str:
        """Return the source text for ``descriptor``.

        Raises:
            FetchError: On transport failure, a non-2xx status, or an empty body.
        """
        url = descriptor.source_location
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(descriptor.id, url, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise FetchError(
                descriptor.id,
                url,
                response.reason_phrase or "request failed",
                status_code=response.status_code,
            )

        code = response.text
        if not code.strip():
            raise FetchError(descriptor.id, url, "Empty file content")
        logger.debug("Fetched %d characters for %s from %s", len(code), descriptor.id, url)
        return code
