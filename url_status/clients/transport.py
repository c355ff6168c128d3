"""Shared async HTTP transport used by every fetch worker."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from url_status.constants import DEFAULT_TIMEOUT, REQUEST_HEADERS
from url_status.errors import RequestConstructionError

logger = logging.getLogger(__name__)


class StatusTransport:
    """Minimal async wrapper around :class:`httpx.AsyncClient` for status checks.

    One instance is opened per run and shared by all workers; the underlying
    connection pool is safe for concurrent use without extra locking.
    """
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        read_timeout: Optional[float] = None,
        verify_tls: bool = False,
        max_connections: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Create a transport; the HTTP client is opened by ``async with``.

        Parameters
        ----------
        timeout:
            Seconds allowed for establishing the connection, TLS handshake
            included.
        read_timeout:
            Optional bound on waiting for the response head. ``None`` leaves
            it unbounded.
        verify_tls:
            Verify server certificates. Disabled by default so self-signed
            endpoints can still be checked; this is insecure and logged as such.
        max_connections:
            Upper bound of simultaneous connections, normally the worker count.
        transport:
            Optional low-level transport, e.g. :class:`httpx.MockTransport`.
        """
        self.verify_tls = verify_tls
        self._timeout = httpx.Timeout(None, connect=timeout, read=read_timeout)
        # every request carries Connection: close, nothing is worth keeping
        self._limits = httpx.Limits(
            max_connections=max_connections, max_keepalive_connections=0
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "StatusTransport":
        """Open the HTTP client and return ``self``."""
        await self._ensure_client()
        if not self.verify_tls:
            logger.warning(
                "TLS certificate verification is DISABLED; responses from "
                "untrusted or intercepted endpoints will be accepted"
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        """Close the HTTP client when leaving the context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> None:
        """Instantiate the underlying :class:`httpx.AsyncClient` if missing."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=self._limits,
                verify=self.verify_tls,
                follow_redirects=True,
                transport=self._transport,
            )

    def _require_client(self) -> httpx.AsyncClient:
        """Return the initialized HTTP client or raise ``RuntimeError``."""
        if self._client is None:
            raise RuntimeError(
                "Transport not initialized; use 'async with StatusTransport()'")
        return self._client

    def build_request(self, url: str) -> httpx.Request:
        """Build the GET request for ``url``.

        Raises :class:`RequestConstructionError` when httpx refuses the URL;
        nothing has touched the network at that point.
        """
        client = self._require_client()
        try:
            return client.build_request("GET", url, headers=REQUEST_HEADERS)
        except (httpx.InvalidURL, ValueError, TypeError) as exc:
            raise RequestConstructionError(str(exc)) from exc

    async def fetch_status(self, url: str) -> int:
        """Issue one GET against ``url`` and return the HTTP status code.

        The body is never read; the streamed response is closed before
        returning, whatever the status. Network failures propagate as
        :class:`httpx.RequestError`.
        """
        client = self._require_client()
        request = self.build_request(url)
        resp = await client.send(request, stream=True)
        try:
            return resp.status_code
        finally:
            await resp.aclose()
