"""
HTTP transport used by the executor.

A transport sends one request and hands back the status code and decoded
body. It never retries and never interprets the status; network faults are
raised as exceptions (httpx.TransportError, ConnectionError, TimeoutError).
"""

from collections.abc import Mapping
from typing import Protocol

import httpx

DEFAULT_TIMEOUT = 60
USER_AGENT = "kontent-management-python/0.1.0"


class Transport(Protocol):
    """Anything that can send a request and return ``(status, body)``."""

    async def send(
        self,
        method: str,
        path: str,
        body: str | None,
        headers: Mapping[str, str],
    ) -> tuple[int, str | None]: ...


def build_async_client(
    timeout: float = DEFAULT_TIMEOUT,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` with the client's default headers."""
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpxTransport:
    """Transport over ``httpx.AsyncClient``. Paths are absolute URLs."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT):
        self._owns_client = client is None
        self._client = client or build_async_client(timeout)

    async def send(
        self,
        method: str,
        path: str,
        body: str | None,
        headers: Mapping[str, str],
    ) -> tuple[int, str | None]:
        content = body.encode("utf-8") if body is not None else None
        response = await self._client.request(method, path, content=content, headers=dict(headers))
        text = response.text
        return response.status_code, text or None

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
