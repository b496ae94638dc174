"""Network reachability probes selected when the service is composed."""

from __future__ import annotations

from typing import Optional, Protocol

import httpx
import structlog

LOGGER = structlog.get_logger(__name__)


class ConnectivityProbe(Protocol):
    async def is_online(self) -> bool: ...


class AlwaysOnlineProbe:
    """Stub probe for environments without a reliable reachability check."""

    async def is_online(self) -> bool:
        return True


class HttpConnectivityProbe:
    """Treats any HTTP response from ``url`` as proof the network is up."""

    def __init__(self, url: str, *, timeout_seconds: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self._url = url
        self._timeout = timeout_seconds
        self._client = client

    async def is_online(self) -> bool:
        try:
            if self._client is not None:
                await self._client.head(self._url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    await client.head(self._url)
        except httpx.HTTPError as exc:
            LOGGER.warning("connectivity.offline", url=self._url, error=repr(exc))
            return False
        return True
