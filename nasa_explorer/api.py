"""
Explorer-side client for the NASA Space Explorer proxy.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

import aiohttp

from nasa_explorer.config import Config
from nasa_explorer.errors import ConnectivityError, RemoteApiError

_LOG = logging.getLogger(__name__)

ENDPOINTS = frozenset({
    "/apod",
    "/mars-photos",
    "/mars-manifests",
    "/neo",
    "/images",
    "/epic",
    "/health",
})


def build_query(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Keep only parameters that carry a value, stringified for the query string."""
    query: Dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        query[key] = str(value)
    return query


class ExplorerAPI:
    """Thin async client for the proxy; every call is one fresh round trip."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, config: Optional[Config] = None):
        if config is not None:
            base_url = base_url or config.api_base_url
            timeout = timeout if timeout is not None else config.request_timeout
        self._base_url = (base_url or "http://localhost:5000/api").rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout if timeout is not None else 15)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def base_url(self) -> str:
        """Get the proxy base URL."""
        return self._base_url

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def url_for(self, endpoint: str) -> str:
        """Get the full URL of a known proxy endpoint."""
        if endpoint not in ENDPOINTS:
            raise ValueError(f"Unknown endpoint: {endpoint}")
        return f"{self._base_url}{endpoint}"

    async def request(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """
        GET an endpoint of the proxy.

        :param endpoint: one of ``ENDPOINTS``, e.g. ``"/apod"``
        :param params: query parameters; ``None`` and empty strings are dropped
        :return: parsed JSON body
        :raises RemoteApiError: the proxy answered with a non-2xx status
        :raises ConnectivityError: the proxy was unreachable, timed out or broke off the response
        """
        url = self.url_for(endpoint)
        query = build_query(params)
        session = await self._ensure_session()

        try:
            async with session.get(url, params=query) as response:
                if not 200 <= response.status < 300:
                    try:
                        data = await response.json(content_type=None)
                    except ValueError:
                        data = {}
                    message = data.get("error") if isinstance(data, dict) else None
                    if not message:
                        message = f"HTTP {response.status} {response.reason}"
                    _LOG.warning("Request to %s failed: %s", endpoint, message)
                    raise RemoteApiError(str(message), response.status)
                try:
                    return await response.json(content_type=None)
                except ValueError as ex:
                    raise RemoteApiError(f"Invalid JSON response from {endpoint}", response.status) from ex
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as ex:
            _LOG.warning("Cannot reach proxy at %s: %s", url, ex)
            raise ConnectivityError() from ex
        except aiohttp.ClientError as ex:
            _LOG.warning("Broken response from proxy at %s: %s", url, ex)
            raise ConnectivityError() from ex

    async def fetch_apod(self, **params) -> Any:
        """Astronomy Picture of the Day."""
        return await self.request("/apod", params)

    async def fetch_mars_photos(self, **params) -> Any:
        """Mars rover photos for one sol or Earth date."""
        return await self.request("/mars-photos", params)

    async def fetch_mars_manifests(self) -> Any:
        """Mission manifest of the Curiosity rover."""
        return await self.request("/mars-manifests")

    async def fetch_neo(self, **params) -> Any:
        """Near Earth Objects feed."""
        return await self.request("/neo", params)

    async def fetch_images(self, **params) -> Any:
        """NASA Image and Video Library search."""
        return await self.request("/images", params)

    async def fetch_epic(self, **params) -> Any:
        """EPIC Earth imagery metadata."""
        return await self.request("/epic", params)

    async def check_health(self) -> Any:
        """Proxy health status."""
        return await self.request("/health")
