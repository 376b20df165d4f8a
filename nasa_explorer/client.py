"""
NASA API client used by the proxy to reach the public NASA Open APIs.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import json
import logging
import ssl
from typing import Any, Dict, Optional

import aiohttp
import certifi

from nasa_explorer.config import Config
from nasa_explorer.errors import ProxyUpstreamError, RemoteApiError

_LOG = logging.getLogger(__name__)

DEFAULT_ROVER = "curiosity"
DEFAULT_IMAGE_QUERY = "space"
DEFAULT_MEDIA_TYPE = "image"
GENERIC_REMOTE_ERROR = "NASA API Error"


def remote_error_message(payload: Any) -> str:
    """Pull a human readable message out of a NASA error body."""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        for key in ("msg", "reason"):
            if payload.get(key):
                return str(payload[key])
    return GENERIC_REMOTE_ERROR


def _clean_params(params: Dict[str, Any]) -> Dict[str, str]:
    """Drop empty values; aiohttp only accepts str/int/float query values."""
    return {key: str(value) for key, value in params.items() if value is not None and value != ""}


class NASAClient:
    """NASA API client with one pooled session for every proxied request."""

    def __init__(self, config: Config):
        """Initialize NASA client."""
        self._config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists with robust networking config."""
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            ssl_context.check_hostname = True
            ssl_context.verify_mode = ssl.CERT_REQUIRED

            connector = aiohttp.TCPConnector(
                ssl=ssl_context,
                limit=20,
                limit_per_host=10,
                ttl_dns_cache=300,
                use_dns_cache=True,
                keepalive_timeout=30,
            )

            timeout = aiohttp.ClientTimeout(
                total=self._config.request_timeout,
                connect=5,
            )

            headers = {
                "User-Agent": "NASA-Space-Explorer-Proxy/0.1",
                "Accept": "application/json, text/plain, */*",
            }

            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                headers=headers,
            )

            _LOG.info("NASA HTTP session created with SSL verification")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _keyed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"api_key": self._config.api_key, **params}

    async def _make_request(self, label: str, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Forward one GET request to NASA.

        :param label: endpoint name used in logs and errors
        :return: the decoded JSON body
        :raises RemoteApiError: NASA answered with a non-2xx status
        :raises ProxyUpstreamError: NASA could not be reached or sent garbage
        """
        await self._ensure_session()
        query = _clean_params(params or {})

        try:
            _LOG.debug("Requesting %s: %s", label, url)
            async with self._session.get(url, params=query) as response:
                _LOG.debug("Response: HTTP %s from %s", response.status, url)
                text = await response.text()

                if 200 <= response.status < 300:
                    try:
                        return json.loads(text)
                    except json.JSONDecodeError as ex:
                        _LOG.error("Error fetching %s: invalid JSON body", label)
                        raise ProxyUpstreamError(label, f"invalid JSON: {ex}") from ex

                try:
                    payload = json.loads(text) if text else {}
                except json.JSONDecodeError:
                    payload = {}
                message = remote_error_message(payload)
                _LOG.error("Error fetching %s: HTTP %s %s", label, response.status, message)
                raise RemoteApiError(message, response.status)

        except asyncio.TimeoutError as ex:
            _LOG.error("Error fetching %s: timeout", label)
            raise ProxyUpstreamError(label, "timeout") from ex
        except aiohttp.ClientError as ex:
            _LOG.error("Error fetching %s: %s", label, ex)
            raise ProxyUpstreamError(label, str(ex)) from ex

    async def fetch_apod(
        self,
        date: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        count: Optional[str] = None,
    ) -> Any:
        """Fetch the Astronomy Picture of the Day, a date range of them, or random ones."""
        params = self._keyed({"date": date, "start_date": start_date, "end_date": end_date, "count": count})
        return await self._make_request("APOD", f"{self._config.nasa_base_url}/planetary/apod", params)

    async def fetch_mars_photos(
        self,
        rover: Optional[str] = None,
        page: Any = 1,
        sol: Optional[str] = None,
        earth_date: Optional[str] = None,
        camera: Optional[str] = None,
    ) -> Any:
        """Fetch one page of rover photos for a sol or Earth date."""
        rover = rover or DEFAULT_ROVER
        params = self._keyed({"page": page or 1, "sol": sol, "earth_date": earth_date, "camera": camera})
        url = f"{self._config.nasa_base_url}/mars-photos/api/v1/rovers/{rover}/photos"
        return await self._make_request("Mars Photos", url, params)

    async def fetch_mars_manifest(self, rover: str = DEFAULT_ROVER) -> Any:
        """Fetch the mission manifest of a rover."""
        url = f"{self._config.nasa_base_url}/mars-photos/api/v1/manifests/{rover}"
        return await self._make_request("Mars Manifests", url, self._keyed({}))

    async def fetch_neo_feed(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Any:
        """Fetch the NEO feed, keyed by close-approach date."""
        params = self._keyed({"start_date": start_date, "end_date": end_date})
        return await self._make_request("NEO", f"{self._config.nasa_base_url}/neo/rest/v1/feed", params)

    async def search_images(self, q: Optional[str] = None, media_type: Optional[str] = None, page: Any = 1) -> Any:
        """Search the NASA Image and Video Library. This host takes no API key."""
        params = {
            "q": q or DEFAULT_IMAGE_QUERY,
            "media_type": media_type or DEFAULT_MEDIA_TYPE,
            "page": page or 1,
        }
        return await self._make_request("NASA Images", f"{self._config.images_base_url}/search", params)

    async def fetch_epic(self, date: Optional[str] = None) -> Any:
        """Fetch EPIC natural-colour image metadata, latest or for one date."""
        endpoint = f"natural/date/{date}" if date else "natural"
        url = f"{self._config.nasa_base_url}/EPIC/api/{endpoint}"
        return await self._make_request("EPIC", url, self._keyed({}))
