"""
Error types shared by the proxy server and the explorer client.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from typing import Optional

CONNECTIVITY_MESSAGE = "Unable to connect to NASA API server. Please ensure the backend is running."
NETWORK_ERROR_MESSAGE = "Network error occurred"


class ExplorerError(Exception):
    """Base exception for every explorer failure."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class RemoteApiError(ExplorerError):
    """The remote service answered with a non-2xx status."""

    def __init__(self, message: str, status: int):
        super().__init__(message, status)


ApiError = RemoteApiError


class ConnectivityError(ExplorerError):
    """The proxy could not be reached at all."""

    def __init__(self, message: str = CONNECTIVITY_MESSAGE):
        super().__init__(message)


class ProxyUpstreamError(ExplorerError):
    """The proxy's own call to NASA failed before a response arrived."""

    def __init__(self, endpoint: str, detail: str = ""):
        super().__init__(NETWORK_ERROR_MESSAGE, 500)
        self.endpoint = endpoint
        self.detail = detail
