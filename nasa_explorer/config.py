"""
Configuration management for the NASA Space Explorer proxy and client.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

_LOG = logging.getLogger(__name__)

DEMO_API_KEY = "DEMO_KEY"

DEFAULT_CONFIG = {
    "api_key": "",
    "host": "0.0.0.0",
    "port": 5000,
    "nasa_base_url": "https://api.nasa.gov",
    "images_base_url": "https://images-api.nasa.gov",
    "api_base_url": "http://localhost:5000/api",
    "request_timeout": 15,
    "log_level": "INFO",
}

# config key -> (environment variable, converter)
ENV_OVERRIDES = {
    "api_key": ("NASA_API_KEY", str),
    "host": ("HOST", str),
    "port": ("PORT", int),
    "nasa_base_url": ("NASA_BASE_URL", str),
    "images_base_url": ("NASA_IMAGES_URL", str),
    "api_base_url": ("API_BASE_URL", str),
    "request_timeout": ("REQUEST_TIMEOUT", float),
    "log_level": ("LOG_LEVEL", str),
}


class Config:
    """Configuration for the explorer: JSON file first, environment on top."""

    def __init__(self, config_file_path: Optional[str] = None, use_env: bool = True):
        """Initialize configuration."""
        self._config_file_path = config_file_path
        self._use_env = use_env
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file, then apply environment overrides."""
        self._config = DEFAULT_CONFIG.copy()

        if self._config_file_path and os.path.exists(self._config_file_path):
            try:
                with open(self._config_file_path, "r", encoding="utf-8") as file:
                    self._config.update(json.load(file))
                    _LOG.info("Configuration loaded from %s", self._config_file_path)
            except (OSError, json.JSONDecodeError) as ex:
                _LOG.error("Failed to load configuration: %s", ex)
        else:
            _LOG.info("Configuration file not found, using defaults")

        if self._use_env:
            load_dotenv()
            self._apply_env()

    def _apply_env(self) -> None:
        for key, (env_name, convert) in ENV_OVERRIDES.items():
            raw = os.environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                self._config[key] = convert(raw)
            except ValueError:
                _LOG.warning("Ignoring invalid %s value: %r", env_name, raw)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def update(self, data: Dict[str, Any]) -> None:
        """Update configuration with new data."""
        self._config.update(data)

    @property
    def api_key(self) -> str:
        """Get NASA API key, falling back to the shared rate-limited key."""
        return self._config.get("api_key") or DEMO_API_KEY

    @property
    def using_demo_key(self) -> bool:
        """Check whether the shared rate-limited key is in use."""
        return self.api_key == DEMO_API_KEY

    @property
    def host(self) -> str:
        """Get interface to bind."""
        return self._config.get("host", "0.0.0.0")

    @property
    def port(self) -> int:
        """Get port to listen on."""
        return int(self._config.get("port", 5000))

    @property
    def nasa_base_url(self) -> str:
        """Get NASA Open API base URL."""
        return self._config.get("nasa_base_url", "https://api.nasa.gov").rstrip("/")

    @property
    def images_base_url(self) -> str:
        """Get NASA Image and Video Library base URL."""
        return self._config.get("images_base_url", "https://images-api.nasa.gov").rstrip("/")

    @property
    def api_base_url(self) -> str:
        """Base URL of the proxy, as seen by the explorer client."""
        return self._config.get("api_base_url", "http://localhost:5000/api").rstrip("/")

    @property
    def request_timeout(self) -> float:
        """Get request timeout in seconds."""
        return float(self._config.get("request_timeout", 15))

    @property
    def log_level(self) -> str:
        """Get log level name."""
        return str(self._config.get("log_level", "INFO")).upper()
