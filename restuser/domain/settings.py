"""Validated connection and timeout settings for the user directory.

Settings are built from the flat, string-keyed configuration the host keeps
for a provider instance. Construction either yields a fully valid, immutable
value or raises :class:`ConfigurationError`; nothing is silently defaulted
except options the host did not supply at all.

Call context:
    - ``restuser.app.factory.ProviderFactory`` validates and memoizes gateways
      by ``Settings`` equality.
    - ``restuser.adapters.http_client.PooledClient`` reads pool size and the
      three timeouts.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple
from urllib.parse import urlparse

from .errors import ConfigurationError

PROPERTY_BASE_URL = "baseURL"
PROPERTY_MAX_HTTP_CONNECTIONS = "maxHttpConnections"
API_SOCKET_TIMEOUT = "apiSocketTimeout"
API_CONNECT_TIMEOUT = "apiConnectTimeout"
API_CONNECTION_REQUEST_TIMEOUT = "apiConnectionRequestTimeout"

DEFAULT_MAX_CONNECTIONS = 5
DEFAULT_TIMEOUT_MS = 1000

_UNSIGNED_INT = re.compile(r"^\d+$")

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigProperty:
    """One named option of the configuration surface shown to the host."""

    name: str
    label: str
    default: str
    help_text: str


CONFIG_PROPERTIES: Tuple[ConfigProperty, ...] = (
    ConfigProperty(
        PROPERTY_BASE_URL,
        "Base URL",
        "http://rest-users-api:8081/",
        "Api url base to authenticate users",
    ),
    ConfigProperty(
        PROPERTY_MAX_HTTP_CONNECTIONS,
        "Max pool connections",
        str(DEFAULT_MAX_CONNECTIONS),
        "Max http connections in pool",
    ),
    ConfigProperty(
        API_SOCKET_TIMEOUT,
        "API Socket Timeout",
        str(DEFAULT_TIMEOUT_MS),
        "Max time [milliseconds] to wait for response",
    ),
    ConfigProperty(
        API_CONNECT_TIMEOUT,
        "API Connect Timeout",
        str(DEFAULT_TIMEOUT_MS),
        "Max time [milliseconds] to establish the connection",
    ),
    ConfigProperty(
        API_CONNECTION_REQUEST_TIMEOUT,
        "API Connection Request Timeout",
        str(DEFAULT_TIMEOUT_MS),
        "Max time [milliseconds] to wait until a connection in the pool "
        "is assigned to the requesting thread",
    ),
)


@dataclass(frozen=True)
class Settings:
    """Immutable connection settings; equal values share one pooled client."""

    base_url: str
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    socket_timeout_ms: int = DEFAULT_TIMEOUT_MS
    connect_timeout_ms: int = DEFAULT_TIMEOUT_MS
    connection_request_timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self) -> None:
        _check_base_url(self.base_url)
        for name in (
            "max_connections",
            "socket_timeout_ms",
            "connect_timeout_ms",
            "connection_request_timeout_ms",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer")

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        *,
        probe: Optional[Callable[[str], None]] = None,
    ) -> "Settings":
        """Build settings from the host's flat option mapping.

        Args:
            config: Option name to value (a string, or a list whose first
                entry is used).
            probe: Optional connectivity check called with the configured base
                URL; it must raise when no connection can be opened.

        Returns:
            A validated ``Settings`` value.

        Raises:
            ConfigurationError: On a missing, malformed or unreachable base URL,
                a non-numeric pool size, or a non-integer timeout.
        """
        raw_url = _first(config, PROPERTY_BASE_URL)
        if raw_url is None or not raw_url.strip():
            raise ConfigurationError("BaseURL is not specified")
        raw_url = raw_url.strip()
        _log.info("Loaded baseURL from module properties: %s", raw_url)
        _check_base_url(raw_url)

        if probe is not None:
            try:
                probe(raw_url)
            except Exception as exc:
                _log.warning("Base URL probe failed for %s: %s", raw_url, exc)
                raise ConfigurationError("Error accessing the base url") from exc

        base_url = raw_url
        if base_url.endswith("/"):
            base_url = base_url[:-1]
            _log.info("Removing trailing slash from URL: %s", base_url)

        raw_max = _first(config, PROPERTY_MAX_HTTP_CONNECTIONS)
        if raw_max is None:
            max_connections = DEFAULT_MAX_CONNECTIONS
        else:
            raw_max = raw_max.strip()
            if not _UNSIGNED_INT.match(raw_max) or int(raw_max) == 0:
                _log.warning("maxHttpConnections property is not valid. Enter a valid number")
                raise ConfigurationError("Max pool connections should be a number")
            max_connections = int(raw_max)

        settings = cls(
            base_url=base_url,
            max_connections=max_connections,
            socket_timeout_ms=_int_option(config, API_SOCKET_TIMEOUT),
            connect_timeout_ms=_int_option(config, API_CONNECT_TIMEOUT),
            connection_request_timeout_ms=_int_option(config, API_CONNECTION_REQUEST_TIMEOUT),
        )
        _log.info("Loaded settings: %s", settings)
        return settings

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    def timeouts(self) -> Tuple[float, float]:
        """Return ``(connect, read)`` timeouts in seconds for ``requests``."""
        return (self.connect_timeout_ms / 1000.0, self.socket_timeout_ms / 1000.0)

    @property
    def acquire_timeout_s(self) -> float:
        return self.connection_request_timeout_ms / 1000.0

    def describe(self) -> str:
        return (
            f"baseUrl: {self.base_url}; "
            f"maxConnections: {self.max_connections}; "
            f"apiSocketTimeout: {self.socket_timeout_ms}; "
            f"apiConnectTimeout: {self.connect_timeout_ms}; "
            f"apiConnectionRequestTimeout: {self.connection_request_timeout_ms}"
        )

    def __str__(self) -> str:
        return self.describe()


def _first(config: Mapping[str, Any], key: str) -> Optional[str]:
    value = config.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def _int_option(config: Mapping[str, Any], key: str) -> int:
    raw = _first(config, key)
    if raw is None:
        return DEFAULT_TIMEOUT_MS
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{key} should be a number") from None
    if value <= 0:
        raise ConfigurationError(f"{key} should be a positive number")
    return value


def _check_base_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"BaseURL is not a valid http(s) URL: {url!r}")


__all__ = [
    "API_CONNECTION_REQUEST_TIMEOUT",
    "API_CONNECT_TIMEOUT",
    "API_SOCKET_TIMEOUT",
    "CONFIG_PROPERTIES",
    "ConfigProperty",
    "PROPERTY_BASE_URL",
    "PROPERTY_MAX_HTTP_CONNECTIONS",
    "Settings",
]
