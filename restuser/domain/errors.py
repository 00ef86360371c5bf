"""Domain-level error types shared by the gateway, cache and provider.

The taxonomy is deliberately small. Callers outside the adapter layer only
ever see these types; transport exceptions are translated at the gateway.
"""
from __future__ import annotations

from typing import Optional

BACKEND_AUTHENTICATION_ERROR = "BACKEND_AUTHENTICATION_ERROR"
CONFIGURATION_INVALID = "CONFIGURATION_INVALID"


class DirectoryError(Exception):
    """Base class for user-directory errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ConfigurationError(DirectoryError):
    """Invalid or unreachable connection settings."""

    def __init__(self, message: str):
        super().__init__(CONFIGURATION_INVALID, message)


class BackendAuthenticationError(DirectoryError):
    """Uniform failure for any remote fault beyond a clean not-found.

    The message is fixed so transport and backend internals never reach the
    authentication flow; diagnostics are logged where the fault happens.
    """

    def __init__(self) -> None:
        super().__init__(BACKEND_AUTHENTICATION_ERROR, BACKEND_AUTHENTICATION_ERROR)


class BackendError(BackendAuthenticationError):
    """Non-success status on an operation that requires success."""

    def __init__(self, status: Optional[int] = None) -> None:
        super().__init__()
        self.status = status


__all__ = [
    "BACKEND_AUTHENTICATION_ERROR",
    "CONFIGURATION_INVALID",
    "BackendAuthenticationError",
    "BackendError",
    "ConfigurationError",
    "DirectoryError",
]
