"""Transport-level error types and payload helpers for the REST adapters.

These exceptions never leave the adapter layer: the directory gateway logs
them and re-raises the domain ``BackendAuthenticationError``.
"""

from __future__ import annotations

import json
from typing import Any, Optional


class ApiError(RuntimeError):
    """Base class for REST transport failures."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload
        self.context = context


class ApiTransportError(ApiError):
    """No usable HTTP response was obtained."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


class ApiTimeoutError(ApiTransportError):
    """One of the configured timeouts expired."""


class ApiConnectTimeoutError(ApiTimeoutError):
    """Connection could not be established in time."""


class ApiSocketTimeoutError(ApiTimeoutError):
    """Server did not send data in time."""


class ApiPoolTimeoutError(ApiTimeoutError):
    """No pooled connection became free in time."""


class ApiConnectionError(ApiTransportError):
    """Connection refused, reset, or any other I/O failure."""


def parse_error_payload(text: Optional[str]) -> Any:
    """Best-effort extraction of an error payload without raising."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text[:400]


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def first_string(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("detail", "message", "error", "title"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, (list, dict)):
                candidate = first_string(value)
                if candidate:
                    return candidate
    if isinstance(payload, list):
        for item in payload:
            candidate = first_string(item)
            if candidate:
                return candidate
    return None


__all__ = [
    "ApiConnectTimeoutError",
    "ApiConnectionError",
    "ApiError",
    "ApiPoolTimeoutError",
    "ApiSocketTimeoutError",
    "ApiTimeoutError",
    "ApiTransportError",
    "build_error_message",
    "first_string",
    "parse_error_payload",
]
