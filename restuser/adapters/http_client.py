"""Pooled HTTP transport for the directory gateway.

This module wraps one ``requests.Session`` whose connection pool is sized from
:class:`restuser.domain.settings.Settings`, and bounds concurrent requests with
a lease semaphore so waiting for a free connection honours the configured
acquire timeout.

Dependencies:
    - ``requests`` (and its ``HTTPAdapter``/urllib3 pool) for network I/O.
    - ``restuser.adapters.api_errors`` for typed transport failures.

Call context:
    - Constructed by ``DirectoryRestAdapter``; one instance per distinct
      ``Settings`` value, shared by every thread the host calls from.
    - No retries are performed; callers that need them wrap the gateway.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

import requests
from requests import exceptions as req_exc
from requests.adapters import HTTPAdapter

from restuser.adapters.api_errors import (
    ApiConnectTimeoutError,
    ApiConnectionError,
    ApiPoolTimeoutError,
    ApiSocketTimeoutError,
)
from restuser.domain.ports import PoolStats
from restuser.domain.settings import Settings
from restuser.utils.logging import response_bodies_enabled

DEFAULT_PROBE_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class RawResponse:
    """Status code and body text of one completed HTTP exchange."""

    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is empty or not valid JSON.
        """
        return json.loads(self.text)


class PooledClient:
    """Bounded, reusable HTTP client configured from ``Settings``.

    Thread-safe: leases are counted under a lock and the underlying urllib3
    pool blocks instead of opening connections beyond ``max_connections``.
    """

    def __init__(
        self, settings: Settings, *, session: Optional[requests.Session] = None
    ) -> None:
        """Create the pool.

        Args:
            settings: Validated connection settings.
            session: Optional preconfigured session (tests inject stubs here);
                when omitted a session with a sized ``HTTPAdapter`` is built.
        """
        self._log = logging.getLogger(__name__)
        self.settings = settings
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=1,
                pool_maxsize=settings.max_connections,
                pool_block=True,
                max_retries=0,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session
        self._slots = threading.BoundedSemaphore(settings.max_connections)
        self._lock = threading.Lock()
        self._leased = 0
        self._pending = 0
        self._log.info(
            "Initializing HTTP pool with maxConnections: %s, connectionRequestTimeout: %s, "
            "connectTimeout: %s, socketTimeout: %s",
            settings.max_connections,
            settings.connection_request_timeout_ms,
            settings.connect_timeout_ms,
            settings.socket_timeout_ms,
        )

    # ------------------------------------------------------------------
    # Leasing
    # ------------------------------------------------------------------
    @contextmanager
    def lease(self, context: str = "") -> Iterator[None]:
        """Hold one pool slot for the duration of the block.

        Raises:
            ApiPoolTimeoutError: If no slot frees up within the acquire timeout.
        """
        with self._lock:
            self._pending += 1
        try:
            acquired = self._slots.acquire(timeout=self.settings.acquire_timeout_s)
        finally:
            with self._lock:
                self._pending -= 1
        if not acquired:
            raise ApiPoolTimeoutError(
                f"No pooled connection available after "
                f"{self.settings.connection_request_timeout_ms} ms",
                context=context,
            )
        with self._lock:
            self._leased += 1
        try:
            yield
        finally:
            with self._lock:
                self._leased -= 1
            self._slots.release()

    def stats(self) -> PoolStats:
        with self._lock:
            leased = self._leased
            pending = self._pending
        maximum = self.settings.max_connections
        return PoolStats(
            max_connections=maximum,
            max_per_route=maximum,
            available=maximum - leased,
            leased=leased,
            pending=pending,
        )

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    def _headers(self, *, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json", "Connection": "keep-alive"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def request(
        self,
        method: str,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> RawResponse:
        """Send one request and read the full response inside a pool lease.

        Args:
            method: HTTP method name.
            url: Absolute endpoint URL.
            json_body: Optional payload serialized to JSON text.

        Returns:
            ``RawResponse`` for any HTTP status; status handling is the caller's.

        Raises:
            ApiPoolTimeoutError: No pooled connection became free in time.
            ApiConnectTimeoutError: Connection establishment timed out.
            ApiSocketTimeoutError: The server stalled past the socket timeout.
            ApiConnectionError: Any other I/O failure.
        """
        context = f"{method} {url}"
        data = None if json_body is None else json.dumps(json_body)
        headers = self._headers(json_body=json_body is not None)
        self._log.debug("Executing Http Request [%s] on [%s]", method, url)
        for name, value in headers.items():
            self._log.debug("Request header: %s -> %s", name, value)

        with self.lease(context):
            try:
                resp = self.session.request(
                    method,
                    url,
                    data=data,
                    headers=headers,
                    timeout=self.settings.timeouts(),
                )
            except req_exc.ConnectTimeout as exc:
                raise ApiConnectTimeoutError(
                    f"Connect timeout contacting {url}", context=context
                ) from exc
            except req_exc.Timeout as exc:
                raise ApiSocketTimeoutError(
                    f"Socket timeout contacting {url}", context=context
                ) from exc
            except req_exc.RequestException as exc:
                raise ApiConnectionError(
                    f"Error executing request to {url}: {exc}", context=context
                ) from exc
            try:
                if getattr(resp, "encoding", None) is None:
                    resp.encoding = "utf-8"
                raw = RawResponse(status=int(resp.status_code), text=resp.text or "")
            finally:
                close = getattr(resp, "close", None)
                if close is not None:
                    close()

        self._log.debug("Response code obtained from server: %s", raw.status)
        if response_bodies_enabled():
            self._log.debug("Response body obtained from server: %s", raw.text)
        return raw

    def close(self) -> None:
        """Release pooled connections; requests already in flight still finish."""
        self.session.close()


def probe_base_url(url: str, *, timeout_s: float = DEFAULT_PROBE_TIMEOUT_S) -> None:
    """Open and close one connection to ``url``; any HTTP status is accepted.

    Raises:
        ApiConnectionError: If no connection could be established.
    """
    context = f"HEAD {url}"
    try:
        resp = requests.head(url, timeout=timeout_s, allow_redirects=False)
    except req_exc.RequestException as exc:
        raise ApiConnectionError(f"Cannot open connection to {url}", context=context) from exc
    resp.close()


__all__ = ["PooledClient", "RawResponse", "probe_base_url"]
