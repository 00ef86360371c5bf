from __future__ import annotations

import json
import threading
import time

import pytest
from requests import exceptions as req_exc

from restuser.adapters import http_client
from restuser.adapters.api_errors import (
    ApiConnectTimeoutError,
    ApiConnectionError,
    ApiPoolTimeoutError,
    ApiSocketTimeoutError,
)
from restuser.adapters.http_client import PooledClient, RawResponse, probe_base_url
from restuser.tests.unit.adapters.helpers import ResponseStub, SessionStub, make_settings


def test_raw_response_ok_covers_only_2xx() -> None:
    assert RawResponse(200, "").ok
    assert RawResponse(204, "").ok
    assert RawResponse(299, "").ok
    assert not RawResponse(199, "").ok
    assert not RawResponse(302, "").ok
    assert not RawResponse(404, "{}").ok
    assert not RawResponse(500, "").ok


def test_default_session_mounts_bounded_blocking_pool() -> None:
    client = PooledClient(make_settings(max_connections=7))

    adapter = client.session.get_adapter("http://directory.local/api/users")

    assert adapter._pool_maxsize == 7
    assert adapter._pool_block is True
    assert adapter.max_retries.total == 0
    client.close()


def test_request_sends_json_headers_and_timeouts() -> None:
    session = SessionStub([ResponseStub({"ok": True}, status_code=201)])
    client = PooledClient(
        make_settings(connect_timeout_ms=250, socket_timeout_ms=1500), session=session
    )

    resp = client.request("POST", "http://directory.local/api/users", json_body={"username": "a"})

    assert resp == RawResponse(201, json.dumps({"ok": True}))
    call = session.calls[0]
    assert call["method"] == "POST"
    assert json.loads(call["data"]) == {"username": "a"}
    assert call["headers"]["Accept"] == "application/json"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["headers"]["Connection"] == "keep-alive"
    assert call["timeout"] == (0.25, 1.5)


def test_request_without_body_omits_content_type() -> None:
    session = SessionStub([ResponseStub(None, status_code=204)])
    client = PooledClient(make_settings(), session=session)

    resp = client.request("DELETE", "http://directory.local/api/users/a")

    assert resp.status == 204
    assert resp.text == ""
    assert session.calls[0]["data"] is None
    assert "Content-Type" not in session.calls[0]["headers"]


def test_request_closes_response() -> None:
    stub = ResponseStub({"username": "a"})
    client = PooledClient(make_settings(), session=SessionStub([stub]))

    client.request("GET", "http://directory.local/api/users/a")

    assert stub.closed


@pytest.mark.parametrize(
    "raised, expected",
    [
        (req_exc.ConnectTimeout("connect"), ApiConnectTimeoutError),
        (req_exc.ReadTimeout("read"), ApiSocketTimeoutError),
        (req_exc.ConnectionError("refused"), ApiConnectionError),
        (req_exc.ChunkedEncodingError("broken"), ApiConnectionError),
    ],
)
def test_transport_failures_are_typed_and_release_the_lease(raised, expected) -> None:
    client = PooledClient(make_settings(max_connections=2), session=SessionStub([raised]))

    with pytest.raises(expected) as info:
        client.request("GET", "http://directory.local/api/users/a")

    assert info.value.context == "GET http://directory.local/api/users/a"
    stats = client.stats()
    assert stats.leased == 0
    assert stats.available == 2


def test_stats_reflect_active_lease() -> None:
    client = PooledClient(make_settings(max_connections=3), session=SessionStub([]))

    with client.lease():
        stats = client.stats()
        assert stats.leased == 1
        assert stats.available == 2
        assert stats.max_connections == 3
        assert stats.max_per_route == 3

    assert client.stats().leased == 0


def test_lease_released_when_block_raises() -> None:
    client = PooledClient(make_settings(max_connections=1), session=SessionStub([]))

    with pytest.raises(ValueError):
        with client.lease():
            raise ValueError("boom")

    with client.lease():
        assert client.stats().leased == 1


def test_pool_exhaustion_times_out_after_acquire_timeout() -> None:
    client = PooledClient(
        make_settings(max_connections=1, connection_request_timeout_ms=50),
        session=SessionStub([ResponseStub({})]),
    )

    with client.lease():
        started = time.monotonic()
        with pytest.raises(ApiPoolTimeoutError):
            client.request("GET", "http://directory.local/api/users/a")
        assert time.monotonic() - started >= 0.04

    assert client.stats().pending == 0


def test_waiting_caller_counts_as_pending() -> None:
    client = PooledClient(
        make_settings(max_connections=1, connection_request_timeout_ms=5000),
        session=SessionStub([]),
    )
    entered = threading.Event()

    def waiter() -> None:
        with client.lease():
            entered.set()

    with client.lease():
        thread = threading.Thread(target=waiter)
        thread.start()
        deadline = time.monotonic() + 2.0
        while client.stats().pending != 1 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert client.stats().pending == 1
        assert not entered.is_set()

    thread.join(timeout=2.0)
    assert entered.is_set()
    assert client.stats().pending == 0
    assert client.stats().leased == 0


def test_probe_accepts_any_http_status(monkeypatch) -> None:
    calls = []

    def fake_head(url, **kwargs):
        calls.append((url, kwargs))
        return ResponseStub(None, status_code=404)

    monkeypatch.setattr(http_client.requests, "head", fake_head)

    probe_base_url("http://directory.local/", timeout_s=2.0)

    assert calls[0][0] == "http://directory.local/"
    assert calls[0][1]["timeout"] == 2.0


def test_probe_raises_when_unreachable(monkeypatch) -> None:
    def fake_head(url, **kwargs):
        raise req_exc.ConnectionError("refused")

    monkeypatch.setattr(http_client.requests, "head", fake_head)

    with pytest.raises(ApiConnectionError):
        probe_base_url("http://nowhere.invalid/")
