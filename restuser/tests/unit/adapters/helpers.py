from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Union

from restuser.adapters.directory_rest import DirectoryRestAdapter
from restuser.adapters.http_client import PooledClient
from restuser.domain.settings import Settings


class ResponseStub:
    def __init__(self, payload: Any = None, status_code: int = 200) -> None:
        self.status_code = status_code
        if payload is None:
            self.text = ""
        elif isinstance(payload, str):
            self.text = payload
        else:
            self.text = json.dumps(payload)
        self.encoding = "utf-8"
        self.closed = False

    def close(self) -> None:
        self.closed = True


class SessionStub:
    """Replays canned responses (or raises canned exceptions) in order."""

    def __init__(self, responses: Sequence[Union[ResponseStub, Exception]]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def request(
        self,
        method: str,
        url: str,
        *,
        data: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Any = None,
    ) -> ResponseStub:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "data": data,
                "headers": dict(headers or {}),
                "timeout": timeout,
            }
        )
        if not self._responses:
            raise RuntimeError("No stub response configured")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {"base_url": "http://directory.local/api"}
    values.update(overrides)
    return Settings(**values)


def make_gateway(
    responses: Sequence[Union[ResponseStub, Exception]], **overrides: Any
) -> "tuple[DirectoryRestAdapter, SessionStub]":
    settings = make_settings(**overrides)
    session = SessionStub(responses)
    client = PooledClient(settings, session=session)  # type: ignore[arg-type]
    return DirectoryRestAdapter(settings, client=client), session


__all__ = ["ResponseStub", "SessionStub", "make_gateway", "make_settings"]
