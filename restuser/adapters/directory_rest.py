# restuser/adapters/directory_rest.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from restuser.domain.errors import BackendAuthenticationError, BackendError
from restuser.domain.ports import DirectoryPort, DirectoryRecord, PoolStats
from restuser.domain.settings import Settings

from .api_errors import ApiTransportError, build_error_message, parse_error_payload
from .http_client import PooledClient, RawResponse


class DirectoryRestAdapter(DirectoryPort):
    """REST gateway for the remote user directory.

    Endpoints:
      - POST   {base}/authenticate          body: {"username": "...", "password": "..."}
      - GET    {base}/users/{username}      -> user object, any non-2xx = absent
      - GET    {base}/users?username={q}    -> [user, ...]
      - PATCH  {base}/users/{username}      body: {"<attribute>": "<value>"}
      - POST   {base}/users                 body: {"username": "..."} -> user object
      - DELETE {base}/users/{username}

    Notes:
      - Authenticate and lookup treat non-2xx as a negative result, not a fault.
      - Every other non-2xx raises ``BackendError``; every transport fault
        raises ``BackendAuthenticationError``. Details go to the log only.
      - A lookup body without a string ``username`` is absent; a search
        array holding one raises ``BackendError``.
      - No retries.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[PooledClient] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.settings = settings
        self.client = client or PooledClient(settings)

    # ---------- DirectoryPort ----------

    def authenticate(self, username: str, password: str) -> bool:
        self._log.info("Authenticating user: %s", username)
        resp = self._call(
            "POST",
            self._make_url("/authenticate"),
            json_body={"username": username, "password": password},
        )
        return resp.ok

    def find_user_by_username(self, username: str) -> Optional[DirectoryRecord]:
        self._log.info("Finding user by username: %s", username)
        resp = self._call("GET", self._user_url(username))
        if not resp.ok:
            if resp.status != 404:
                # Any non-2xx lookup is reported as absent, including server errors.
                self._log.warning(
                    "Lookup of %s returned HTTP %s; treating as not found",
                    username,
                    resp.status,
                )
            return None
        try:
            data = resp.json()
        except ValueError:
            self._log.warning("Lookup of %s returned a non-JSON body", username)
            return None
        if not isinstance(data, dict):
            self._log.warning("Lookup of %s did not return an object", username)
            return None
        if not _has_username(data):
            self._log.warning("Lookup of %s returned a record without username", username)
            return None
        return data

    def find_users(self, username: Optional[str] = None) -> List[DirectoryRecord]:
        self._log.info("Finding users with username: %s", username)
        url = self._make_url("/users")
        if username is not None:
            url += "?username=" + quote(username, safe="")
        self._log.info("Using url %s to search users", url)
        resp = self._call("GET", url)
        self._stop_on_error(resp, "find_users")
        data = self._json_any(resp, "find_users")
        if not isinstance(data, list):
            self._log.error("find_users: expected list response, got %s", type(data).__name__)
            raise BackendError(resp.status)
        for index, entry in enumerate(data):
            if not isinstance(entry, dict) or not _has_username(entry):
                self._log.error("find_users: entry %d is not a user record", index)
                raise BackendError(resp.status)
        return data

    def set_user_attribute(self, username: str, attribute: str, value: str) -> None:
        if attribute == "password":
            self._log.info("Setting user %s attribute %s", username, attribute)
        else:
            self._log.info("Setting user %s attribute %s: %s", username, attribute, value)
        resp = self._call("PATCH", self._user_url(username), json_body={attribute: value})
        self._stop_on_error(resp, f"set_user_attribute[{username}]")

    def create_user(self, username: str) -> DirectoryRecord:
        self._log.info("Creating user: %s", username)
        resp = self._call("POST", self._make_url("/users"), json_body={"username": username})
        self._stop_on_error(resp, f"create_user[{username}]")
        if not resp.text.strip():
            return {"username": username}
        data = self._json_any(resp, f"create_user[{username}]")
        if not isinstance(data, dict):
            self._log.error("create_user[%s]: expected object response", username)
            raise BackendError(resp.status)
        record: Dict[str, Any] = dict(data)
        if not _has_username(record):
            record["username"] = username
        return record

    def delete_user(self, username: str) -> None:
        self._log.info("Deleting user: %s", username)
        resp = self._call("DELETE", self._user_url(username))
        self._stop_on_error(resp, f"delete_user[{username}]")

    def get_stats(self) -> PoolStats:
        return self.client.stats()

    def close(self) -> None:
        self.client.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _make_url(self, path: str) -> str:
        return f"{self.settings.base_url}{path}"

    def _user_url(self, username: str) -> str:
        return self._make_url("/users/" + quote(username, safe=""))

    def _call(
        self,
        method: str,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> RawResponse:
        try:
            return self.client.request(method, url, json_body=json_body)
        except ApiTransportError as exc:
            self._log.error(
                "%s (%s): %s", type(exc).__name__, exc.context or f"{method} {url}", exc,
                exc_info=True,
            )
            raise BackendAuthenticationError() from None

    def _stop_on_error(self, resp: RawResponse, ctx: str) -> None:
        if resp.ok:
            return
        payload = parse_error_payload(resp.text)
        self._log.error(
            "Response status code was not success. %s\nResponse received:\n%s\n"
            "Http Request was not success. Check logs to get more information",
            build_error_message(ctx, resp.status, payload),
            resp.text,
        )
        raise BackendError(resp.status)

    def _json_any(self, resp: RawResponse, ctx: str) -> Any:
        try:
            return resp.json()
        except ValueError:
            self._log.error("%s: invalid JSON response: %s", ctx, resp.text[:400])
            raise BackendError(resp.status) from None


def _has_username(record: Dict[str, Any]) -> bool:
    username = record.get("username")
    return isinstance(username, str) and bool(username)


__all__ = ["DirectoryRestAdapter"]
