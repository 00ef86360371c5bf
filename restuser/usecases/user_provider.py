"""Host-facing user storage operations for one unit of work.

``RestUserProvider`` is what the identity host talks to while serving one
request: lookups go through the operation-scoped cache, credential checks and
mutations go straight to the directory gateway.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from restuser.domain.ports import PASSWORD, CredentialInput, DirectoryPort
from restuser.domain.user_record import RecordAdapter, external_id

from .user_cache import LoadedUsers

SEARCH_PARAM = "keycloak.session.realm.users.query.search"


class RestUserProvider:
    """User lookup, credential validation and search backed by the directory.

    One instance per unit of work; ``close()`` discards the cache. Not meant
    to be shared across concurrent units of work.
    """

    def __init__(self, gateway: DirectoryPort) -> None:
        self._log = logging.getLogger(__name__)
        self._log.info("Initializing new RestUserProvider")
        self.gateway = gateway
        self.loaded_users = LoadedUsers(gateway)

    def __enter__(self) -> "RestUserProvider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.loaded_users.clear()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get_user_by_username(self, username: str) -> Optional[RecordAdapter]:
        self._log.info("Getting user: %s by username", username)
        return self.loaded_users.get(username)

    def get_user_by_email(self, email: str) -> Optional[RecordAdapter]:
        self._log.info("Getting user: %s by email", email)
        return self.loaded_users.get(email)

    def get_user_by_id(self, storage_id: str) -> Optional[RecordAdapter]:
        self._log.info("Getting user by id: %s", storage_id)
        return self.loaded_users.get(external_id(storage_id))

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------
    def supports_credential_type(self, credential_type: str) -> bool:
        return credential_type == PASSWORD

    def is_configured_for(self, user: RecordAdapter, credential_type: str) -> bool:
        return self.supports_credential_type(credential_type)

    def is_valid(self, user: RecordAdapter, credential: CredentialInput) -> bool:
        """Check a password against the directory; never served from cache."""
        self._log.info("Validating user %s", user.username)
        if not self.supports_credential_type(credential.type) or credential.value is None:
            return False
        return self.gateway.authenticate(user.username, credential.value)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def search_for_users(
        self,
        search: Optional[str],
        first_result: Optional[int] = 0,
        max_results: Optional[int] = None,
    ) -> List[RecordAdapter]:
        """Return one page of directory search results.

        The page is ``[first_result, first_result + max_results)`` clamped to
        the number of records returned. ``max_results`` of ``None`` or below
        zero means all remaining records.
        """
        self._log.info(
            "Searching users with query: %s from %s with maxResults %s",
            search,
            first_result,
            max_results,
        )
        records = self.gateway.find_users(search)
        self._log.info("Found %s users", len(records))
        start = max(first_result or 0, 0)
        stop = len(records)
        if max_results is not None and max_results >= 0:
            stop = min(stop, start + max_results)
        return [RecordAdapter(record, self.gateway) for record in records[start:stop]]

    def search(
        self,
        params: Mapping[str, str],
        first_result: Optional[int] = 0,
        max_results: Optional[int] = None,
    ) -> List[RecordAdapter]:
        """Search using the host's parameter map (free-text query key)."""
        self._log.info("Searching users %s", dict(params))
        return self.search_for_users(params.get(SEARCH_PARAM), first_result, max_results)

    def search_by_attribute(self, name: str, value: str) -> List[RecordAdapter]:
        return []

    def get_group_members(self, group: str) -> List[RecordAdapter]:
        return []

    def get_users_count(self) -> int:
        return 0

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def add_user(self, username: str) -> RecordAdapter:
        record = self.gateway.create_user(username)
        adapter = RecordAdapter(record, self.gateway)
        self.loaded_users.put(username, adapter)
        return adapter

    def remove_user(self, username: str) -> bool:
        self.gateway.delete_user(username)
        self.loaded_users.remove(username)
        return True


__all__ = ["RestUserProvider", "SEARCH_PARAM"]
