"""Per-unit-of-work memo of directory lookups.

A :class:`LoadedUsers` instance lives exactly as long as one host
request/transaction. It maps the lookup key the caller supplied (username,
email or external id, not canonicalized) to the ``RecordAdapter`` built from
the first successful fetch. Misses are not stored, so a later lookup of the
same key goes back to the directory.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from restuser.domain.ports import DirectoryPort
from restuser.domain.user_record import RecordAdapter


class LoadedUsers:
    """Lazy, lock-guarded cache of ``RecordAdapter`` objects by lookup key."""

    def __init__(self, gateway: DirectoryPort) -> None:
        self._log = logging.getLogger(__name__)
        self._gateway = gateway
        self._entries: Dict[str, RecordAdapter] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> Optional[RecordAdapter]:
        """Return the adapter for ``key``, fetching it on the first miss.

        Returns:
            The memoized or freshly fetched adapter, or ``None`` when the
            directory reports the key as absent.

        Raises:
            BackendAuthenticationError: On transport failure during the fetch.
        """
        with self._lock:
            self._log.debug("Cache size is: %s", len(self._entries))
            cached = self._entries.get(key)
        if cached is not None:
            self._log.debug("Returning user %s from cache", key)
            return cached

        record = self._gateway.find_user_by_username(key)
        if record is None:
            self._log.debug("User %s not found in repo", key)
            return None
        adapter = RecordAdapter(record, self._gateway)
        with self._lock:
            # A concurrent lookup may have stored one first; keep that one.
            return self._entries.setdefault(key, adapter)

    def put(self, key: str, adapter: RecordAdapter) -> None:
        with self._lock:
            self._entries[key] = adapter

    def remove(self, key: str) -> Optional[RecordAdapter]:
        with self._lock:
            return self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = ["LoadedUsers"]
