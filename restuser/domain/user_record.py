"""Record adapter binding one fetched directory user to its gateway.

A :class:`RecordAdapter` is a snapshot of a remote record plus a non-owning
reference to the ``DirectoryPort`` that served it. Mutations are forwarded as
patch calls; the local snapshot changes only after the remote patch succeeds.
Adapters belong to one unit of work and must not be used after it ends.
"""

from __future__ import annotations

import secrets
import string
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .ports import PASSWORD, DirectoryPort, DirectoryRecord

LOCKOUT_PASSWORD_LENGTH = 64
_LOCKOUT_ALPHABET = string.ascii_letters + string.digits + string.punctuation

STORAGE_ID_PREFIX = "f"


def generate_lockout_password(length: int = LOCKOUT_PASSWORD_LENGTH) -> str:
    """Return a random password nobody knows, used to lock an account."""
    if length < 32:
        raise ValueError("lockout password must be at least 32 characters")
    return "".join(secrets.choice(_LOCKOUT_ALPHABET) for _ in range(length))


def external_id(storage_id: str) -> str:
    """Extract the directory-side id from a host storage id.

    Host ids look like ``f:<provider-id>:<external-id>``; anything else is
    already an external id and is returned unchanged.
    """
    if storage_id.startswith(STORAGE_ID_PREFIX + ":"):
        parts = storage_id.split(":", 2)
        if len(parts) == 3:
            return parts[2]
    return storage_id


class RecordAdapter:
    """Read-only view of a directory record with gateway-forwarding mutations."""

    def __init__(self, record: DirectoryRecord, gateway: DirectoryPort) -> None:
        username = record.get("username")
        if not isinstance(username, str) or not username:
            raise ValueError("directory record has no username")
        self._record: DirectoryRecord = dict(record)
        self._gateway = gateway

    def __repr__(self) -> str:
        return f"RecordAdapter(username={self.username!r})"

    # ------------------------------------------------------------------
    # Read-only fields
    # ------------------------------------------------------------------
    @property
    def username(self) -> str:
        return self._record["username"]

    @property
    def email(self) -> Optional[str]:
        return self._record.get("email")

    @property
    def first_name(self) -> Optional[str]:
        return self._record.get("firstName")

    @property
    def last_name(self) -> Optional[str]:
        return self._record.get("lastName")

    @property
    def enabled(self) -> bool:
        return bool(self._record.get("enabled", True))

    @property
    def record(self) -> DirectoryRecord:
        return dict(self._record)

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType(self._record)

    def get(self, name: str, default: Any = None) -> Any:
        return self._record.get(name, default)

    def storage_id(self, provider_id: str) -> str:
        return f"{STORAGE_ID_PREFIX}:{provider_id}:{self.username}"

    # ------------------------------------------------------------------
    # Forwarded mutations
    # ------------------------------------------------------------------
    def set_attribute(self, name: str, value: str) -> None:
        self._gateway.set_user_attribute(self.username, name, value)
        if name != PASSWORD:
            self._record[name] = value

    def set_password(self, value: str) -> None:
        self._gateway.set_user_attribute(self.username, PASSWORD, value)

    def disable(self) -> None:
        """Lock out password login without deleting the account."""
        self.set_password(generate_lockout_password())


__all__ = ["RecordAdapter", "external_id", "generate_lockout_password"]
