from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

Username = str
DirectoryRecord = Dict[str, Any]

PASSWORD = "password"


@dataclass(frozen=True)
class PoolStats:
    """Point-in-time view of the HTTP connection pool."""

    max_connections: int
    max_per_route: int
    available: int
    leased: int
    pending: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "maxConnections": self.max_connections,
            "defaultMaxPerRoute": self.max_per_route,
            "availableConnections": self.available,
            "leasedConnections": self.leased,
            "pendingConnections": self.pending,
        }


@dataclass(frozen=True)
class CredentialInput:
    """Credential presented by the host for validation."""

    type: str
    value: Optional[str]


# ---- Ports (Hexagonal boundaries) ----
class DirectoryPort(Protocol):
    """Authenticate/find/patch/create/delete operations against the user directory."""

    def authenticate(self, username: Username, password: str) -> bool: ...
    def find_user_by_username(
        self, username: Username
    ) -> Optional[DirectoryRecord]: ...  # None when absent
    def find_users(self, username: Optional[str] = None) -> List[DirectoryRecord]: ...
    def set_user_attribute(self, username: Username, attribute: str, value: str) -> None: ...
    def create_user(self, username: Username) -> DirectoryRecord: ...
    def delete_user(self, username: Username) -> None: ...
    def get_stats(self) -> PoolStats: ...
