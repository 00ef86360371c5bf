from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from restuser.domain.errors import BackendError
from restuser.domain.ports import DirectoryPort, DirectoryRecord, PoolStats


@dataclass
class DirectoryMock(DirectoryPort):
    """Offline substitute for ``DirectoryRestAdapter`` backed by a dict.

    Records every call in ``calls`` so tests can count remote round trips.
    Passwords live under the ``password`` key and are never returned.
    """

    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    max_connections: int = 5

    def __post_init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    # ---------- DirectoryPort ----------

    def authenticate(self, username: str, password: str) -> bool:
        self.calls.append({"method": "authenticate", "username": username})
        user = self.users.get(username)
        return bool(user) and user.get("password") == password

    def find_user_by_username(self, username: str) -> Optional[DirectoryRecord]:
        self.calls.append({"method": "find_user_by_username", "username": username})
        user = self.users.get(username)
        if user is None:
            for candidate in self.users.values():
                if username in (candidate.get("email"), candidate.get("id")):
                    user = candidate
                    break
        return self._public(user) if user is not None else None

    def find_users(self, username: Optional[str] = None) -> List[DirectoryRecord]:
        self.calls.append({"method": "find_users", "username": username})
        return [
            self._public(user)
            for name, user in self.users.items()
            if username is None or username in name
        ]

    def set_user_attribute(self, username: str, attribute: str, value: str) -> None:
        self.calls.append(
            {"method": "set_user_attribute", "username": username, "attribute": attribute}
        )
        user = self.users.get(username)
        if user is None:
            raise BackendError(404)
        user[attribute] = value

    def create_user(self, username: str) -> DirectoryRecord:
        self.calls.append({"method": "create_user", "username": username})
        if username in self.users:
            raise BackendError(409)
        self.users[username] = {"username": username}
        return self._public(self.users[username])

    def delete_user(self, username: str) -> None:
        self.calls.append({"method": "delete_user", "username": username})
        if self.users.pop(username, None) is None:
            raise BackendError(404)

    def get_stats(self) -> PoolStats:
        return PoolStats(
            max_connections=self.max_connections,
            max_per_route=self.max_connections,
            available=self.max_connections,
            leased=0,
            pending=0,
        )

    # ------------------------------------------------------------------
    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call["method"] == method)

    @staticmethod
    def _public(user: Dict[str, Any]) -> DirectoryRecord:
        return {key: value for key, value in user.items() if key != "password"}
