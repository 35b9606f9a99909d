from __future__ import annotations

from typing import Protocol

from ambassador.services.unit_of_work import journaled_delete, journaled_set


class RoleRepo(Protocol):
    def is_admin(self, identity: str) -> bool: ...
    def set_admin(self, identity: str, is_admin: bool) -> None: ...
    def get_owner(self) -> str: ...
    def set_owner(self, identity: str) -> None: ...
    def admins(self) -> list[str]: ...


class InMemoryRoleRepo:
    def __init__(self, owner: str) -> None:
        self._owner: dict[str, str] = {"owner": owner}
        self._admins: dict[str, bool] = {}

    def is_admin(self, identity: str) -> bool:
        return self._admins.get(identity, False)

    def set_admin(self, identity: str, is_admin: bool) -> None:
        if is_admin:
            journaled_set(self._admins, identity, True)
        else:
            journaled_delete(self._admins, identity)

    def get_owner(self) -> str:
        return self._owner["owner"]

    def set_owner(self, identity: str) -> None:
        journaled_set(self._owner, "owner", identity)

    def admins(self) -> list[str]:
        return sorted(self._admins)
