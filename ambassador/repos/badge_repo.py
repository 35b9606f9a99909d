from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from ambassador.models.badge import BadgeInfo
from ambassador.services.unit_of_work import journaled_delete, journaled_set


class BadgeRepo(Protocol):
    def get(self, token_id: int) -> BadgeInfo | None: ...
    def token_of(self, holder: str) -> int: ...
    def add(self, badge: BadgeInfo) -> None: ...
    def update_expiration(self, token_id: int, expires_at: int) -> BadgeInfo: ...
    def destroy(self, token_id: int) -> BadgeInfo: ...
    def live_holders(self) -> dict[str, int]: ...


class InMemoryBadgeRepo:
    """Token rows plus the holder -> token map.

    A burned token keeps its row with ``exists=False`` so its id stays
    allocated; only the holder mapping is removed.
    """

    def __init__(self) -> None:
        self._by_id: dict[int, BadgeInfo] = {}
        self._by_holder: dict[str, int] = {}

    def get(self, token_id: int) -> BadgeInfo | None:
        return self._by_id.get(token_id)

    def token_of(self, holder: str) -> int:
        return self._by_holder.get(holder, 0)

    def add(self, badge: BadgeInfo) -> None:
        if badge.token_id in self._by_id:
            raise ValueError("token id already allocated")
        if badge.holder in self._by_holder:
            raise ValueError("holder already mapped to a token")
        journaled_set(self._by_id, badge.token_id, badge)
        journaled_set(self._by_holder, badge.holder, badge.token_id)

    def update_expiration(self, token_id: int, expires_at: int) -> BadgeInfo:
        badge = self._by_id.get(token_id)
        if badge is None or not badge.exists:
            raise KeyError("token not found")
        updated = replace(badge, expires_at=expires_at)
        journaled_set(self._by_id, token_id, updated)
        return updated

    def destroy(self, token_id: int) -> BadgeInfo:
        badge = self._by_id.get(token_id)
        if badge is None or not badge.exists:
            raise KeyError("token not found")
        journaled_set(self._by_id, token_id, replace(badge, exists=False))
        if self._by_holder.get(badge.holder) == token_id:
            journaled_delete(self._by_holder, badge.holder)
        return badge

    def live_holders(self) -> dict[str, int]:
        return dict(self._by_holder)
