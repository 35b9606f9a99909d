from __future__ import annotations

from typing import Protocol

from ambassador.models.ambassador import AmbassadorInfo
from ambassador.services.unit_of_work import journaled_set


class AmbassadorRepo(Protocol):
    def get(self, identity: str) -> AmbassadorInfo | None: ...
    def put(self, info: AmbassadorInfo) -> None: ...
    def list_active(self) -> list[AmbassadorInfo]: ...


class InMemoryAmbassadorRepo:
    """One record per identity.  ``put`` creates or overwrites; nothing is
    ever deleted."""

    def __init__(self) -> None:
        self._by_identity: dict[str, AmbassadorInfo] = {}

    def get(self, identity: str) -> AmbassadorInfo | None:
        return self._by_identity.get(identity)

    def put(self, info: AmbassadorInfo) -> None:
        journaled_set(self._by_identity, info.identity, info)

    def list_active(self) -> list[AmbassadorInfo]:
        return [a for a in self._by_identity.values() if a.is_active]
