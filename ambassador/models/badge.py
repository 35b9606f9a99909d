from __future__ import annotations

from dataclasses import dataclass

from ambassador.models.credential_type import CredentialType, Tier, tier_of


@dataclass(frozen=True, slots=True)
class BadgeInfo:
    """Issuer-side record of one minted token."""

    token_id: int
    holder: str
    credential_type: CredentialType
    minted_at: int
    expires_at: int
    exists: bool = True

    @property
    def tier(self) -> Tier:
        return tier_of(self.credential_type)

    def is_expired_at(self, now: int) -> bool:
        return now >= self.expires_at
