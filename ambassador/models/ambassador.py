from __future__ import annotations

from dataclasses import dataclass

from ambassador.models.credential_type import CredentialType


@dataclass(frozen=True, slots=True)
class AmbassadorInfo:
    """Registry-side view of one identity's ambassador status.

    ``credential_token_id == 0`` means the identity holds no live badge.
    Records are deactivated, never deleted.
    """

    identity: str
    approved_at: int
    expires_at: int
    is_active: bool
    category: str
    credential_type: CredentialType
    credential_token_id: int = 0

    def is_active_at(self, now: int) -> bool:
        return self.is_active and self.expires_at > now

    def has_live_token(self) -> bool:
        return self.credential_token_id > 0
