from __future__ import annotations

from dataclasses import asdict, dataclass

from ambassador.models.credential_type import CredentialType


@dataclass(frozen=True, slots=True)
class Notification:
    """A state-change event for subscribers such as a UI.

    Notifications reflect state; they are not part of it.  The tables are
    the source of truth.
    """

    name: str  # e.g. "ambassador.activated", "badge.burned"
    subject: str  # identity, or application id for application events
    status: str
    timestamp: int
    token_id: int | None = None
    credential_type: CredentialType | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.credential_type is not None:
            data["credential_type"] = self.credential_type.value
        return data
