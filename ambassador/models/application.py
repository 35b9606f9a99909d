from __future__ import annotations

import enum
from dataclasses import dataclass

from ambassador.models.credential_type import CredentialType


class ApplicationStatus(str, enum.Enum):
    APPROVED = "approved"
    # Terminal state kept for records that went through manual review.
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class Application:
    """One submission attempt.  Immutable once recorded."""

    id: int
    applicant: str
    category: str
    status: ApplicationStatus
    submitted_at: int
    reviewed_at: int
    expires_at: int
    data_ref: str
    credential_type: CredentialType
    reviewed_by: str | None = None  # None means auto-approved

    @property
    def auto_approved(self) -> bool:
        return self.reviewed_by is None
