"""Pydantic request/response bodies shared by the routers."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from ambassador.models.ambassador import AmbassadorInfo
from ambassador.models.application import Application
from ambassador.models.badge import BadgeInfo
from ambassador.models.credential_type import CredentialType


class ApplicationOut(BaseModel):
    id: int
    applicant: str
    category: str
    status: str
    submitted_at: int
    reviewed_at: int
    reviewed_by: str | None
    expires_at: int
    data_ref: str
    credential_type: CredentialType

    @staticmethod
    def of(application: Application) -> ApplicationOut:
        return ApplicationOut(
            id=application.id,
            applicant=application.applicant,
            category=application.category,
            status=application.status.value,
            submitted_at=application.submitted_at,
            reviewed_at=application.reviewed_at,
            reviewed_by=application.reviewed_by,
            expires_at=application.expires_at,
            data_ref=application.data_ref,
            credential_type=application.credential_type,
        )


class AmbassadorOut(BaseModel):
    identity: str
    approved_at: int
    expires_at: int
    is_active: bool
    category: str
    credential_type: CredentialType
    credential_token_id: int

    @staticmethod
    def of(info: AmbassadorInfo) -> AmbassadorOut:
        return AmbassadorOut(
            identity=info.identity,
            approved_at=info.approved_at,
            expires_at=info.expires_at,
            is_active=info.is_active,
            category=info.category,
            credential_type=info.credential_type,
            credential_token_id=info.credential_token_id,
        )


class BadgeOut(BaseModel):
    token_id: int
    holder: str
    credential_type: CredentialType
    tier: str
    minted_at: int
    expires_at: int
    exists: bool

    @staticmethod
    def of(badge: BadgeInfo) -> BadgeOut:
        return BadgeOut(
            token_id=badge.token_id,
            holder=badge.holder,
            credential_type=badge.credential_type,
            tier=badge.tier.value,
            minted_at=badge.minted_at,
            expires_at=badge.expires_at,
            exists=badge.exists,
        )


class SweepIn(BaseModel):
    # Length is checked by the service so oversize batches surface as
    # InvalidBatchSize rather than a schema error.
    identities: list[str] = Field(default_factory=list)


class SweepOut(BaseModel):
    deactivated: list[str]


class AmountOut(BaseModel):
    amount: Decimal
