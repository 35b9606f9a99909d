"""Badge issuer endpoints.

Most writes reach the issuer through the registry.  The routes here are the
issuer's own surface: owner-only direct mints, burns authorized by the
issuer's rules (owner, or the holder once the badge has expired), and the
token-based expiry sweep.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ambassador.api.dependencies import (
    CallerDep,
    ProgramDep,
    PublisherDep,
    publish_committed,
)
from ambassador.api.schemas import BadgeOut
from ambassador.models.credential_type import CredentialType
from ambassador.services.access_control import Role

router = APIRouter(prefix="/v1/badges", tags=["badges"])


class MintIn(BaseModel):
    holder: str = Field(min_length=1)
    credential_type: CredentialType
    expires_at: int
    payment: Decimal = Decimal("0")


class MintOut(BaseModel):
    token_id: int
    refund: Decimal


class HolderOut(BaseModel):
    holder: str
    token_id: int


class ExpiredOut(BaseModel):
    token_id: int
    expired: bool


class TokenSweepIn(BaseModel):
    token_ids: list[int] = Field(default_factory=list)


class TokenSweepOut(BaseModel):
    burned: list[int]


@router.post("/mint", response_model=MintOut, status_code=status.HTTP_201_CREATED)
async def mint(
    body: MintIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> MintOut:
    program.access.require(principal.identity, Role.OWNER)
    result = program.issuer.mint(
        principal.identity,
        body.holder,
        body.credential_type,
        body.expires_at,
        body.payment,
    )
    await publish_committed(program, publisher)
    return MintOut(token_id=result.token_id, refund=result.refund)


@router.post("/sweep", response_model=TokenSweepOut)
async def sweep_expired(
    body: TokenSweepIn,
    _principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> TokenSweepOut:
    burned = program.issuer.sweep_expired(body.token_ids)
    await publish_committed(program, publisher)
    return TokenSweepOut(burned=burned)


@router.get("/holders/{identity}", response_model=HolderOut)
def holder_token(identity: str, program: ProgramDep) -> HolderOut:
    return HolderOut(holder=identity, token_id=program.issuer.holder_token(identity))


@router.get("/{token_id}", response_model=BadgeOut)
def get_badge(token_id: int, program: ProgramDep) -> BadgeOut:
    return BadgeOut.of(program.issuer.get_badge(token_id))


@router.get("/{token_id}/expired", response_model=ExpiredOut)
def is_expired(token_id: int, program: ProgramDep) -> ExpiredOut:
    return ExpiredOut(token_id=token_id, expired=program.issuer.is_expired(token_id))


@router.post("/{token_id}/burn", response_model=BadgeOut)
async def burn(
    token_id: int,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> BadgeOut:
    burned = program.issuer.burn(principal.identity, token_id)
    await publish_committed(program, publisher)
    return BadgeOut.of(program.issuer.get_badge(burned.token_id))
