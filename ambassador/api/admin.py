"""Privileged endpoints.

Admin-gated: revoke, extend, reschedule.
Owner-gated: duration, fees, admin flags, ownership, treasury withdrawal.

The routes only authenticate.  Authorization happens in the registry,
which resolves the caller's role from the role table.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict, Field

from ambassador.api.dependencies import (
    CallerDep,
    ProgramDep,
    PublisherDep,
    publish_committed,
)
from ambassador.api.schemas import AmbassadorOut, AmountOut
from ambassador.core.config import SECONDS_PER_DAY

router = APIRouter(prefix="/v1/admin", tags=["admin"])


class ExtendIn(BaseModel):
    days: int = 0
    seconds: int = 0


class RescheduleIn(BaseModel):
    expires_at: int


class DurationIn(BaseModel):
    days: int


class FeeIn(BaseModel):
    fee: Decimal


class AdminFlagIn(BaseModel):
    is_admin: bool


class OwnershipIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    new_owner: str = Field(min_length=1)


@router.post("/ambassadors/{identity}/revoke", response_model=AmbassadorOut)
async def revoke(
    identity: str,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> AmbassadorOut:
    info = program.registry.revoke(principal.identity, identity)
    await publish_committed(program, publisher)
    return AmbassadorOut.of(info)


@router.post("/ambassadors/{identity}/extend", response_model=AmbassadorOut)
async def extend(
    identity: str,
    body: ExtendIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> AmbassadorOut:
    additional = body.days * SECONDS_PER_DAY + body.seconds
    info = program.registry.extend(principal.identity, identity, additional)
    await publish_committed(program, publisher)
    return AmbassadorOut.of(info)


@router.post("/ambassadors/{identity}/reschedule", response_model=AmbassadorOut)
async def reschedule(
    identity: str,
    body: RescheduleIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> AmbassadorOut:
    info = program.registry.reschedule(principal.identity, identity, body.expires_at)
    await publish_committed(program, publisher)
    return AmbassadorOut.of(info)


@router.put("/config/duration", status_code=status.HTTP_204_NO_CONTENT)
async def set_duration(
    body: DurationIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> None:
    program.registry.set_duration(principal.identity, body.days * SECONDS_PER_DAY)
    await publish_committed(program, publisher)


@router.put("/config/submission-fee", status_code=status.HTTP_204_NO_CONTENT)
async def set_submission_fee(
    body: FeeIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> None:
    program.registry.set_submission_fee(principal.identity, body.fee)
    await publish_committed(program, publisher)


@router.put("/config/elite-fee", status_code=status.HTTP_204_NO_CONTENT)
async def set_elite_fee(
    body: FeeIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> None:
    program.registry.set_elite_fee(principal.identity, body.fee)
    await publish_committed(program, publisher)


@router.put("/admins/{identity}", status_code=status.HTTP_204_NO_CONTENT)
async def set_admin(
    identity: str,
    body: AdminFlagIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> None:
    program.registry.set_admin(principal.identity, identity, body.is_admin)
    await publish_committed(program, publisher)


@router.post("/ownership", status_code=status.HTTP_204_NO_CONTENT)
async def transfer_ownership(
    body: OwnershipIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> None:
    program.registry.transfer_ownership(principal.identity, body.new_owner)
    await publish_committed(program, publisher)


@router.post("/withdraw", response_model=AmountOut)
async def withdraw(
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> AmountOut:
    amount = program.registry.withdraw(principal.identity)
    await publish_committed(program, publisher)
    return AmountOut(amount=amount)


@router.post("/withdraw/issuer", response_model=AmountOut)
async def withdraw_issuer(
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> AmountOut:
    amount = program.issuer.withdraw(principal.identity)
    await publish_committed(program, publisher)
    return AmountOut(amount=amount)
