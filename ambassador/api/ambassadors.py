from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from ambassador.api.dependencies import (
    CallerDep,
    ProgramDep,
    PublisherDep,
    publish_committed,
)
from ambassador.api.schemas import AmbassadorOut

router = APIRouter(prefix="/v1/ambassadors", tags=["ambassadors"])


class ActiveOut(BaseModel):
    identity: str
    active: bool


@router.get("/{identity}", response_model=AmbassadorOut)
def get_ambassador(identity: str, _principal: CallerDep, program: ProgramDep) -> AmbassadorOut:
    info = program.registry.get_ambassador_info(identity)
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="ambassador not found")
    return AmbassadorOut.of(info)


@router.get("/{identity}/active", response_model=ActiveOut)
def is_active(identity: str, program: ProgramDep) -> ActiveOut:
    """Public check, e.g. for partner sites verifying a holder."""
    return ActiveOut(identity=identity, active=program.registry.is_active_ambassador(identity))


@router.post("/me/burn", response_model=AmbassadorOut)
async def burn_own_expired(
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> AmbassadorOut:
    info = program.registry.burn_own_expired(principal.identity)
    await publish_committed(program, publisher)
    return AmbassadorOut.of(info)
