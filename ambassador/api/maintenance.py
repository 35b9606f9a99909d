from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from ambassador.api.dependencies import (
    CallerDep,
    ProgramDep,
    PublisherDep,
    publish_committed,
)
from ambassador.api.schemas import SweepIn, SweepOut

router = APIRouter(prefix="/v1", tags=["maintenance"])


class StatsOut(BaseModel):
    total_submitted: int
    total_approved: int
    next_application_id: int
    next_token_id: int
    live_badges_by_type: dict[str, int]


@router.post("/maintenance/sweep", response_model=SweepOut)
async def sweep(
    body: SweepIn,
    _principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> SweepOut:
    """Deactivate expired ambassadors.  Any authenticated caller may run it."""
    deactivated = program.maintenance.sweep(body.identities)
    await publish_committed(program, publisher)
    return SweepOut(deactivated=deactivated)


@router.get("/stats", response_model=StatsOut)
def stats(program: ProgramDep) -> StatsOut:
    s = program.registry.stats()
    return StatsOut(
        total_submitted=s.total_submitted,
        total_approved=s.total_approved,
        next_application_id=s.next_application_id,
        next_token_id=s.next_token_id,
        live_badges_by_type=s.live_badges_by_type,
    )
