"""Application submission and lookup endpoints.

- POST /v1/applications           submit, auto-approve and mint a badge
- POST /v1/applications/manual    legacy path: record only, never mints
- GET  /v1/applications/{id}
- GET  /v1/applicants/{identity}/applications   paginated history
"""

from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from ambassador.api.dependencies import (
    CallerDep,
    ProgramDep,
    PublisherDep,
    publish_committed,
)
from ambassador.api.schemas import AmbassadorOut, ApplicationOut
from ambassador.core.config import MAX_PAGE_SIZE
from ambassador.models.credential_type import CredentialType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["applications"])


class SubmitIn(BaseModel):
    category: str = Field(min_length=1, max_length=64)
    data_ref: str
    credential_type: CredentialType
    payment: Decimal = Decimal("0")


class ManualSubmitIn(BaseModel):
    category: str = Field(min_length=1, max_length=64)
    data_ref: str
    payment: Decimal = Decimal("0")


class SubmissionOut(BaseModel):
    application: ApplicationOut
    ambassador: AmbassadorOut | None
    token_id: int
    refund: Decimal


class HistoryOut(BaseModel):
    applicant: str
    total: int
    offset: int
    limit: int
    items: list[ApplicationOut]


@router.post(
    "/applications",
    response_model=SubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_with_issuance(
    body: SubmitIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> SubmissionOut:
    result = program.registry.submit_with_issuance(
        principal.identity,
        body.category,
        body.data_ref,
        body.credential_type,
        body.payment,
    )
    await publish_committed(program, publisher)
    return SubmissionOut(
        application=ApplicationOut.of(result.application),
        ambassador=AmbassadorOut.of(result.ambassador) if result.ambassador else None,
        token_id=result.token_id,
        refund=result.refund,
    )


@router.post(
    "/applications/manual",
    response_model=SubmissionOut,
    status_code=status.HTTP_201_CREATED,
    deprecated=True,
)
async def submit_manual(
    body: ManualSubmitIn,
    principal: CallerDep,
    program: ProgramDep,
    publisher: PublisherDep,
) -> SubmissionOut:
    result = program.registry.submit_application(
        principal.identity, body.category, body.data_ref, body.payment
    )
    await publish_committed(program, publisher)
    return SubmissionOut(
        application=ApplicationOut.of(result.application),
        ambassador=None,
        token_id=0,
        refund=result.refund,
    )


@router.get("/applications/{application_id}", response_model=ApplicationOut)
def get_application(
    application_id: int,
    _principal: CallerDep,
    program: ProgramDep,
) -> ApplicationOut:
    return ApplicationOut.of(program.registry.get_application(application_id))


@router.get("/applicants/{identity}/applications", response_model=HistoryOut)
def list_history(
    identity: str,
    _principal: CallerDep,
    program: ProgramDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
) -> HistoryOut:
    items = program.ledger.page(identity, offset=offset, limit=limit)
    return HistoryOut(
        applicant=identity,
        total=len(program.registry.history_of(identity)),
        offset=offset,
        limit=limit,
        items=[ApplicationOut.of(a) for a in items],
    )
