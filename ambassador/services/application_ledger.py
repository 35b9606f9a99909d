from __future__ import annotations

import logging

from ambassador.core.config import MAX_PAGE_SIZE
from ambassador.models.application import Application, ApplicationStatus
from ambassador.models.credential_type import CredentialType
from ambassador.repos.application_repo import ApplicationRepo
from ambassador.repos.counters import CounterRepo, IdSequence
from ambassador.services.clock import Clock
from ambassador.services.errors import ApplicationNotFound, DataRequired
from ambassador.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

TOTAL_SUBMITTED = "applications:submitted"
TOTAL_APPROVED = "applications:approved"


class ApplicationLedger:
    """Append-only record of applications and each applicant's history."""

    def __init__(
        self,
        *,
        applications: ApplicationRepo,
        counters: CounterRepo,
        application_ids: IdSequence,
        uow: UnitOfWork,
        clock: Clock,
    ) -> None:
        self._applications = applications
        self._counters = counters
        self._application_ids = application_ids
        self._uow = uow
        self._clock = clock

    def submit(
        self,
        applicant: str,
        category: str,
        data_ref: str,
        *,
        credential_type: CredentialType,
        expires_at: int,
    ) -> Application:
        """Record an auto-approved application and return it."""
        if not data_ref or not data_ref.strip():
            raise DataRequired()

        with self._uow.atomic(applicant):
            now = self._clock()
            application = Application(
                id=self._application_ids.next(),
                applicant=applicant,
                category=category,
                status=ApplicationStatus.APPROVED,
                submitted_at=now,
                reviewed_at=now,
                expires_at=expires_at,
                data_ref=data_ref,
                credential_type=credential_type,
                reviewed_by=None,
            )
            self._applications.add(application)
            self._counters.increment(TOTAL_SUBMITTED)
            self._counters.increment(TOTAL_APPROVED)

        logger.info(
            "Application recorded id=%d applicant=%s",
            application.id,
            applicant,
            extra={"application_id": application.id, "applicant": applicant},
        )
        return application

    def get(self, application_id: int) -> Application:
        application = self._applications.get(application_id)
        if application is None:
            raise ApplicationNotFound()
        return application

    def history_of(self, applicant: str) -> list[int]:
        return self._applications.history_of(applicant)

    def page(self, applicant: str, *, offset: int = 0, limit: int = 20) -> list[Application]:
        if offset < 0:
            raise ValueError("offset must not be negative")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be within [1, {MAX_PAGE_SIZE}]")
        ids = self.history_of(applicant)[offset : offset + limit]
        return [self.get(application_id) for application_id in ids]

    def totals(self) -> tuple[int, int]:
        return (
            self._counters.get(TOTAL_SUBMITTED),
            self._counters.get(TOTAL_APPROVED),
        )

    def next_application_id(self) -> int:
        return self._application_ids.peek()
