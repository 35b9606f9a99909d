"""SQL implementation of ApplicationRepo."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from ambassador.db.tables import ApplicantHistoryRow, ApplicationRow
from ambassador.models.application import Application, ApplicationStatus
from ambassador.models.credential_type import CredentialType
from ambassador.services.unit_of_work import session_for


class PgApplicationRepo:
    """Satisfies the ApplicationRepo Protocol using SQLAlchemy."""

    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def get(self, application_id: int) -> Application | None:
        with session_for(self._sessions) as session:
            row = session.get(ApplicationRow, application_id)
            if row is None:
                return None
            return _row_to_application(row)

    def add(self, application: Application) -> None:
        with session_for(self._sessions) as session:
            if session.get(ApplicationRow, application.id) is not None:
                raise ValueError("application id already exists")
            session.add(
                ApplicationRow(
                    id=application.id,
                    applicant=application.applicant,
                    category=application.category,
                    status=application.status.value,
                    submitted_at=application.submitted_at,
                    reviewed_at=application.reviewed_at,
                    reviewed_by=application.reviewed_by,
                    expires_at=application.expires_at,
                    data_ref=application.data_ref,
                    credential_type=application.credential_type.value,
                )
            )
            session.flush()

            stmt = select(func.count()).where(
                ApplicantHistoryRow.applicant == application.applicant
            )
            position = session.execute(stmt).scalar_one()
            session.add(
                ApplicantHistoryRow(
                    applicant=application.applicant,
                    position=position,
                    application_id=application.id,
                )
            )
            session.flush()

    def history_of(self, applicant: str) -> list[int]:
        stmt = (
            select(ApplicantHistoryRow.application_id)
            .where(ApplicantHistoryRow.applicant == applicant)
            .order_by(ApplicantHistoryRow.position)
        )
        with session_for(self._sessions) as session:
            return list(session.execute(stmt).scalars())


def _row_to_application(row: ApplicationRow) -> Application:
    return Application(
        id=row.id,
        applicant=row.applicant,
        category=row.category,
        status=ApplicationStatus(row.status),
        submitted_at=row.submitted_at,
        reviewed_at=row.reviewed_at,
        expires_at=row.expires_at,
        data_ref=row.data_ref,
        credential_type=CredentialType(row.credential_type),
        reviewed_by=row.reviewed_by,
    )
