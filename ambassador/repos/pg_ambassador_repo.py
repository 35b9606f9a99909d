"""SQL implementation of AmbassadorRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ambassador.db.tables import AmbassadorRow
from ambassador.models.ambassador import AmbassadorInfo
from ambassador.models.credential_type import CredentialType
from ambassador.services.unit_of_work import session_for


class PgAmbassadorRepo:
    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def get(self, identity: str) -> AmbassadorInfo | None:
        with session_for(self._sessions) as session:
            row = session.get(AmbassadorRow, identity)
            if row is None:
                return None
            return _row_to_ambassador(row)

    def put(self, info: AmbassadorInfo) -> None:
        with session_for(self._sessions) as session:
            row = session.get(AmbassadorRow, info.identity)
            if row is None:
                row = AmbassadorRow(identity=info.identity)
                session.add(row)
            row.approved_at = info.approved_at
            row.expires_at = info.expires_at
            row.is_active = info.is_active
            row.category = info.category
            row.credential_type = info.credential_type.value
            row.credential_token_id = info.credential_token_id
            session.flush()

    def list_active(self) -> list[AmbassadorInfo]:
        stmt = (
            select(AmbassadorRow)
            .where(AmbassadorRow.is_active.is_(True))
            .order_by(AmbassadorRow.identity)
        )
        with session_for(self._sessions) as session:
            return [_row_to_ambassador(row) for row in session.execute(stmt).scalars()]


def _row_to_ambassador(row: AmbassadorRow) -> AmbassadorInfo:
    return AmbassadorInfo(
        identity=row.identity,
        approved_at=row.approved_at,
        expires_at=row.expires_at,
        is_active=row.is_active,
        category=row.category,
        credential_type=CredentialType(row.credential_type),
        credential_token_id=row.credential_token_id,
    )
