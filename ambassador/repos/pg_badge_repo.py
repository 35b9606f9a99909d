"""SQL implementation of BadgeRepo.

Burned tokens keep their row with ``exists`` false; the holder mapping is
the set of rows that still exist.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ambassador.db.tables import BadgeRow
from ambassador.models.badge import BadgeInfo
from ambassador.models.credential_type import CredentialType
from ambassador.services.unit_of_work import session_for


class PgBadgeRepo:
    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def get(self, token_id: int) -> BadgeInfo | None:
        with session_for(self._sessions) as session:
            row = session.get(BadgeRow, token_id)
            if row is None:
                return None
            return _row_to_badge(row)

    def token_of(self, holder: str) -> int:
        stmt = select(BadgeRow.token_id).where(
            BadgeRow.holder == holder, BadgeRow.exists.is_(True)
        )
        with session_for(self._sessions) as session:
            return session.execute(stmt).scalar_one_or_none() or 0

    def add(self, badge: BadgeInfo) -> None:
        with session_for(self._sessions) as session:
            if session.get(BadgeRow, badge.token_id) is not None:
                raise ValueError("token id already allocated")
            live = select(BadgeRow.token_id).where(
                BadgeRow.holder == badge.holder, BadgeRow.exists.is_(True)
            )
            if session.execute(live).first() is not None:
                raise ValueError("holder already mapped to a token")
            session.add(
                BadgeRow(
                    token_id=badge.token_id,
                    holder=badge.holder,
                    credential_type=badge.credential_type.value,
                    minted_at=badge.minted_at,
                    expires_at=badge.expires_at,
                    exists=badge.exists,
                )
            )
            session.flush()

    def update_expiration(self, token_id: int, expires_at: int) -> BadgeInfo:
        with session_for(self._sessions) as session:
            row = _live_row(session, token_id)
            row.expires_at = expires_at
            session.flush()
            return _row_to_badge(row)

    def destroy(self, token_id: int) -> BadgeInfo:
        with session_for(self._sessions) as session:
            row = _live_row(session, token_id)
            badge = _row_to_badge(row)
            row.exists = False
            session.flush()
            return badge

    def live_holders(self) -> dict[str, int]:
        stmt = select(BadgeRow.holder, BadgeRow.token_id).where(BadgeRow.exists.is_(True))
        with session_for(self._sessions) as session:
            return {holder: token_id for holder, token_id in session.execute(stmt)}


def _live_row(session: Session, token_id: int) -> BadgeRow:
    row = session.get(BadgeRow, token_id)
    if row is None or not row.exists:
        raise KeyError("token not found")
    return row


def _row_to_badge(row: BadgeRow) -> BadgeInfo:
    return BadgeInfo(
        token_id=row.token_id,
        holder=row.holder,
        credential_type=CredentialType(row.credential_type),
        minted_at=row.minted_at,
        expires_at=row.expires_at,
        exists=row.exists,
    )
