"""SQL implementation of RoleRepo.

The owner lives in the settings table under ``owner``; until it is first
transferred the configured owner applies.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ambassador.db.tables import AdminRow, SettingRow
from ambassador.services.unit_of_work import session_for

_OWNER = "owner"


class PgRoleRepo:
    def __init__(self, sessions: sessionmaker[Session], owner: str) -> None:
        self._sessions = sessions
        self._default_owner = owner

    def is_admin(self, identity: str) -> bool:
        with session_for(self._sessions) as session:
            row = session.get(AdminRow, identity)
            return row is not None and row.is_admin

    def set_admin(self, identity: str, is_admin: bool) -> None:
        with session_for(self._sessions) as session:
            row = session.get(AdminRow, identity)
            if is_admin and row is None:
                session.add(AdminRow(identity=identity, is_admin=True))
            elif not is_admin and row is not None:
                session.delete(row)
            session.flush()

    def get_owner(self) -> str:
        with session_for(self._sessions) as session:
            row = session.get(SettingRow, _OWNER)
            if row is None or row.text_value is None:
                return self._default_owner
            return row.text_value

    def set_owner(self, identity: str) -> None:
        with session_for(self._sessions) as session:
            row = session.get(SettingRow, _OWNER)
            if row is None:
                session.add(SettingRow(name=_OWNER, text_value=identity))
            else:
                row.text_value = identity
            session.flush()

    def admins(self) -> list[str]:
        stmt = (
            select(AdminRow.identity)
            .where(AdminRow.is_admin.is_(True))
            .order_by(AdminRow.identity)
        )
        with session_for(self._sessions) as session:
            return list(session.execute(stmt).scalars())
