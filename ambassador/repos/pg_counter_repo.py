"""SQL implementations of CounterRepo and IdSequence over the counters table.

Id sequences are stored as ``sequence:<name>`` rows holding the next id.
They advance inside the caller's unit of work, so a rolled-back unit hands
its id to the next committed one; committed ids stay unique and increasing.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ambassador.db.tables import CounterRow
from ambassador.services.unit_of_work import session_for

SEQUENCE_PREFIX = "sequence:"


class PgCounterRepo:
    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def increment(self, name: str, by: int = 1) -> int:
        with session_for(self._sessions) as session:
            row = _locked_row(session, name)
            if row is None:
                row = CounterRow(name=name, value=0)
                session.add(row)
            row.value += by
            session.flush()
            return row.value

    def decrement(self, name: str, by: int = 1) -> int:
        return self.increment(name, -by)

    def get(self, name: str) -> int:
        with session_for(self._sessions) as session:
            row = session.get(CounterRow, name)
            return row.value if row is not None else 0

    def snapshot(self) -> dict[str, int]:
        stmt = select(CounterRow).where(CounterRow.name.not_like(f"{SEQUENCE_PREFIX}%"))
        with session_for(self._sessions) as session:
            return {row.name: row.value for row in session.execute(stmt).scalars()}


class PgSequence:
    def __init__(self, sessions: sessionmaker[Session], name: str, start: int = 1) -> None:
        self._sessions = sessions
        self._name = SEQUENCE_PREFIX + name
        self._start = start

    def next(self) -> int:
        with session_for(self._sessions) as session:
            row = _locked_row(session, self._name)
            if row is None:
                row = CounterRow(name=self._name, value=self._start)
                session.add(row)
            value = row.value
            row.value = value + 1
            session.flush()
            return value

    def peek(self) -> int:
        with session_for(self._sessions) as session:
            row = session.get(CounterRow, self._name)
            return row.value if row is not None else self._start


def _locked_row(session: Session, name: str) -> CounterRow | None:
    return session.get(CounterRow, name, with_for_update=True)
