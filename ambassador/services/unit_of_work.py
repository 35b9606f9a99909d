"""Atomic units of work over the ledger stores.

Every public operation of the program runs inside ``UnitOfWork.atomic()``:

  - it takes an exclusive, re-entrant lock per identity it touches, so two
    operations on the same applicant never interleave while operations on
    different applicants run side by side;
  - every repo write made while the unit is open journals an undo action;
  - if anything raises, the journal is replayed newest-first and the unit's
    notifications are discarded, so no partial write is ever observable;
  - on success the unit's notifications move to the outbox.

Calls between components (registry -> issuer -> registry) open nested
units.  A nested unit joins the enclosing one as a savepoint: its failure
undoes only its own writes and re-raises, and the outermost unit decides
whether the whole operation commits.  Locks taken by a nested unit are held
until the outermost unit finishes.

With SQL-backed stores the outermost unit also owns one session and
transaction, and nested units map to SAVEPOINTs.

The current unit is tracked in a ContextVar, so the journal follows the
call chain without being passed through every function.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field

from sqlalchemy.orm import Session, sessionmaker

from ambassador.models.notification import Notification
from ambassador.services.outbox import Outbox

logger = logging.getLogger(__name__)

UndoAction = Callable[[], None]


class LockTable:
    """Lazily created re-entrant lock per key."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def get(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock


@dataclass
class _Unit:
    journal: list[UndoAction] = field(default_factory=list)
    events: list[Notification] = field(default_factory=list)
    held: list[threading.RLock] = field(default_factory=list)
    session: Session | None = None

    def mark(self) -> tuple[int, int]:
        return len(self.journal), len(self.events)

    def rollback_to(self, mark: tuple[int, int]) -> None:
        journal_mark, events_mark = mark
        while len(self.journal) > journal_mark:
            undo = self.journal.pop()
            undo()
        del self.events[events_mark:]


_current_unit: ContextVar[_Unit | None] = ContextVar("ambassador_unit", default=None)


def in_unit() -> bool:
    return _current_unit.get() is not None


def current_session() -> Session | None:
    """The database session of the open unit, if the unit has one."""
    unit = _current_unit.get()
    return unit.session if unit is not None else None


@contextmanager
def session_for(sessions: sessionmaker[Session]) -> Iterator[Session]:
    """The open unit's session, or a short transaction of its own outside one."""
    session = current_session()
    if session is not None:
        yield session
        return
    with sessions.begin() as session:
        yield session


def record_undo(undo: UndoAction) -> None:
    """Journal an undo action on the open unit.  No-op outside a unit."""
    unit = _current_unit.get()
    if unit is not None:
        unit.journal.append(undo)


def emit(notification: Notification) -> None:
    """Queue a notification for delivery once the open unit commits."""
    unit = _current_unit.get()
    if unit is None:
        raise RuntimeError("notifications must be emitted inside a unit of work")
    unit.events.append(notification)


class UnitOfWork:
    """Opens units of work.

    With a ``sessions`` factory every outermost unit also owns one database
    transaction: it commits when the unit commits, rolls back when the unit
    rolls back, and nested units become SAVEPOINTs.
    """

    def __init__(
        self,
        outbox: Outbox,
        locks: LockTable | None = None,
        sessions: sessionmaker[Session] | None = None,
    ) -> None:
        self._outbox = outbox
        self._locks = locks or LockTable()
        self._sessions = sessions

    @property
    def outbox(self) -> Outbox:
        return self._outbox

    @contextmanager
    def atomic(self, *keys: str) -> Iterator[None]:
        """Run the enclosed block as one all-or-nothing unit.

        ``keys`` are the identities whose rows the block reads and writes.
        They are locked in sorted order.
        """
        parent = _current_unit.get()
        if parent is not None:
            with self._savepoint(parent, keys):
                yield
            return

        unit = _Unit()
        token = _current_unit.set(unit)
        try:
            self._acquire(unit, keys)
            if self._sessions is not None:
                unit.session = self._sessions()
                unit.session.begin()
            try:
                yield
                if unit.session is not None:
                    unit.session.commit()
            except Exception:
                unit.rollback_to((0, 0))
                if unit.session is not None:
                    unit.session.rollback()
                logger.debug("Unit of work rolled back keys=%s", sorted(set(keys)))
                raise
            self._outbox.extend(unit.events)
        finally:
            _current_unit.reset(token)
            if unit.session is not None:
                unit.session.close()
            for lock in reversed(unit.held):
                lock.release()

    @contextmanager
    def _savepoint(self, parent: _Unit, keys: tuple[str, ...]) -> Iterator[None]:
        self._acquire(parent, keys)
        mark = parent.mark()
        nested = parent.session.begin_nested() if parent.session is not None else None
        try:
            yield
        except Exception:
            parent.rollback_to(mark)
            if nested is not None:
                nested.rollback()
            raise
        if nested is not None:
            nested.commit()

    def _acquire(self, unit: _Unit, keys: tuple[str, ...]) -> None:
        for key in sorted(set(keys)):
            lock = self._locks.get(key)
            lock.acquire()
            unit.held.append(lock)


_MISSING = object()


def journaled_set(mapping: dict, key, value) -> None:
    """``mapping[key] = value``, undone if the open unit rolls back."""
    previous = mapping.get(key, _MISSING)
    mapping[key] = value

    def _undo() -> None:
        if previous is _MISSING:
            mapping.pop(key, None)
        else:
            mapping[key] = previous

    record_undo(_undo)


def journaled_delete(mapping: dict, key) -> None:
    """``mapping.pop(key)``, undone if the open unit rolls back."""
    if key not in mapping:
        return
    previous = mapping.pop(key)
    record_undo(lambda: mapping.__setitem__(key, previous))
