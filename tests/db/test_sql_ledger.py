"""The registry and issuer running on SQL-backed stores.

Each test builds a program on its own SQLite database; the scenarios mirror
the in-memory ones and then look at the rows that were actually written.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ambassador.core.config import Settings
from ambassador.db.engine import Base, sync_url
from ambassador.db.tables import (
    AdminRow,
    AmbassadorRow,
    ApplicantHistoryRow,
    ApplicationRow,
    BadgeRow,
    CounterRow,
    SettingRow,
)
from ambassador.models.credential_type import CredentialType
from ambassador.repos.pg_ambassador_repo import PgAmbassadorRepo
from ambassador.services.program import AmbassadorProgram, build_program
from tests.conftest import (
    ADMIN,
    DAY,
    OWNER,
    START,
    FakeClock,
    assert_stores_consistent,
    event_names,
)

YEAR = 365 * DAY


def _sql_program(
    settings: Settings, clock: FakeClock, url: str = "sqlite://"
) -> AmbassadorProgram:
    p = build_program(dataclasses.replace(settings, database_url=url), clock)
    assert p.engine is not None
    Base.metadata.create_all(p.engine)
    p.access.set_admin(ADMIN, True)
    return p


@pytest.fixture
def sql_program(settings: Settings, clock: FakeClock) -> Iterator[AmbassadorProgram]:
    p = _sql_program(settings, clock)
    yield p
    p.engine.dispose()


def _apply(program: AmbassadorProgram, caller: str = "bob"):
    return program.registry.submit_with_issuance(
        caller, "events", "ipfs://cv", CredentialType.EVENTS_STANDARD, Decimal("0")
    )


def _count(program: AmbassadorProgram, row_type) -> int:
    with Session(program.engine) as session:
        return session.execute(select(func.count()).select_from(row_type)).scalar_one()


def test_sync_url_swaps_async_driver() -> None:
    assert sync_url("postgresql+asyncpg://u:p@db/amb") == "postgresql+psycopg2://u:p@db/amb"
    assert sync_url("sqlite://") == "sqlite://"


def test_in_memory_program_has_no_engine(program: AmbassadorProgram) -> None:
    assert program.engine is None


def test_submission_writes_every_row(sql_program: AmbassadorProgram) -> None:
    result = _apply(sql_program)

    with Session(sql_program.engine) as session:
        application = session.get(ApplicationRow, result.application.id)
        assert application is not None
        assert application.applicant == "bob"
        assert application.status == "approved"
        assert application.reviewed_by is None

        history = session.execute(select(ApplicantHistoryRow)).scalars().all()
        assert [(h.applicant, h.position, h.application_id) for h in history] == [
            ("bob", 0, 1)
        ]

        ambassador = session.get(AmbassadorRow, "bob")
        assert ambassador is not None and ambassador.is_active
        assert ambassador.expires_at == START + YEAR
        assert ambassador.credential_token_id == 1

        badge = session.get(BadgeRow, 1)
        assert badge is not None and badge.exists
        assert badge.holder == "bob"

        counters = {
            row.name: row.value for row in session.execute(select(CounterRow)).scalars()
        }
    assert counters["sequence:application"] == 2
    assert counters["sequence:token"] == 2
    assert sql_program.ledger.totals() == (1, 1)
    assert sql_program.issuer.count_of(CredentialType.EVENTS_STANDARD) == 1
    assert event_names(sql_program) == [
        "application.submitted",
        "application.approved",
        "ambassador.activated",
        "ambassador.badge_minted",
    ]
    assert_stores_consistent(sql_program)


def test_failed_mint_rolls_back_the_transaction(
    sql_program: AmbassadorProgram, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _down(*args, **kwargs):
        raise RuntimeError("issuer unavailable")

    monkeypatch.setattr(sql_program.issuer, "mint", _down)
    with pytest.raises(RuntimeError):
        _apply(sql_program)

    assert _count(sql_program, ApplicationRow) == 0
    assert _count(sql_program, ApplicantHistoryRow) == 0
    assert _count(sql_program, AmbassadorRow) == 0
    assert sql_program.ledger.totals() == (0, 0)
    assert sql_program.ledger.history_of("bob") == []
    assert len(sql_program.outbox) == 0


def test_failed_callback_rolls_back_only_its_savepoint(
    sql_program: AmbassadorProgram, monkeypatch: pytest.MonkeyPatch
) -> None:
    original = sql_program.ambassadors.put

    def _put_then_fail(info):
        original(info)
        raise RuntimeError("registry unavailable")

    monkeypatch.setattr(sql_program.ambassadors, "put", _put_then_fail)
    token_id = sql_program.issuer.mint(
        OWNER, "bob", CredentialType.EVENTS_STANDARD, START + DAY
    ).token_id

    assert sql_program.issuer.get_badge(token_id).exists
    assert _count(sql_program, BadgeRow) == 1
    assert _count(sql_program, AmbassadorRow) == 0
    assert event_names(sql_program) == ["badge.issued"]


def test_revoke_and_sweep_persist(sql_program: AmbassadorProgram, clock: FakeClock) -> None:
    _apply(sql_program, "bob")
    _apply(sql_program, "carol")
    sql_program.registry.revoke(ADMIN, "bob")
    clock.advance(YEAR)

    assert sql_program.maintenance.sweep(["bob", "carol"]) == ["carol"]

    with Session(sql_program.engine) as session:
        rows = {row.identity: row for row in session.execute(select(AmbassadorRow)).scalars()}
        badges = session.execute(select(BadgeRow).order_by(BadgeRow.token_id)).scalars().all()
    assert not rows["bob"].is_active and rows["bob"].credential_token_id == 0
    assert not rows["carol"].is_active and rows["carol"].credential_token_id == 0
    assert [b.exists for b in badges] == [False, False]
    assert sql_program.badges.live_holders() == {}
    assert sql_program.issuer.count_of(CredentialType.EVENTS_STANDARD) == 0


def test_roles_persist(sql_program: AmbassadorProgram) -> None:
    sql_program.registry.set_admin(OWNER, "carol", True)
    sql_program.registry.set_admin(OWNER, ADMIN, False)
    sql_program.registry.transfer_ownership(OWNER, "new-owner")

    with Session(sql_program.engine) as session:
        assert [row.identity for row in session.execute(select(AdminRow)).scalars()] == [
            "carol"
        ]
        owner = session.get(SettingRow, "owner")
        assert owner is not None and owner.text_value == "new-owner"
    assert sql_program.roles.admins() == ["carol"]
    assert sql_program.access.owner == "new-owner"


def test_ledger_survives_a_restart(
    settings: Settings, clock: FakeClock, tmp_path: Path
) -> None:
    url = f"sqlite:///{tmp_path / 'ledger.db'}"
    first = _sql_program(settings, clock, url)
    _apply(first, "bob")
    first.engine.dispose()

    clock.advance(DAY)
    second = _sql_program(settings, clock, url)
    info = second.registry.get_ambassador_info("bob")
    assert info is not None and info.is_active
    assert second.issuer.holder_token("bob") == 1
    assert second.ledger.next_application_id() == 2
    assert second.issuer.next_token_id() == 2

    result = _apply(second, "carol")
    assert result.application.id == 2
    assert result.ambassador.credential_token_id == 2
    second.engine.dispose()


def test_ambassador_repo_put_overwrites(sql_program: AmbassadorProgram) -> None:
    _apply(sql_program)
    repo = sql_program.ambassadors
    assert isinstance(repo, PgAmbassadorRepo)
    info = repo.get("bob")
    repo.put(dataclasses.replace(info, is_active=False))
    assert repo.get("bob").is_active is False
    assert repo.list_active() == []
