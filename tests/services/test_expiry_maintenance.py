from __future__ import annotations

from decimal import Decimal

import pytest

from ambassador.models.credential_type import CredentialType
from ambassador.services.errors import InvalidBatchSize
from ambassador.services.program import AmbassadorProgram
from tests.conftest import ADMIN, DAY, FakeClock, assert_stores_consistent, event_names


def _apply(program: AmbassadorProgram, caller: str) -> None:
    program.registry.submit_with_issuance(
        caller, "events", "ipfs://cv", CredentialType.EVENTS_STANDARD, Decimal("0")
    )


def test_sweep_deactivates_expired_only(program: AmbassadorProgram, clock: FakeClock) -> None:
    _apply(program, "bob")
    _apply(program, "carol")
    program.registry.extend(ADMIN, "carol", 30 * DAY)
    clock.advance(366 * DAY)
    program.outbox.drain()

    deactivated = program.maintenance.sweep(["bob", "carol", "nobody"])

    assert deactivated == ["bob"]
    assert not program.issuer.get_badge(1).exists
    assert program.issuer.get_badge(2).exists
    assert program.registry.get_ambassador_info("carol").is_active
    assert event_names(program) == [
        "badge.burned",
        "ambassador.deactivated",
        "ambassador.badge_burned",
    ]
    assert_stores_consistent(program)


def test_sweep_is_idempotent(program: AmbassadorProgram, clock: FakeClock) -> None:
    _apply(program, "bob")
    clock.advance(365 * DAY)
    assert program.maintenance.sweep(["bob"]) == ["bob"]
    assert program.maintenance.sweep(["bob"]) == []


def test_sweep_skips_revoked(program: AmbassadorProgram, clock: FakeClock) -> None:
    _apply(program, "bob")
    program.registry.revoke(ADMIN, "bob")
    clock.advance(400 * DAY)
    assert program.maintenance.sweep(["bob"]) == []


def test_sweep_before_expiry(program: AmbassadorProgram) -> None:
    _apply(program, "bob")
    assert program.maintenance.sweep(["bob"]) == []
    assert program.registry.is_active_ambassador("bob")


def test_sweep_batch_cap(program: AmbassadorProgram) -> None:
    assert program.maintenance.max_batch_size == 50
    assert program.maintenance.sweep([f"id-{i}" for i in range(50)]) == []
    with pytest.raises(InvalidBatchSize):
        program.maintenance.sweep([f"id-{i}" for i in range(51)])


def test_oversized_sweep_touches_nothing(program: AmbassadorProgram, clock: FakeClock) -> None:
    expired = ["bob", "carol", "dave"]
    for identity in expired:
        _apply(program, identity)
    clock.advance(366 * DAY)
    _apply(program, "erin")
    program.outbox.drain()

    batch = expired + ["erin"] + [f"id-{i}" for i in range(47)]
    assert len(batch) == 51
    with pytest.raises(InvalidBatchSize):
        program.maintenance.sweep(batch)

    for identity in expired + ["erin"]:
        info = program.registry.get_ambassador_info(identity)
        assert info is not None and info.is_active
        assert program.issuer.get_badge(info.credential_token_id).exists
    assert event_names(program) == []
    assert program.maintenance.sweep(batch[:50]) == expired


def test_empty_sweep(program: AmbassadorProgram) -> None:
    assert program.maintenance.sweep([]) == []
