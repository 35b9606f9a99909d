from __future__ import annotations

import pytest

from ambassador.models.application import ApplicationStatus
from ambassador.models.credential_type import CredentialType
from ambassador.services.errors import ApplicationNotFound, DataRequired
from ambassador.services.program import AmbassadorProgram
from tests.conftest import DAY, START


def _submit(program: AmbassadorProgram, applicant: str, data_ref: str = "ipfs://cv"):
    return program.ledger.submit(
        applicant,
        "community",
        data_ref,
        credential_type=CredentialType.COMMUNITY_STANDARD,
        expires_at=START + DAY,
    )


def test_submit_records_auto_approved_application(program: AmbassadorProgram) -> None:
    application = _submit(program, "bob")
    assert application.id == 1
    assert application.status is ApplicationStatus.APPROVED
    assert application.submitted_at == application.reviewed_at == START
    assert application.reviewed_by is None
    assert application.auto_approved
    assert program.ledger.get(1) == application


def test_submit_updates_totals_and_history(program: AmbassadorProgram) -> None:
    _submit(program, "bob")
    _submit(program, "carol")
    _submit(program, "bob")
    assert program.ledger.totals() == (3, 3)
    assert program.ledger.history_of("bob") == [1, 3]
    assert program.ledger.next_application_id() == 4


@pytest.mark.parametrize("data_ref", ["", "   "])
def test_submit_requires_data(program: AmbassadorProgram, data_ref: str) -> None:
    with pytest.raises(DataRequired):
        _submit(program, "bob", data_ref)
    assert program.ledger.totals() == (0, 0)


def test_get_unknown_application(program: AmbassadorProgram) -> None:
    with pytest.raises(ApplicationNotFound):
        program.ledger.get(1)


def test_history_of_unknown_applicant_is_empty(program: AmbassadorProgram) -> None:
    assert program.ledger.history_of("nobody") == []


def test_page_slices_history(program: AmbassadorProgram) -> None:
    for _ in range(5):
        _submit(program, "bob")
    page = program.ledger.page("bob", offset=1, limit=2)
    assert [a.id for a in page] == [2, 3]
    assert program.ledger.page("bob", offset=10) == []


@pytest.mark.parametrize("offset, limit", [(-1, 10), (0, 0), (0, 101)])
def test_page_rejects_bad_bounds(program: AmbassadorProgram, offset: int, limit: int) -> None:
    with pytest.raises(ValueError):
        program.ledger.page("bob", offset=offset, limit=limit)
