from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ambassador.models.credential_type import CredentialType
from ambassador.services.program import AmbassadorProgram
from tests.conftest import DAY, FakeClock, auth


@pytest.fixture(autouse=True)
def bob(program: AmbassadorProgram) -> None:
    program.registry.submit_with_issuance(
        "bob", "community", "ipfs://cv", CredentialType.COMMUNITY_ELITE,
        program.fees.elite_fee,
    )


def test_get_ambassador(client: TestClient) -> None:
    resp = client.get("/v1/ambassadors/bob", headers=auth("carol"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["credential_type"] == "community:elite"
    assert body["credential_token_id"] == 1


def test_get_unknown_ambassador(client: TestClient) -> None:
    resp = client.get("/v1/ambassadors/nobody", headers=auth("carol"))
    assert resp.status_code == 404


def test_active_check_is_public(client: TestClient, clock: FakeClock) -> None:
    assert client.get("/v1/ambassadors/bob/active").json() == {
        "identity": "bob",
        "active": True,
    }
    clock.advance(365 * DAY)
    assert client.get("/v1/ambassadors/bob/active").json()["active"] is False


def test_burn_own_before_expiry(client: TestClient) -> None:
    resp = client.post("/v1/ambassadors/me/burn", headers=auth("bob"))
    assert resp.status_code == 403


def test_burn_own_after_expiry(client: TestClient, clock: FakeClock) -> None:
    clock.advance(365 * DAY)
    resp = client.post("/v1/ambassadors/me/burn", headers=auth("bob"))
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False


def test_burn_own_without_record(client: TestClient) -> None:
    resp = client.post("/v1/ambassadors/me/burn", headers=auth("carol"))
    assert resp.status_code == 409
