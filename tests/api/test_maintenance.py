from __future__ import annotations

from fastapi.testclient import TestClient

from ambassador.models.credential_type import CredentialType
from ambassador.services.program import AmbassadorProgram
from tests.conftest import DAY, FakeClock, auth


def test_sweep_endpoint(
    client: TestClient, program: AmbassadorProgram, clock: FakeClock
) -> None:
    for who in ("bob", "carol"):
        program.registry.submit_with_issuance(
            who, "content", "ipfs://cv", CredentialType.CONTENT_STANDARD
        )
    program.registry.set_duration("owner", 30 * DAY)
    program.registry.submit_with_issuance(
        "dave", "content", "ipfs://cv", CredentialType.CONTENT_STANDARD
    )
    clock.advance(40 * DAY)

    resp = client.post(
        "/v1/maintenance/sweep",
        json={"identities": ["bob", "dave"]},
        headers=auth("carol"),
    )
    assert resp.status_code == 200
    assert resp.json() == {"deactivated": ["dave"]}


def test_sweep_requires_auth(client: TestClient) -> None:
    resp = client.post("/v1/maintenance/sweep", json={"identities": []})
    assert resp.status_code == 401


def test_sweep_cap(client: TestClient) -> None:
    resp = client.post(
        "/v1/maintenance/sweep",
        json={"identities": [f"id-{i}" for i in range(51)]},
        headers=auth("carol"),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "InvalidBatchSize"


def test_stats(client: TestClient, program: AmbassadorProgram) -> None:
    program.registry.submit_with_issuance(
        "bob", "content", "ipfs://cv", CredentialType.CONTENT_STANDARD
    )
    body = client.get("/v1/stats").json()
    assert body["total_submitted"] == 1
    assert body["total_approved"] == 1
    assert body["next_application_id"] == 2
    assert body["next_token_id"] == 2
    assert body["live_badges_by_type"]["content:standard"] == 1
    assert body["live_badges_by_type"]["content:elite"] == 0
