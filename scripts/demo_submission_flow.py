"""Demo: walk an application through issuance, extension and revocation.

Run with:
    python scripts/demo_submission_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from ambassador.api.dependencies import program
from ambassador.main import app
from ambassador.services import token_service

APPLICANT = "demo-applicant"
ADMIN = "demo-admin"


def _auth(identity: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.create_access_token(sub=identity)}"}


def main() -> None:
    client = TestClient(app)
    owner = program.access.owner

    # ── Step 1: owner grants an admin ───────────────────────────────
    r = client.put(f"/v1/admin/admins/{ADMIN}", json={"is_admin": True}, headers=_auth(owner))
    print(f"1. PUT  /v1/admin/admins/{ADMIN}      → {r.status_code}")

    # ── Step 2: elite application without payment ───────────────────
    body = {
        "category": "developer",
        "data_ref": "ipfs://demo-application",
        "credential_type": "developer:elite",
    }
    r = client.post("/v1/applications", json=body, headers=_auth(APPLICANT))
    print(f"2. POST /v1/applications (unpaid) → {r.status_code}  {r.json()['code']}")

    # ── Step 3: elite application with overpayment ───────────────────
    fee = program.fees.elite_fee
    r = client.post(
        "/v1/applications",
        json={**body, "payment": str(fee * 2)},
        headers=_auth(APPLICANT),
    )
    data = r.json()
    print(
        f"3. POST /v1/applications (paid)   → {r.status_code}  "
        f"token={data['token_id']}  refund={data['refund']}"
    )

    # ── Step 4: admin extends by 30 days ────────────────────────────
    r = client.post(
        f"/v1/admin/ambassadors/{APPLICANT}/extend",
        json={"days": 30},
        headers=_auth(ADMIN),
    )
    print(f"4. POST extend                    → {r.status_code}  expires_at={r.json()['expires_at']}")

    # ── Step 5: badge mirrors the new expiration ────────────────────
    r = client.get(f"/v1/badges/{data['token_id']}")
    print(f"5. GET  /v1/badges/{data['token_id']}             → expires_at={r.json()['expires_at']}")

    # ── Step 6: admin revokes ───────────────────────────────────────
    r = client.post(f"/v1/admin/ambassadors/{APPLICANT}/revoke", headers=_auth(ADMIN))
    print(f"6. POST revoke                    → {r.status_code}  active={r.json()['is_active']}")

    r = client.get(f"/v1/badges/holders/{APPLICANT}")
    print(f"7. GET  holder token              → {r.json()['token_id']}")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
