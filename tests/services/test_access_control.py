from __future__ import annotations

import pytest

from ambassador.repos.role_repo import InMemoryRoleRepo
from ambassador.services.access_control import AccessControl, Role
from ambassador.services.errors import NotAuthorized


@pytest.fixture
def access() -> AccessControl:
    roles = InMemoryRoleRepo(owner="owner")
    roles.set_admin("alice", True)
    return AccessControl(roles, orchestrator="registry", issuer_service="issuer")


@pytest.mark.parametrize(
    "caller, subject, expected",
    [
        ("owner", None, Role.OWNER),
        ("issuer", None, Role.ISSUER_SERVICE),
        ("registry", None, Role.ORCHESTRATOR),
        ("alice", None, Role.ADMIN),
        ("bob", "bob", Role.SELF),
        ("bob", "carol", Role.NONE),
        ("bob", None, Role.NONE),
    ],
)
def test_resolve(access: AccessControl, caller: str, subject: str | None, expected: Role) -> None:
    assert access.resolve(caller, subject) is expected


def test_owner_implies_admin(access: AccessControl) -> None:
    assert access.holds("owner", Role.ADMIN)


def test_require_returns_first_matching_role(access: AccessControl) -> None:
    assert access.require("bob", Role.OWNER, Role.SELF, subject="bob") is Role.SELF


def test_require_denies_and_logs(access: AccessControl, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING"):
        with pytest.raises(NotAuthorized):
            access.require("bob", Role.ADMIN)
    assert "Access denied" in caplog.text


def test_revoked_admin_loses_role(access: AccessControl) -> None:
    access.set_admin("alice", False)
    assert access.resolve("alice") is Role.NONE


def test_transfer_ownership_moves_owner(access: AccessControl) -> None:
    access.transfer_ownership("dave")
    assert access.owner == "dave"
    assert access.resolve("owner") is Role.NONE
    assert access.resolve("dave") is Role.OWNER
