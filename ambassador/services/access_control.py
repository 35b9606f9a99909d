"""Role resolution for callers of the ambassador program.

Callers are plain identities.  ``resolve`` maps an identity, optionally in
the context of the record being acted on, to the strongest role it holds:

  OWNER           the single owner identity (transferable); implies ADMIN
  ISSUER_SERVICE  the badge issuer, the only caller of registry callbacks
  ORCHESTRATOR    the registry, the only caller of issuer-internal writes
  ADMIN           identities flagged in the role table by the owner
  SELF            the caller is the identity the record belongs to
  NONE            anything else
"""

from __future__ import annotations

import enum
import logging

from ambassador.repos.role_repo import RoleRepo
from ambassador.services.errors import NotAuthorized

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    OWNER = "owner"
    ISSUER_SERVICE = "issuer_service"
    ORCHESTRATOR = "orchestrator"
    ADMIN = "admin"
    SELF = "self"
    NONE = "none"


class AccessControl:
    def __init__(
        self,
        roles: RoleRepo,
        *,
        orchestrator: str,
        issuer_service: str,
    ) -> None:
        self._roles = roles
        self._orchestrator = orchestrator
        self._issuer_service = issuer_service

    @property
    def owner(self) -> str:
        return self._roles.get_owner()

    @property
    def orchestrator(self) -> str:
        return self._orchestrator

    @property
    def issuer_service(self) -> str:
        return self._issuer_service

    def holds(self, caller: str, role: Role, subject: str | None = None) -> bool:
        if role is Role.OWNER:
            return caller == self._roles.get_owner()
        if role is Role.ADMIN:
            return caller == self._roles.get_owner() or self._roles.is_admin(caller)
        if role is Role.ISSUER_SERVICE:
            return caller == self._issuer_service
        if role is Role.ORCHESTRATOR:
            return caller == self._orchestrator
        if role is Role.SELF:
            return subject is not None and caller == subject
        return role is Role.NONE

    def resolve(self, caller: str, subject: str | None = None) -> Role:
        for role in (
            Role.OWNER,
            Role.ISSUER_SERVICE,
            Role.ORCHESTRATOR,
            Role.ADMIN,
            Role.SELF,
        ):
            if self.holds(caller, role, subject):
                return role
        return Role.NONE

    def require(self, caller: str, *allowed: Role, subject: str | None = None) -> Role:
        """Return the first allowed role the caller holds, else NotAuthorized."""
        for role in allowed:
            if self.holds(caller, role, subject):
                return role
        logger.warning(
            "Access denied: caller=%s required_any=%s",
            caller,
            [r.value for r in allowed],
            extra={"caller": caller},
        )
        raise NotAuthorized()

    def set_admin(self, identity: str, is_admin: bool) -> None:
        self._roles.set_admin(identity, is_admin)

    def transfer_ownership(self, new_owner: str) -> None:
        self._roles.set_owner(new_owner)
