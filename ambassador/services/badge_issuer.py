"""Badge issuer: the credential token store.

Token lifecycle is Nonexistent -> Live -> Burned.  Burned is terminal and a
burned token's id is never handed out again.  A holder maps to at most one
live token, so a second mint for the same holder fails until the first
token is burned.

The issuer reports back to the registry through an IssuerListener:

  on_badge_minted  best-effort.  A listener failure is logged and its
                   writes are rolled back, but the mint itself stands.
  on_badge_burned  synchronous.  Burns that did not come from the registry
                   (holder self-burn, expiry sweeps, owner burns) must
                   deactivate the matching ambassador record in the same
                   unit of work, or the two stores would diverge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from ambassador.core.metrics import BADGES_BURNED, BADGES_MINTED, SWEEP_DEACTIVATIONS
from ambassador.models.badge import BadgeInfo
from ambassador.models.credential_type import CredentialType, Tier, tier_of
from ambassador.models.notification import Notification
from ambassador.repos.badge_repo import BadgeRepo
from ambassador.repos.counters import CounterRepo, IdSequence
from ambassador.services.access_control import AccessControl, Role
from ambassador.services.clock import Clock
from ambassador.services.errors import (
    AlreadyHasBadge,
    InvalidBatchSize,
    InvalidExpiration,
    NotAuthorized,
    TokenNotFound,
)
from ambassador.services.fee_policy import FeePolicy
from ambassador.services.treasury import Treasury
from ambassador.services.unit_of_work import UnitOfWork, emit

logger = logging.getLogger(__name__)


class IssuerListener(Protocol):
    def on_badge_minted(
        self,
        caller: str,
        holder: str,
        credential_type: CredentialType,
        token_id: int,
        expires_at: int,
    ) -> None: ...

    def on_badge_burned(self, caller: str, holder: str, token_id: int) -> None: ...


@dataclass(frozen=True, slots=True)
class MintResult:
    token_id: int
    refund: Decimal


def type_counter(credential_type: CredentialType) -> str:
    return f"badges:{credential_type.value}"


class BadgeIssuer:
    def __init__(
        self,
        *,
        badges: BadgeRepo,
        counters: CounterRepo,
        token_ids: IdSequence,
        fees: FeePolicy,
        access: AccessControl,
        treasury: Treasury,
        uow: UnitOfWork,
        clock: Clock,
        max_batch_size: int,
    ) -> None:
        self._badges = badges
        self._counters = counters
        self._token_ids = token_ids
        self._fees = fees
        self._access = access
        self._treasury = treasury
        self._uow = uow
        self._clock = clock
        self._max_batch_size = max_batch_size
        self._listener: IssuerListener | None = None

    @property
    def identity(self) -> str:
        return self._access.issuer_service

    @property
    def treasury(self) -> Treasury:
        return self._treasury

    def attach_listener(self, listener: IssuerListener) -> None:
        self._listener = listener

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def mint(
        self,
        caller: str,
        holder: str,
        credential_type: CredentialType,
        expires_at: int,
        paid: Decimal = Decimal("0"),
    ) -> MintResult:
        self._access.require(caller, Role.ORCHESTRATOR, Role.OWNER)
        with self._uow.atomic(holder):
            now = self._clock()
            if self._badges.token_of(holder):
                raise AlreadyHasBadge()
            if expires_at <= now:
                raise InvalidExpiration()

            required = self._fees.required_fee(credential_type)
            refund = self._fees.settle(paid, required)

            token_id = self._token_ids.next()
            self._badges.add(
                BadgeInfo(
                    token_id=token_id,
                    holder=holder,
                    credential_type=credential_type,
                    minted_at=now,
                    expires_at=expires_at,
                )
            )
            self._counters.increment(type_counter(credential_type))
            self._treasury.collect(required)
            # Orchestrated mints are announced by the registry as
            # ambassador.badge_minted, after the application events.
            if caller != self._access.orchestrator:
                emit(
                    Notification(
                        name="badge.issued",
                        subject=holder,
                        status="live",
                        timestamp=now,
                        token_id=token_id,
                        credential_type=credential_type,
                    )
                )
            self._notify_minted(holder, credential_type, token_id, expires_at)

        BADGES_MINTED.labels(tier=tier_of(credential_type).value).inc()
        logger.info(
            "Badge minted token=%d holder=%s type=%s",
            token_id,
            holder,
            credential_type.value,
            extra={"token_id": token_id, "applicant": holder},
        )
        return MintResult(token_id=token_id, refund=refund)

    def burn(self, caller: str, token_id: int) -> BadgeInfo:
        badge = self._live_badge(token_id)
        with self._uow.atomic(badge.holder):
            badge = self._live_badge(token_id)
            reason = self._authorize_burn(caller, badge)
            self._destroy(badge)
        BADGES_BURNED.labels(reason=reason).inc()
        return badge

    def update_expiration(
        self, caller: str, token_id: int, new_expires_at: int
    ) -> BadgeInfo:
        self._access.require(caller, Role.ORCHESTRATOR)
        badge = self._live_badge(token_id)
        with self._uow.atomic(badge.holder):
            self._live_badge(token_id)
            now = self._clock()
            if new_expires_at <= now:
                raise InvalidExpiration()
            updated = self._badges.update_expiration(token_id, new_expires_at)
            emit(
                Notification(
                    name="badge.expiration_updated",
                    subject=updated.holder,
                    status="live",
                    timestamp=now,
                    token_id=token_id,
                    credential_type=updated.credential_type,
                )
            )
        logger.info(
            "Badge re-dated token=%d expires_at=%d",
            token_id,
            new_expires_at,
            extra={"token_id": token_id},
        )
        return updated

    def sweep_expired(self, token_ids: list[int]) -> list[int]:
        """Burn every listed token that is live and expired.

        Ids that are unknown, already burned, or not yet expired are skipped.
        The batch runs as one unit.  Returns the ids that were burned.
        """
        if len(token_ids) > self._max_batch_size:
            raise InvalidBatchSize(
                f"batch of {len(token_ids)} exceeds cap {self._max_batch_size}"
            )

        holders = set()
        for token_id in token_ids:
            badge = self._badges.get(token_id)
            if badge is not None and badge.exists:
                holders.add(badge.holder)

        burned: list[int] = []
        with self._uow.atomic(*holders):
            now = self._clock()
            for token_id in token_ids:
                badge = self._badges.get(token_id)
                if badge is None or not badge.exists or not badge.is_expired_at(now):
                    continue
                self._destroy(badge)
                burned.append(token_id)

        if burned:
            BADGES_BURNED.labels(reason="sweep").inc(len(burned))
            SWEEP_DEACTIVATIONS.labels(sweep="issuer").inc(len(burned))
            logger.info("Issuer sweep burned tokens=%s", burned)
        return burned

    def withdraw(self, caller: str) -> Decimal:
        self._access.require(caller, Role.OWNER)
        with self._uow.atomic():
            amount = self._treasury.withdraw_all()
            emit(
                Notification(
                    name="treasury.withdrawn",
                    subject=self._treasury.name,
                    status=str(amount),
                    timestamp=self._clock(),
                )
            )
        return amount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_badge(self, token_id: int) -> BadgeInfo:
        badge = self._badges.get(token_id)
        if badge is None:
            raise TokenNotFound()
        return badge

    def holder_token(self, holder: str) -> int:
        return self._badges.token_of(holder)

    def is_expired(self, token_id: int) -> bool:
        return self._live_badge(token_id).is_expired_at(self._clock())

    def tier_of(self, credential_type: CredentialType) -> Tier:
        return tier_of(credential_type)

    def count_of(self, credential_type: CredentialType) -> int:
        return self._counters.get(type_counter(credential_type))

    def next_token_id(self) -> int:
        return self._token_ids.peek()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _live_badge(self, token_id: int) -> BadgeInfo:
        badge = self._badges.get(token_id)
        if badge is None or not badge.exists:
            raise TokenNotFound()
        return badge

    def _authorize_burn(self, caller: str, badge: BadgeInfo) -> str:
        if self._access.holds(caller, Role.OWNER):
            return "owner"
        if self._access.holds(caller, Role.ORCHESTRATOR):
            return "orchestrator"
        if self._access.holds(caller, Role.SELF, subject=badge.holder):
            if badge.is_expired_at(self._clock()):
                return "self"
            logger.warning(
                "Self-burn refused before expiry token=%d holder=%s",
                badge.token_id,
                badge.holder,
                extra={"token_id": badge.token_id},
            )
        raise NotAuthorized()

    def _destroy(self, badge: BadgeInfo) -> None:
        self._badges.destroy(badge.token_id)
        self._counters.decrement(type_counter(badge.credential_type))
        emit(
            Notification(
                name="badge.burned",
                subject=badge.holder,
                status="burned",
                timestamp=self._clock(),
                token_id=badge.token_id,
                credential_type=badge.credential_type,
            )
        )
        if self._listener is not None:
            self._listener.on_badge_burned(self.identity, badge.holder, badge.token_id)

    def _notify_minted(
        self,
        holder: str,
        credential_type: CredentialType,
        token_id: int,
        expires_at: int,
    ) -> None:
        if self._listener is None:
            return
        try:
            with self._uow.atomic(holder):
                self._listener.on_badge_minted(
                    self.identity, holder, credential_type, token_id, expires_at
                )
        except Exception:
            logger.exception(
                "Registry notification failed after mint token=%d holder=%s",
                token_id,
                holder,
                extra={"token_id": token_id, "applicant": holder},
            )
