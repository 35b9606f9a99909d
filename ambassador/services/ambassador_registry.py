"""Ambassador registry: the orchestrator of the program.

The registry owns AmbassadorInfo and coordinates every operation that must
keep it in step with the badge issuer.  The rule it maintains:

    while a record is active and holds a token, the token's expiration
    equals the record's expiration

Every operation below runs in one unit of work that spans the ledger, the
registry and the issuer, so a failure anywhere (a rejected payment, a
holder that already has a badge) leaves nothing behind: no application
row, no token, no record, no fee collected.

Submission with issuance:

  1. validate the data reference
  2. price the credential type and validate the payment
  3. record an auto-approved application expiring now + duration
  4. mint the badge, forwarding the required fee to the issuer
  5. compute the refund of any overpayment
  6. write the ambassador record
  7. emit application.submitted, application.approved,
     ambassador.activated, ambassador.badge_minted

The refund is only returned once the unit has committed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from decimal import Decimal

from ambassador.core.config import (
    MAX_DURATION_DAYS,
    MIN_DURATION_DAYS,
    SECONDS_PER_DAY,
)
from ambassador.core.metrics import ADMIN_ACTIONS, APPLICATIONS_SUBMITTED
from ambassador.models.ambassador import AmbassadorInfo
from ambassador.models.application import Application
from ambassador.models.credential_type import (
    DEFAULT_CREDENTIAL_TYPE,
    CredentialType,
    category_of,
)
from ambassador.models.notification import Notification
from ambassador.repos.ambassador_repo import AmbassadorRepo
from ambassador.services.access_control import AccessControl, Role
from ambassador.services.application_ledger import ApplicationLedger
from ambassador.services.badge_issuer import BadgeIssuer
from ambassador.services.clock import Clock
from ambassador.services.errors import (
    DataRequired,
    InsufficientFee,
    InvalidDuration,
    NotAnActiveAmbassador,
    NotAuthorized,
)
from ambassador.services.fee_policy import FeePolicy
from ambassador.services.treasury import Treasury
from ambassador.services.unit_of_work import UnitOfWork, emit, record_undo

logger = logging.getLogger(__name__)

_CONFIG_KEY = "config"


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    application: Application
    ambassador: AmbassadorInfo | None
    refund: Decimal

    @property
    def token_id(self) -> int:
        return self.ambassador.credential_token_id if self.ambassador else 0


@dataclass(frozen=True, slots=True)
class ProgramStats:
    total_submitted: int
    total_approved: int
    next_application_id: int
    next_token_id: int
    live_badges_by_type: dict[str, int]


class AmbassadorRegistry:
    def __init__(
        self,
        *,
        ambassadors: AmbassadorRepo,
        ledger: ApplicationLedger,
        issuer: BadgeIssuer,
        fees: FeePolicy,
        access: AccessControl,
        treasury: Treasury,
        uow: UnitOfWork,
        clock: Clock,
        duration_seconds: int,
    ) -> None:
        self._ambassadors = ambassadors
        self._ledger = ledger
        self._issuer = issuer
        self._fees = fees
        self._access = access
        self._treasury = treasury
        self._uow = uow
        self._clock = clock
        self._duration_seconds = duration_seconds
        # Holders whose badge is being minted by submit_with_issuance; the
        # mint callback leaves their record to step 6.
        self._issuing: set[str] = set()
        self._issuing_lock = threading.Lock()
        issuer.attach_listener(self)

    @property
    def identity(self) -> str:
        return self._access.orchestrator

    @property
    def duration_seconds(self) -> int:
        return self._duration_seconds

    @property
    def treasury(self) -> Treasury:
        return self._treasury

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_with_issuance(
        self,
        caller: str,
        category: str,
        data_ref: str,
        credential_type: CredentialType,
        paid: Decimal = Decimal("0"),
    ) -> SubmissionResult:
        if not data_ref or not data_ref.strip():
            raise DataRequired()

        required = self._fees.required_fee(credential_type)
        self._fees.settle(paid, required)

        with self._uow.atomic(caller):
            now = self._clock()
            expires_at = now + self._duration_seconds
            application = self._ledger.submit(
                caller,
                category,
                data_ref,
                credential_type=credential_type,
                expires_at=expires_at,
            )

            self._mark_issuing(caller, True)
            try:
                minted = self._issuer.mint(
                    self.identity, caller, credential_type, expires_at, required
                )
            finally:
                self._mark_issuing(caller, False)

            refund = paid - required

            info = AmbassadorInfo(
                identity=caller,
                approved_at=now,
                expires_at=expires_at,
                is_active=True,
                category=category,
                credential_type=credential_type,
                credential_token_id=minted.token_id,
            )
            self._ambassadors.put(info)

            emit(_application_event("application.submitted", application, now))
            emit(_application_event("application.approved", application, now))
            emit(_ambassador_event("ambassador.activated", info, now))
            emit(_ambassador_event("ambassador.badge_minted", info, now))

        APPLICATIONS_SUBMITTED.labels(path="issuance").inc()
        logger.info(
            "Ambassador activated identity=%s token=%d type=%s refund=%s",
            caller,
            minted.token_id,
            credential_type.value,
            refund,
            extra={
                "applicant": caller,
                "application_id": application.id,
                "token_id": minted.token_id,
                "credential_type": credential_type.value,
            },
        )
        return SubmissionResult(application=application, ambassador=info, refund=refund)

    def submit_application(
        self,
        caller: str,
        category: str,
        data_ref: str,
        paid: Decimal = Decimal("0"),
    ) -> SubmissionResult:
        """Manual submission path, kept for existing integrations.

        Charges the submission fee and records an approved application
        with the default credential type.  It never mints a badge or
        activates an ambassador record.
        """
        logger.warning(
            "Deprecated manual submission used by applicant=%s",
            caller,
            extra={"applicant": caller},
        )
        if not data_ref or not data_ref.strip():
            raise DataRequired()
        fee = self._fees.submission_fee
        if paid < fee:
            raise InsufficientFee(f"payment {paid} below submission fee {fee}")

        with self._uow.atomic(caller):
            now = self._clock()
            application = self._ledger.submit(
                caller,
                category,
                data_ref,
                credential_type=DEFAULT_CREDENTIAL_TYPE,
                expires_at=now + self._duration_seconds,
            )
            self._treasury.collect(fee)
            emit(_application_event("application.submitted", application, now))
            emit(_application_event("application.approved", application, now))

        APPLICATIONS_SUBMITTED.labels(path="manual").inc()
        return SubmissionResult(
            application=application, ambassador=None, refund=paid - fee
        )

    # ------------------------------------------------------------------
    # Issuer callbacks
    # ------------------------------------------------------------------

    def on_badge_minted(
        self,
        caller: str,
        holder: str,
        credential_type: CredentialType,
        token_id: int,
        expires_at: int,
    ) -> None:
        """Create a record for a badge minted outside submit_with_issuance.

        Idempotent: an identity that is already active is left untouched.
        """
        self._access.require(caller, Role.ISSUER_SERVICE)
        with self._uow.atomic(holder):
            if self._is_issuing(holder):
                return
            existing = self._ambassadors.get(holder)
            if existing is not None and existing.is_active:
                logger.debug("Mint callback ignored; %s already active", holder)
                return
            now = self._clock()
            info = AmbassadorInfo(
                identity=holder,
                approved_at=now,
                expires_at=expires_at,
                is_active=True,
                category=category_of(credential_type).value,
                credential_type=credential_type,
                credential_token_id=token_id,
            )
            self._ambassadors.put(info)
            emit(_ambassador_event("ambassador.activated", info, now))
        logger.info(
            "Ambassador registered from issuer identity=%s token=%d",
            holder,
            token_id,
            extra={"ambassador": holder, "token_id": token_id},
        )

    def on_badge_burned(self, caller: str, holder: str, token_id: int) -> None:
        """Deactivate the record that still points at a burned token."""
        self._access.require(caller, Role.ISSUER_SERVICE)
        with self._uow.atomic(holder):
            info = self._ambassadors.get(holder)
            if info is None or info.credential_token_id != token_id:
                return
            now = self._clock()
            deactivated = replace(
                info,
                is_active=False,
                expires_at=min(info.expires_at, now),
                credential_token_id=0,
            )
            self._ambassadors.put(deactivated)
            emit(_ambassador_event("ambassador.deactivated", deactivated, now))

    # ------------------------------------------------------------------
    # Admin actions
    # ------------------------------------------------------------------

    def revoke(self, caller: str, ambassador: str) -> AmbassadorInfo:
        self._access.require(caller, Role.ADMIN)
        with self._uow.atomic(ambassador):
            info = self._require_active(ambassador)
            now = self._clock()
            token_id = info.credential_token_id
            revoked = replace(info, is_active=False, expires_at=now, credential_token_id=0)
            self._ambassadors.put(revoked)
            emit(_ambassador_event("ambassador.revoked", revoked, now))
            if token_id > 0:
                self._issuer.burn(self.identity, token_id)
                emit(
                    Notification(
                        name="ambassador.badge_burned",
                        subject=ambassador,
                        status="burned",
                        timestamp=now,
                        token_id=token_id,
                        credential_type=info.credential_type,
                    )
                )

        ADMIN_ACTIONS.labels(action="revoke").inc()
        logger.info(
            "Ambassador revoked identity=%s by=%s token=%d",
            ambassador,
            caller,
            token_id,
            extra={"ambassador": ambassador, "caller": caller, "token_id": token_id},
        )
        return revoked

    def extend(self, caller: str, ambassador: str, additional_seconds: int) -> AmbassadorInfo:
        """Push the expiration out by ``additional_seconds``.

        A lapsed record that no sweep has deactivated yet can be extended,
        but only if the new expiration lands in the future; otherwise
        InvalidDuration and nothing changes.
        """
        self._access.require(caller, Role.ADMIN)
        if additional_seconds <= 0:
            raise InvalidDuration("extension must be positive")
        with self._uow.atomic(ambassador):
            info = self._require_active(ambassador)
            extended = self._redate(info, info.expires_at + additional_seconds)
            emit(_ambassador_event("ambassador.extended", extended, self._clock()))

        ADMIN_ACTIONS.labels(action="extend").inc()
        logger.info(
            "Ambassador extended identity=%s by=%ds expires_at=%d",
            ambassador,
            additional_seconds,
            extended.expires_at,
            extra={"ambassador": ambassador, "caller": caller},
        )
        return extended

    def reschedule(self, caller: str, ambassador: str, new_expires_at: int) -> AmbassadorInfo:
        self._access.require(caller, Role.ADMIN)
        with self._uow.atomic(ambassador):
            info = self._require_active(ambassador)
            rescheduled = self._redate(info, new_expires_at)
            emit(_ambassador_event("ambassador.rescheduled", rescheduled, self._clock()))

        ADMIN_ACTIONS.labels(action="reschedule").inc()
        logger.info(
            "Ambassador rescheduled identity=%s expires_at=%d",
            ambassador,
            new_expires_at,
            extra={"ambassador": ambassador, "caller": caller},
        )
        return rescheduled

    def burn_own_expired(self, caller: str) -> AmbassadorInfo:
        """Let an ambassador whose term has ended burn their own badge."""
        with self._uow.atomic(caller):
            info = self._ambassadors.get(caller)
            if info is None or not info.is_active or not info.has_live_token():
                raise NotAnActiveAmbassador()
            now = self._clock()
            if now < info.expires_at:
                raise NotAuthorized("badge has not expired yet")
            deactivated = replace(info, is_active=False, credential_token_id=0)
            self._ambassadors.put(deactivated)
            self._issuer.burn(caller, info.credential_token_id)
            emit(_ambassador_event("ambassador.deactivated", deactivated, now))
        return deactivated

    def deactivate_expired(self, identity: str) -> bool:
        """Deactivate and burn one expired record.  Used by maintenance
        sweeps inside their own unit of work; returns False when the record
        does not qualify."""
        info = self._ambassadors.get(identity)
        now = self._clock()
        if (
            info is None
            or not info.is_active
            or now < info.expires_at
            or not info.has_live_token()
        ):
            return False
        token_id = info.credential_token_id
        deactivated = replace(info, is_active=False, credential_token_id=0)
        self._ambassadors.put(deactivated)
        self._issuer.burn(self.identity, token_id)
        emit(_ambassador_event("ambassador.deactivated", deactivated, now))
        emit(
            Notification(
                name="ambassador.badge_burned",
                subject=identity,
                status="burned",
                timestamp=now,
                token_id=token_id,
                credential_type=info.credential_type,
            )
        )
        return True

    # ------------------------------------------------------------------
    # Owner configuration
    # ------------------------------------------------------------------

    def set_duration(self, caller: str, duration_seconds: int) -> None:
        self._access.require(caller, Role.OWNER)
        low = MIN_DURATION_DAYS * SECONDS_PER_DAY
        high = MAX_DURATION_DAYS * SECONDS_PER_DAY
        if not low <= duration_seconds <= high:
            raise InvalidDuration(
                f"duration must be within [{MIN_DURATION_DAYS}d, {MAX_DURATION_DAYS}d]"
            )
        with self._uow.atomic(_CONFIG_KEY):
            previous = self._duration_seconds
            self._duration_seconds = duration_seconds
            record_undo(lambda: setattr(self, "_duration_seconds", previous))
            emit(
                Notification(
                    name="config.duration_updated",
                    subject=_CONFIG_KEY,
                    status=str(duration_seconds),
                    timestamp=self._clock(),
                )
            )
        logger.info("Duration updated seconds=%d (was %d)", duration_seconds, previous)

    def set_submission_fee(self, caller: str, fee: Decimal) -> None:
        self._access.require(caller, Role.OWNER)
        with self._uow.atomic(_CONFIG_KEY):
            self._fees.set_submission_fee(fee)
            emit(_config_event("config.submission_fee_updated", str(fee), self._clock()))

    def set_elite_fee(self, caller: str, fee: Decimal) -> None:
        self._access.require(caller, Role.OWNER)
        with self._uow.atomic(_CONFIG_KEY):
            self._fees.set_elite_fee(fee)
            emit(_config_event("config.elite_fee_updated", str(fee), self._clock()))

    def set_admin(self, caller: str, identity: str, is_admin: bool) -> None:
        self._access.require(caller, Role.OWNER)
        with self._uow.atomic(_CONFIG_KEY):
            self._access.set_admin(identity, is_admin)
            emit(
                Notification(
                    name="access.admin_updated",
                    subject=identity,
                    status="admin" if is_admin else "revoked",
                    timestamp=self._clock(),
                )
            )
        logger.info("Admin flag set identity=%s is_admin=%s", identity, is_admin)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._access.require(caller, Role.OWNER)
        if not new_owner or not new_owner.strip():
            raise ValueError("new owner must be non-empty")
        with self._uow.atomic(_CONFIG_KEY):
            self._access.transfer_ownership(new_owner)
            emit(
                Notification(
                    name="access.ownership_transferred",
                    subject=new_owner,
                    status="owner",
                    timestamp=self._clock(),
                )
            )
        logger.info("Ownership transferred from=%s to=%s", caller, new_owner)

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

    def get_application(self, application_id: int) -> Application:
        return self._ledger.get(application_id)

    def history_of(self, applicant: str) -> list[int]:
        return self._ledger.history_of(applicant)

    def get_ambassador_info(self, identity: str) -> AmbassadorInfo | None:
        return self._ambassadors.get(identity)

    def is_active_ambassador(self, identity: str) -> bool:
        """Pure read: an expired record still marked active reads False
        here, but stays active until a sweep or revoke deactivates it."""
        info = self._ambassadors.get(identity)
        return info is not None and info.is_active_at(self._clock())

    def stats(self) -> ProgramStats:
        submitted, approved = self._ledger.totals()
        return ProgramStats(
            total_submitted=submitted,
            total_approved=approved,
            next_application_id=self._ledger.next_application_id(),
            next_token_id=self._issuer.next_token_id(),
            live_badges_by_type={
                t.value: self._issuer.count_of(t) for t in CredentialType
            },
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_active(self, identity: str) -> AmbassadorInfo:
        info = self._ambassadors.get(identity)
        if info is None or not info.is_active:
            raise NotAnActiveAmbassador()
        return info

    def _redate(self, info: AmbassadorInfo, new_expires_at: int) -> AmbassadorInfo:
        if new_expires_at <= self._clock():
            raise InvalidDuration("new expiration must be in the future")
        updated = replace(info, expires_at=new_expires_at)
        self._ambassadors.put(updated)
        if info.has_live_token():
            self._issuer.update_expiration(
                self.identity, info.credential_token_id, new_expires_at
            )
        return updated

    def _mark_issuing(self, holder: str, issuing: bool) -> None:
        with self._issuing_lock:
            if issuing:
                self._issuing.add(holder)
            else:
                self._issuing.discard(holder)

    def _is_issuing(self, holder: str) -> bool:
        with self._issuing_lock:
            return holder in self._issuing


def _application_event(name: str, application: Application, now: int) -> Notification:
    return Notification(
        name=name,
        subject=str(application.id),
        status=application.status.value,
        timestamp=now,
        credential_type=application.credential_type,
    )


def _ambassador_event(name: str, info: AmbassadorInfo, now: int) -> Notification:
    return Notification(
        name=name,
        subject=info.identity,
        status="active" if info.is_active else "inactive",
        timestamp=now,
        token_id=info.credential_token_id or None,
        credential_type=info.credential_type,
    )


def _config_event(name: str, value: str, now: int) -> Notification:
    return Notification(name=name, subject=_CONFIG_KEY, status=value, timestamp=now)
