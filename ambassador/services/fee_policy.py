from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from ambassador.core.config import MAX_SUBMISSION_FEE, MIN_SUBMISSION_FEE
from ambassador.models.credential_type import CredentialType, is_elite
from ambassador.services.errors import InsufficientFee, InvalidFee, UnexpectedPayment
from ambassador.services.unit_of_work import record_undo

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class FeeConfig:
    elite_fee: Decimal
    submission_fee: Decimal


class FeePolicy:
    """What a credential costs, and how a payment against it settles."""

    def __init__(self, config: FeeConfig) -> None:
        self._config = config

    @property
    def elite_fee(self) -> Decimal:
        return self._config.elite_fee

    @property
    def submission_fee(self) -> Decimal:
        return self._config.submission_fee

    def required_fee(self, credential_type: CredentialType) -> Decimal:
        return self._config.elite_fee if is_elite(credential_type) else ZERO

    def settle(self, paid: Decimal, required: Decimal) -> Decimal:
        """Validate a payment and return the amount owed back to the caller."""
        if paid < ZERO:
            raise InsufficientFee("payment must not be negative")
        if paid < required:
            raise InsufficientFee(f"payment {paid} below required fee {required}")
        if required == ZERO and paid > ZERO:
            raise UnexpectedPayment()
        return paid - required

    def set_elite_fee(self, fee: Decimal) -> None:
        # Unbounded, but a negative price is never meaningful.
        if fee < ZERO:
            raise InvalidFee("elite fee must not be negative")
        self._set("elite_fee", fee)

    def set_submission_fee(self, fee: Decimal) -> None:
        if not MIN_SUBMISSION_FEE <= fee <= MAX_SUBMISSION_FEE:
            raise InvalidFee(
                f"submission fee must be within "
                f"[{MIN_SUBMISSION_FEE}, {MAX_SUBMISSION_FEE}]"
            )
        self._set("submission_fee", fee)

    def _set(self, field_name: str, fee: Decimal) -> None:
        previous = getattr(self._config, field_name)
        setattr(self._config, field_name, fee)
        record_undo(lambda: setattr(self._config, field_name, previous))
        logger.info("Fee updated %s=%s (was %s)", field_name, fee, previous)
