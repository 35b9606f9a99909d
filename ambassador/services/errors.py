"""Business errors raised by the ambassador program.

Every error here is terminal for the attempted call: the enclosing unit of
work rolls back and the caller must resubmit with corrected input.  None of
them describe a transient failure, so nothing retries them.
"""

from __future__ import annotations


class AmbassadorError(Exception):
    """Base class.  ``code`` is the stable, caller-visible error name."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    default_message = "operation rejected"

    @property
    def code(self) -> str:
        return type(self).__name__


class ApplicationNotFound(AmbassadorError):
    default_message = "application not found"


class AlreadyHasBadge(AmbassadorError):
    default_message = "holder already has a live badge"


class InvalidExpiration(AmbassadorError):
    default_message = "expiration must be in the future"


class InvalidDuration(AmbassadorError):
    default_message = "duration out of range"


class InvalidFee(AmbassadorError):
    default_message = "fee out of range"


class InsufficientFee(AmbassadorError):
    default_message = "payment below required fee"


class UnexpectedPayment(AmbassadorError):
    default_message = "payment sent for a free credential"


class NotAnActiveAmbassador(AmbassadorError):
    default_message = "identity is not an active ambassador"


class NotAuthorized(AmbassadorError):
    default_message = "caller is not authorized for this operation"


class InvalidBatchSize(AmbassadorError):
    default_message = "batch size exceeds the configured cap"


class DataRequired(AmbassadorError):
    default_message = "application data reference is required"


class TokenNotFound(AmbassadorError):
    default_message = "token not found"


class NoFundsToWithdraw(AmbassadorError):
    default_message = "no funds to withdraw"
