from __future__ import annotations

from decimal import Decimal

import pytest

from ambassador.models.credential_type import CredentialType
from ambassador.services.errors import (
    InsufficientFee,
    InvalidFee,
    NoFundsToWithdraw,
    UnexpectedPayment,
)
from ambassador.services.fee_policy import FeeConfig, FeePolicy
from ambassador.services.treasury import Treasury


@pytest.fixture
def fees() -> FeePolicy:
    return FeePolicy(FeeConfig(elite_fee=Decimal("0.01"), submission_fee=Decimal("0.001")))


def test_standard_types_are_free(fees: FeePolicy) -> None:
    assert fees.required_fee(CredentialType.CONTENT_STANDARD) == 0


def test_elite_types_cost_the_elite_fee(fees: FeePolicy) -> None:
    assert fees.required_fee(CredentialType.EVENTS_ELITE) == Decimal("0.01")


def test_exact_payment_has_no_refund(fees: FeePolicy) -> None:
    assert fees.settle(Decimal("0.01"), Decimal("0.01")) == 0


def test_overpayment_is_refunded(fees: FeePolicy) -> None:
    assert fees.settle(Decimal("0.015"), Decimal("0.01")) == Decimal("0.005")


def test_underpayment_is_rejected(fees: FeePolicy) -> None:
    with pytest.raises(InsufficientFee):
        fees.settle(Decimal("0.005"), Decimal("0.01"))


def test_negative_payment_is_rejected(fees: FeePolicy) -> None:
    with pytest.raises(InsufficientFee):
        fees.settle(Decimal("-1"), Decimal("0"))


def test_payment_for_free_type_is_rejected(fees: FeePolicy) -> None:
    with pytest.raises(UnexpectedPayment):
        fees.settle(Decimal("0.001"), Decimal("0"))


def test_nothing_paid_for_free_type(fees: FeePolicy) -> None:
    assert fees.settle(Decimal("0"), Decimal("0")) == 0


# ---- setters ----


def test_elite_fee_can_be_zero(fees: FeePolicy) -> None:
    fees.set_elite_fee(Decimal("0"))
    assert fees.required_fee(CredentialType.EVENTS_ELITE) == 0


def test_elite_fee_rejects_negative(fees: FeePolicy) -> None:
    with pytest.raises(InvalidFee):
        fees.set_elite_fee(Decimal("-0.01"))
    assert fees.elite_fee == Decimal("0.01")


@pytest.mark.parametrize("fee", ["0.0001", "0.05", "0.1"])
def test_submission_fee_accepts_bounds(fees: FeePolicy, fee: str) -> None:
    fees.set_submission_fee(Decimal(fee))
    assert fees.submission_fee == Decimal(fee)


@pytest.mark.parametrize("fee", ["0", "0.00009", "0.11"])
def test_submission_fee_rejects_out_of_range(fees: FeePolicy, fee: str) -> None:
    with pytest.raises(InvalidFee, match="within"):
        fees.set_submission_fee(Decimal(fee))


# ---- treasury ----


def test_treasury_collects_and_withdraws() -> None:
    treasury = Treasury("issuer")
    treasury.collect(Decimal("0.01"))
    treasury.collect(Decimal("0.02"))
    treasury.collect(Decimal("0"))
    assert treasury.withdraw_all() == Decimal("0.03")
    assert treasury.balance == 0


def test_empty_treasury_cannot_be_withdrawn() -> None:
    with pytest.raises(NoFundsToWithdraw):
        Treasury("registry").withdraw_all()
