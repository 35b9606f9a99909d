"""SQLAlchemy tables for the persisted ledger layout.

Four keyed tables (applications, ambassadors, badges, admins) plus the
applicant history index, the process-wide counters and the configuration
scalars.  Domain models in ambassador/models stay frozen dataclasses; these
rows are the storage shape.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from ambassador.db.engine import Base

# Amounts are native-currency units with 18 decimal places.
_AMOUNT = Numeric(precision=38, scale=18)


class ApplicationRow(Base):
    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    applicant: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)  # approved|expired
    submitted_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reviewed_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reviewed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    data_ref: Mapped[str] = mapped_column(Text, nullable=False)
    credential_type: Mapped[str] = mapped_column(String(32), nullable=False)


class ApplicantHistoryRow(Base):
    __tablename__ = "applicant_history"

    applicant: Mapped[str] = mapped_column(String(255), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    application_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("applications.id"), nullable=False
    )


class AmbassadorRow(Base):
    __tablename__ = "ambassadors"

    identity: Mapped[str] = mapped_column(String(255), primary_key=True)
    approved_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    credential_type: Mapped[str] = mapped_column(String(32), nullable=False)
    # 0 means no live token.
    credential_token_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class BadgeRow(Base):
    __tablename__ = "badges"

    token_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    holder: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    credential_type: Mapped[str] = mapped_column(String(32), nullable=False)
    minted_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expires_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    exists: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class AdminRow(Base):
    __tablename__ = "admins"

    identity: Mapped[str] = mapped_column(String(255), primary_key=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class CounterRow(Base):
    """Next application id, next token id, totals and per-type live counts."""

    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class SettingRow(Base):
    """Configuration scalars: duration, fees, owner, treasury balances."""

    __tablename__ = "settings"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    text_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount_value: Mapped[Decimal | None] = mapped_column(_AMOUNT, nullable=True)
