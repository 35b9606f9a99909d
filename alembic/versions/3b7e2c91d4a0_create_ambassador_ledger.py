"""create ambassador ledger tables

Revision ID: 3b7e2c91d4a0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "3b7e2c91d4a0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "applications",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("applicant", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("submitted_at", sa.BigInteger(), nullable=False),
        sa.Column("reviewed_at", sa.BigInteger(), nullable=False),
        sa.Column("reviewed_by", sa.String(length=255), nullable=True),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.Column("data_ref", sa.Text(), nullable=False),
        sa.Column("credential_type", sa.String(length=32), nullable=False),
    )
    op.create_index("ix_applications_applicant", "applications", ["applicant"])

    op.create_table(
        "applicant_history",
        sa.Column("applicant", sa.String(length=255), primary_key=True),
        sa.Column("position", sa.Integer(), primary_key=True),
        sa.Column(
            "application_id",
            sa.BigInteger(),
            sa.ForeignKey("applications.id"),
            nullable=False,
        ),
    )

    op.create_table(
        "ambassadors",
        sa.Column("identity", sa.String(length=255), primary_key=True),
        sa.Column("approved_at", sa.BigInteger(), nullable=False),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("credential_type", sa.String(length=32), nullable=False),
        sa.Column(
            "credential_token_id", sa.BigInteger(), nullable=False, server_default="0"
        ),
    )

    op.create_table(
        "badges",
        sa.Column("token_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("holder", sa.String(length=255), nullable=False),
        sa.Column("credential_type", sa.String(length=32), nullable=False),
        sa.Column("minted_at", sa.BigInteger(), nullable=False),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sa.Column("exists", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_badges_holder", "badges", ["holder"])

    op.create_table(
        "admins",
        sa.Column("identity", sa.String(length=255), primary_key=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "counters",
        sa.Column("name", sa.String(length=64), primary_key=True),
        sa.Column("value", sa.BigInteger(), nullable=False, server_default="0"),
    )

    op.create_table(
        "settings",
        sa.Column("name", sa.String(length=64), primary_key=True),
        sa.Column("text_value", sa.Text(), nullable=True),
        sa.Column("amount_value", sa.Numeric(precision=38, scale=18), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_table("counters")
    op.drop_table("admins")
    op.drop_index("ix_badges_holder", table_name="badges")
    op.drop_table("badges")
    op.drop_table("ambassadors")
    op.drop_table("applicant_history")
    op.drop_index("ix_applications_applicant", table_name="applications")
    op.drop_table("applications")
