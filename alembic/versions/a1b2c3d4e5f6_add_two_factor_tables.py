"""Add two-factor authentication tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 12:00:00.000000

This migration adds:
- two_factor_auth table, one row per owner with 2FA enabled
- recovery_codes table, one row per unused recovery code digest
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "two_factor_auth",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("secret", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_two_factor_auth_id", "two_factor_auth", ["id"], unique=False)
    op.create_index("ix_two_factor_auth_owner_id", "two_factor_auth", ["owner_id"], unique=True)

    op.create_table(
        "recovery_codes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("code_hash", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["two_factor_auth.owner_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "code_hash", name="uq_recovery_codes_owner_hash"),
    )
    op.create_index("ix_recovery_codes_owner_id", "recovery_codes", ["owner_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_recovery_codes_owner_id", table_name="recovery_codes")
    op.drop_table("recovery_codes")
    op.drop_index("ix_two_factor_auth_owner_id", table_name="two_factor_auth")
    op.drop_index("ix_two_factor_auth_id", table_name="two_factor_auth")
    op.drop_table("two_factor_auth")
