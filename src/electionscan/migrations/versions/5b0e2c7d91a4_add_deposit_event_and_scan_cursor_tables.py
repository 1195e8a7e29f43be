"""Add deposit event and scan cursor tables

Revision ID: 5b0e2c7d91a4
Revises:
Create Date: 2026-10-19 09:12:41.503218

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5b0e2c7d91a4"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "deposit_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chain", sa.String(length=32), nullable=False),
        sa.Column("block_number", sa.Integer(), nullable=False),
        sa.Column(
            "kind",
            sa.Enum("RESERVE", "UNRESERVE", name="depositkind"),
            nullable=False,
        ),
        sa.Column("amount", sa.String(length=78), nullable=False),
        sa.Column("account", sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_deposit_events_chain_block_account_kind",
        "deposit_events",
        ["chain", "block_number", "account", "kind"],
        unique=True,
    )
    op.create_index(
        "ix_deposit_events_chain_account",
        "deposit_events",
        ["chain", "account"],
        unique=False,
    )
    op.create_table(
        "scan_cursors",
        sa.Column("chain", sa.String(length=32), nullable=False),
        sa.Column("block_number", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("chain"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("scan_cursors")
    op.drop_index("ix_deposit_events_chain_account", table_name="deposit_events")
    op.drop_index("ix_deposit_events_chain_block_account_kind", table_name="deposit_events")
    op.drop_table("deposit_events")
