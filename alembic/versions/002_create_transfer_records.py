"""Create transfer_records table

Revision ID: 002
Revises: 001
Create Date: 2026-03-02 00:10:00.000000

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Append-only audit log, one row per computed tax
    op.create_table(
        "transfer_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("vehicle_id", sa.String(), nullable=False),
        sa.Column("region", sa.String(), nullable=False),
        sa.Column("applied_rate", sa.Numeric(6, 5), nullable=False),
        sa.Column("computed_tax", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_resident", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_transfer_records_vehicle_id"),
        "transfer_records",
        ["vehicle_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_transfer_records_vehicle_id"), table_name="transfer_records")
    op.drop_table("transfer_records")
