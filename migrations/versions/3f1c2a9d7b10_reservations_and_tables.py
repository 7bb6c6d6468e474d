"""reservations and tables

Revision ID: 3f1c2a9d7b10
Revises: 
Create Date: 2026-10-18 10:12:04.481920

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("mobile_number", sa.String(32), nullable=False),
        sa.Column("reservation_date", sa.Date(), nullable=False),
        sa.Column("reservation_time", sa.Time(), nullable=False),
        sa.Column("people", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="booked"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("people > 0", name="ck_reservations_people_positive"),
        sa.CheckConstraint(
            "status IN ('booked', 'seated', 'finished', 'cancelled')",
            name="ck_reservations_status",
        ),
    )
    op.create_index("ix_reservations_reservation_date", "reservations", ["reservation_date"])

    op.create_table(
        "tables",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey("reservations.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("capacity > 0", name="ck_tables_capacity_positive"),
    )
    # A reservation sits at one table at most.
    op.create_index("ux_tables_reservation_id", "tables", ["reservation_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ux_tables_reservation_id", table_name="tables")
    op.drop_table("tables")
    op.drop_index("ix_reservations_reservation_date", table_name="reservations")
    op.drop_table("reservations")
