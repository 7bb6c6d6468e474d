"""seed default tables

Revision ID: 7a0e54c1d2b3
Revises: 3f1c2a9d7b10
Create Date: 2026-10-18 10:20:41.907155

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7a0e54c1d2b3'
down_revision: Union[str, None] = '3f1c2a9d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_TABLES = [
    {"name": "Bar #1", "capacity": 1},
    {"name": "Bar #2", "capacity": 1},
    {"name": "#1", "capacity": 6},
    {"name": "#2", "capacity": 6},
]


def upgrade() -> None:
    tables = sa.table(
        "tables",
        sa.column("name", sa.String),
        sa.column("capacity", sa.Integer),
    )
    op.bulk_insert(tables, DEFAULT_TABLES)


def downgrade() -> None:
    op.execute(
        sa.text("DELETE FROM tables WHERE name IN :names").bindparams(
            sa.bindparam("names", [t["name"] for t in DEFAULT_TABLES], expanding=True)
        )
    )
