"""Create the bundle snapshot table.

Revision ID: 20261019_create_bundle_snapshots
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

from bundle_analyser.config import settings


# revision identifiers, used by Alembic.
revision = "20261019_create_bundle_snapshots"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    table = settings.snapshot_table

    if table not in set(inspector.get_table_names()):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("date", sa.DateTime(), nullable=False),
            sa.Column("sizes", sa.JSON(), nullable=False),
        )
        op.create_index(f"ix_{table}_date", table, ["date"], unique=False)


def downgrade() -> None:
    table = settings.snapshot_table
    op.drop_index(f"ix_{table}_date", table_name=table)
    op.drop_table(table)
