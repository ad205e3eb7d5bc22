"""create snapshots table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 10:05:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "snapshots",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("note", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_snapshots_id", "snapshots", ["id"], unique=False)
    op.create_index("ix_snapshots_project_id", "snapshots", ["project_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_snapshots_project_id", table_name="snapshots")
    op.drop_index("ix_snapshots_id", table_name="snapshots")
    op.drop_table("snapshots")
