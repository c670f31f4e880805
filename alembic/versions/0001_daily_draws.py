"""participants, population bounds and daily draws

Revision ID: 0001_daily_draws
Revises:
Create Date: 2024-06-01 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_daily_draws"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BIG_INT = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "participants",
        sa.Column("participant_id", sa.String(length=128), nullable=False),
        sa.Column("created_at", BIG_INT, nullable=False),
        sa.PrimaryKeyConstraint("participant_id", name=op.f("participants_pkey")),
    )
    op.create_table(
        "population_bounds",
        sa.Column("day_key", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("population", BIG_INT, nullable=False),
        sa.CheckConstraint(
            "population > 0", name=op.f("population_bounds_population_positive_check")
        ),
        sa.PrimaryKeyConstraint("day_key", name=op.f("population_bounds_pkey")),
    )
    op.create_table(
        "draws",
        sa.Column("participant_id", sa.String(length=128), nullable=False),
        sa.Column("day_key", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("value", BIG_INT, nullable=False),
        sa.Column("created_at", BIG_INT, nullable=False),
        sa.CheckConstraint("value > 0", name=op.f("draws_value_positive_check")),
        sa.ForeignKeyConstraint(
            ["participant_id"],
            ["participants.participant_id"],
            name=op.f("draws_participant_id_fkey"),
        ),
        sa.PrimaryKeyConstraint("participant_id", "day_key", name=op.f("draws_pkey")),
    )
    op.create_index("idx_draws_day_value", "draws", ["day_key", "value"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_draws_day_value", table_name="draws")
    op.drop_table("draws")
    op.drop_table("population_bounds")
    op.drop_table("participants")
