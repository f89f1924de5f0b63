"""Create reference entity tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Adds:
  heroes, items, abilities — natural key steam_id (Steam's `id`)
  leagues                  — natural key leagueid

Every table keeps its own autoincrement `id`; the natural key gets a unique
index so reconciliation can never create a second row for the same entity.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "heroes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("steam_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("localized_name", sa.String(64), nullable=True),
    )
    op.create_index("ix_heroes_steam_id", "heroes", ["steam_id"], unique=True)

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("steam_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("localized_name", sa.String(128), nullable=True),
        sa.Column("cost", sa.Integer(), nullable=True),
        sa.Column("secret_shop", sa.Integer(), nullable=True),  # 0 or 1
        sa.Column("side_shop", sa.Integer(), nullable=True),    # 0 or 1
        sa.Column("recipe", sa.Integer(), nullable=True),       # 0 or 1
    )
    op.create_index("ix_items_steam_id", "items", ["steam_id"], unique=True)

    op.create_table(
        "abilities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("steam_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
    )
    op.create_index("ix_abilities_steam_id", "abilities", ["steam_id"], unique=True)

    op.create_table(
        "leagues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("leagueid", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tournament_url", sa.String(255), nullable=True),
        sa.Column("itemdef", sa.Integer(), nullable=True),
    )
    op.create_index("ix_leagues_leagueid", "leagues", ["leagueid"], unique=True)


def downgrade() -> None:
    for table, column in [
        ("leagues", "leagueid"),
        ("abilities", "steam_id"),
        ("items", "steam_id"),
        ("heroes", "steam_id"),
    ]:
        op.drop_index(f"ix_{table}_{column}", table_name=table)
        op.drop_table(table)
