"""Add matches and live_league_matches tables.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-17

Adds:
  matches             — league matches from GetMatchHistoryBySequenceNum.
                        match_seq_num is unique; max(match_seq_num) is the
                        ingestion cursor, so it also gets an index.
  live_league_matches — last live snapshot of league games that finished,
                        one row per match_id.

Both tables are append-only.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "matches",
        sa.Column("match_id", sa.BigInteger(), primary_key=True),
        sa.Column("match_seq_num", sa.BigInteger(), nullable=False),
        sa.Column("league_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("radiant_win", sa.Boolean(), nullable=True),
        sa.Column("lobby_type", sa.Integer(), nullable=True),
        sa.Column("game_mode", sa.Integer(), nullable=True),
        sa.Column("human_players", sa.Integer(), nullable=True),
        sa.Column("cluster", sa.Integer(), nullable=True),
        sa.Column("first_blood_time", sa.Integer(), nullable=True),
        sa.Column("tower_status_radiant", sa.Integer(), nullable=True),
        sa.Column("tower_status_dire", sa.Integer(), nullable=True),
        sa.Column("barracks_status_radiant", sa.Integer(), nullable=True),
        sa.Column("barracks_status_dire", sa.Integer(), nullable=True),
        sa.Column("radiant_score", sa.Integer(), nullable=True),
        sa.Column("dire_score", sa.Integer(), nullable=True),
        sa.Column("players", sa.JSON(), nullable=True),
        sa.Column("picks_bans", sa.JSON(), nullable=True),
    )
    op.create_index("ix_matches_match_seq_num", "matches", ["match_seq_num"], unique=True)
    op.create_index("ix_matches_league_id", "matches", ["league_id"])

    op.create_table(
        "live_league_matches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("match_id", sa.BigInteger(), nullable=False),
        sa.Column("league_id", sa.Integer(), nullable=True),
        sa.Column("lobby_id", sa.BigInteger(), nullable=True),
        sa.Column("series_id", sa.Integer(), nullable=True),
        sa.Column("series_type", sa.Integer(), nullable=True),
        sa.Column("game_number", sa.Integer(), nullable=True),
        sa.Column("radiant_series_wins", sa.Integer(), nullable=True),
        sa.Column("dire_series_wins", sa.Integer(), nullable=True),
        sa.Column("spectators", sa.Integer(), nullable=True),
        sa.Column("stream_delay_s", sa.Integer(), nullable=True),
        sa.Column("radiant_team", sa.JSON(), nullable=True),
        sa.Column("dire_team", sa.JSON(), nullable=True),
        sa.Column("players", sa.JSON(), nullable=True),
        sa.Column("scoreboard", sa.JSON(), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_live_league_matches_match_id", "live_league_matches", ["match_id"], unique=True
    )
    op.create_index("ix_live_league_matches_league_id", "live_league_matches", ["league_id"])


def downgrade() -> None:
    op.drop_index("ix_live_league_matches_league_id", table_name="live_league_matches")
    op.drop_index("ix_live_league_matches_match_id", table_name="live_league_matches")
    op.drop_table("live_league_matches")
    op.drop_index("ix_matches_league_id", table_name="matches")
    op.drop_index("ix_matches_match_seq_num", table_name="matches")
    op.drop_table("matches")
