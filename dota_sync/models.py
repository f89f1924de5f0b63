"""
models.py — All SQLAlchemy ORM models for dota-sync.

Importing this module registers all models with Base (from database.py),
so Alembic can detect the full schema via Base.metadata.

Reference entities (Hero, Item, Ability, League) carry two identifiers:
a storage-assigned `id` and the natural key handed out by Steam
(`steam_id` or `leagueid`).  Reconciliation always matches on the natural key.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
)

from dota_sync.database import Base


# ---------------------------------------------------------------------------
# Reference entities (refreshed by reconcile.py)
# ---------------------------------------------------------------------------

class Hero(Base):
    __tablename__ = "heroes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    steam_id = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(64), nullable=False)             # npc_dota_hero_antimage
    localized_name = Column(String(64))


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    steam_id = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(128), nullable=False)            # item_blink
    localized_name = Column(String(128))
    cost = Column(Integer)
    # Upstream sends these flags as 0 / 1
    secret_shop = Column(Integer)
    side_shop = Column(Integer)
    recipe = Column(Integer)


class Ability(Base):
    __tablename__ = "abilities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    steam_id = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(128), nullable=False)


class League(Base):
    __tablename__ = "leagues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    leagueid = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    tournament_url = Column(String(255))
    itemdef = Column(Integer)


# ---------------------------------------------------------------------------
# Matches (append-only; written by ingest.py and live.py)
# ---------------------------------------------------------------------------

class Match(Base):
    __tablename__ = "matches"

    match_id = Column(BigInteger, primary_key=True)
    # Upstream-assigned, strictly increasing. max(match_seq_num) is the cursor.
    match_seq_num = Column(BigInteger, nullable=False, unique=True, index=True)
    league_id = Column(Integer, nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Integer)
    radiant_win = Column(Boolean)
    lobby_type = Column(Integer)
    game_mode = Column(Integer)
    human_players = Column(Integer)
    cluster = Column(Integer)
    first_blood_time = Column(Integer)
    tower_status_radiant = Column(Integer)
    tower_status_dire = Column(Integer)
    barracks_status_radiant = Column(Integer)
    barracks_status_dire = Column(Integer)
    radiant_score = Column(Integer)
    dire_score = Column(Integer)
    # JSON: stored as json/jsonb on PostgreSQL, as TEXT on SQLite
    players = Column(JSON)
    picks_bans = Column(JSON)


class LiveLeagueMatch(Base):
    """Last-known live snapshot of a league game that has since finished."""
    __tablename__ = "live_league_matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(BigInteger, nullable=False, unique=True, index=True)
    league_id = Column(Integer, index=True)
    lobby_id = Column(BigInteger)
    series_id = Column(Integer)
    series_type = Column(Integer)
    game_number = Column(Integer)
    radiant_series_wins = Column(Integer)
    dire_series_wins = Column(Integer)
    spectators = Column(Integer)
    stream_delay_s = Column(Integer)
    radiant_team = Column(JSON)
    dire_team = Column(JSON)
    players = Column(JSON)
    scoreboard = Column(JSON)
    finished_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


def column_names(model) -> frozenset[str]:
    """Returns the mapped column names of a model.

    Upstream payloads carry more fields than we store; callers use this to
    drop the rest before assigning or inserting.
    """
    return frozenset(c.name for c in model.__table__.columns)
