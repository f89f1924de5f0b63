"""
config.py — Project-wide constants for dota-sync.

Unlike runtime settings (which are read from environment variables), these
constants are stable across environments and don't need to be overridden.
"""

# ---------------------------------------------------------------------------
# Upstream status codes.
#
# Most Steam Web API resources report a generic HTTP-style status inside
# `result.status`.  GetMatchHistoryBySequenceNum uses its own small codes:
#   1 = success
#   8 = 'matches_requested' must be greater than 0 (invalid request)
# Ref. https://wiki.teamfortress.com/wiki/WebAPI/GetMatchHistoryBySequenceNum
# ---------------------------------------------------------------------------

STATUS_OK: int = 200
MATCH_HISTORY_STATUS_OK: int = 1
MATCH_HISTORY_STATUS_INVALID: int = 8

# ---------------------------------------------------------------------------
# Match scope — applied at ingestion time (ingest.py).
#
# Only league matches are stored.  Public matchmaking games come back from
# match history with leagueid = 0 and are dropped before any DB write, but
# they still advance the sequence cursor.
# ---------------------------------------------------------------------------

NO_LEAGUE_ID: int = 0

# ---------------------------------------------------------------------------
# Live snapshot cache keys (live.py).  Both keys describe the same fetch
# cycle and are always written together.
# ---------------------------------------------------------------------------

LIVE_MATCHES_KEY: str = "live_matches"        # {match_id: live record}
LIVE_MATCH_IDS_KEY: str = "live_match_ids"    # [match_id, ...]
