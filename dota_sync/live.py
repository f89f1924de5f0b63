"""
live.py — Detects finished league games from consecutive live snapshots.

Upstream only tells us what is live *now*.  A game that was live on the
previous cycle and is gone on this one has finished; its last-known record
(kept in the cache) is persisted to live_league_matches exactly once, on the
cycle it first disappears.  A cold cache (no previous snapshot) persists nothing.
"""

import logging

from dota_sync.config import LIVE_MATCH_IDS_KEY, LIVE_MATCHES_KEY, STATUS_OK
from dota_sync.models import LiveLeagueMatch, column_names

logger = logging.getLogger(__name__)

_LIVE_COLUMNS = column_names(LiveLeagueMatch) - {"id", "finished_at"}


def _to_row(record: dict) -> dict:
    return {k: v for k, v in record.items() if k in _LIVE_COLUMNS}


class LiveMatchReconciler:
    def __init__(self, client, store, cache) -> None:
        self.client = client
        self.store = store
        self.cache = cache

    def _previous_snapshot(self) -> tuple[set[int], dict[int, dict]]:
        # JSON backends turn int keys into strings; normalize back.
        previous_ids = {int(i) for i in self.cache.read(LIVE_MATCH_IDS_KEY) or []}
        previous_records = {
            int(k): v for k, v in (self.cache.read(LIVE_MATCHES_KEY) or {}).items()
        }
        return previous_ids, previous_records

    def reconcile_live_matches(self) -> list[int]:
        """One live cycle.  Returns the ids persisted as finished."""
        logger.info("[live] Fetching live matches...")
        live_matches, status = self.client.get_live_league_matches()
        if status != STATUS_OK:
            logger.warning("[live] upstream status %s, snapshot left as is", status)
            return []

        current = {m["match_id"]: m for m in live_matches}
        finished_ids: list[int] = []

        if self.cache.exists(LIVE_MATCH_IDS_KEY):
            previous_ids, previous_records = self._previous_snapshot()
            gone = previous_ids - set(current)
            # A game can drop out of the live list, reappear and drop out
            # again; only its first disappearance is stored.
            already_saved = self.store.existing_keys(LiveLeagueMatch, "match_id", gone)
            if already_saved:
                logger.info("[live] Already saved, skipping: %s", sorted(already_saved))
            finished_ids = sorted(gone - already_saved)
            if finished_ids:
                logger.info("[live] Saving %d finished matches: %s", len(finished_ids), finished_ids)
                self.store.bulk_insert(
                    LiveLeagueMatch,
                    [_to_row(previous_records[i]) for i in finished_ids],
                )
        else:
            logger.info("[live] No previous snapshot, recording %d live matches", len(current))

        self.cache.write_many({
            LIVE_MATCHES_KEY: current,
            LIVE_MATCH_IDS_KEY: sorted(current),
        })
        return finished_ids
