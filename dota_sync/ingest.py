"""
ingest.py — Sequential match-history ingestion, driven by match_seq_num.

The cursor is never stored: at the start of a run it is recomputed as
max(matches.match_seq_num) + 1, and inside the loop as max over the page
just fetched + 1.  Each page is inserted in its own transaction before the
next request goes out, so an interrupted run resumes exactly where the last
committed page ended.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from dota_sync.config import MATCH_HISTORY_STATUS_OK, NO_LEAGUE_ID
from dota_sync.models import Match, column_names

logger = logging.getLogger(__name__)

_MATCH_COLUMNS = column_names(Match)


def is_league_match(match: dict) -> bool:
    return match["leagueid"] != NO_LEAGUE_ID


def normalize_match(match: dict) -> dict:
    """Builds a `matches` row from a match-history record.

    leagueid → league_id, start_time epoch seconds → aware UTC datetime,
    unknown upstream fields dropped.
    """
    row = {k: v for k, v in match.items() if k in _MATCH_COLUMNS}
    row["league_id"] = match["leagueid"]
    row["start_time"] = datetime.fromtimestamp(match["start_time"], tz=timezone.utc)
    return row


class MatchIngestor:
    def __init__(self, client, store) -> None:
        self.client = client
        self.store = store

    def starting_cursor(self) -> Optional[int]:
        """max stored match_seq_num + 1, or None when the table is empty."""
        last_seq_num = self.store.max_field(Match, "match_seq_num")
        if last_seq_num is None:
            return None
        return last_seq_num + 1

    def ingest_matches(self, starting_seq_num: Optional[int] = None) -> int:
        """Pages through match history until upstream runs dry.

        Returns the number of matches persisted.  A status other than 1
        (e.g. 8) or an empty page ends the run normally.
        """
        cursor = starting_seq_num if starting_seq_num is not None else self.starting_cursor()
        logger.info("[ingest] Starting at match_seq_num=%s", cursor)

        fetched_matches: list[dict] = []
        total = 0
        matches, status = self.client.get_matches_by_seq_num(cursor)

        while status == MATCH_HISTORY_STATUS_OK and matches:
            for match in matches:
                if is_league_match(match):
                    fetched_matches.append(normalize_match(match))

            self.store.bulk_insert(Match, fetched_matches)
            total += len(fetched_matches)
            logger.info(
                "[ingest] page of %d: saved %d league matches",
                len(matches), len(fetched_matches),
            )
            fetched_matches.clear()

            # Out-of-scope matches count too, otherwise an all-public page
            # would be requested forever.
            cursor = max(m["match_seq_num"] for m in matches) + 1
            logger.debug("[ingest] Next match_seq_num: %d", cursor)
            matches, status = self.client.get_matches_by_seq_num(cursor)

        logger.info(
            "[ingest] Done: %d matches saved, stopped at match_seq_num=%s (status=%s, page=%d)",
            total, cursor, status, len(matches),
        )
        return total
