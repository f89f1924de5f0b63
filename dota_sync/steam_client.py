"""
steam_client.py — Thin synchronous wrapper around the Steam Web API (Dota 2).

Every public method returns a `(records, status)` pair.  `status` is whatever
the resource reports: HTTP-style 200 for most endpoints, 1 / 8 for match
history (see config.py).  A non-200 HTTP response is logged and surfaced as
`([], http_status)` so callers treat it like any other non-success status.
Transport failures raise UpstreamError.
"""

import json
import logging
import os
import time
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

STEAM_WEB_API_KEY = os.getenv("STEAM_WEB_API_KEY")
STEAM_API_BASE_URL = os.getenv("STEAM_API_BASE_URL", "https://api.steampowered.com")
MAX_REQUESTS_PER_MINUTE: int = int(os.getenv("MAX_REQUESTS_PER_MINUTE", "60"))
MATCHES_PER_PAGE: int = int(os.getenv("MATCHES_PER_PAGE", "100"))
# Steam has no ability listing endpoint; abilities come from a local dump.
# data/abilities.json is a small sample for tests and local runs: point
# ABILITIES_JSON_PATH at a full dump before running the `abilities` job
# against a real database, or only the sample ids get stored.
# Ref. http://dev.dota2.com/showthread.php?t=104192
ABILITIES_JSON_PATH = os.getenv(
    "ABILITIES_JSON_PATH",
    str(Path(__file__).parent.parent / "data" / "abilities.json"),
)


class UpstreamError(RuntimeError):
    """Network-level failure talking to the Steam Web API."""


# ---------------------------------------------------------------------------
# Rate limiter — minimum delay between API calls
# ---------------------------------------------------------------------------

class RateLimiter:
    """Enforces a minimum inter-request delay based on max_per_minute."""

    def __init__(self, max_per_minute: int) -> None:
        self._min_delay = 60.0 / max(max_per_minute, 1)
        self._last_call: float = 0.0

    def acquire(self) -> None:
        """Sleeps if needed so we never exceed max_per_minute."""
        elapsed = time.monotonic() - self._last_call
        if elapsed < self._min_delay:
            time.sleep(self._min_delay - elapsed)
        self._last_call = time.monotonic()


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class SteamWebApiClient:
    def __init__(
        self,
        api_key: str | None = STEAM_WEB_API_KEY,
        base_url: str = STEAM_API_BASE_URL,
        max_requests_per_minute: int = MAX_REQUESTS_PER_MINUTE,
        timeout: float = 30.0,
        matches_per_page: int = MATCHES_PER_PAGE,
        abilities_path: str = ABILITIES_JSON_PATH,
        http: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._matches_per_page = matches_per_page
        self._abilities_path = Path(abilities_path)
        self._rate_limiter = RateLimiter(max_requests_per_minute)
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SteamWebApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _build_params(self, **extra) -> dict:
        """Adds key + language to the query params; drops None values."""
        params = {"language": "en_us"}
        if self._api_key:
            params["key"] = self._api_key
        params.update({k: v for k, v in extra.items() if v is not None})
        return params

    def _get(self, path: str, list_key: str, **params) -> tuple[list[dict], int]:
        """GET `path`, return (result[list_key], status).

        status is result.status when the payload carries one, otherwise the
        HTTP status code (GetLeagueListing has no status field).
        """
        self._rate_limiter.acquire()
        try:
            r = self._http.get(path, params=self._build_params(**params))
        except httpx.RequestError as e:
            logger.error("Steam API network error (%s): %s", path, e)
            raise UpstreamError(f"Steam API network error: {e}") from e

        if r.status_code != 200:
            logger.error("Steam API %s returned HTTP %s: %s", path, r.status_code, r.text[:200])
            return [], r.status_code

        result = r.json()["result"]
        return result.get(list_key) or [], result.get("status", r.status_code)

    # ------------------------------------------------------------------ #
    # Reference entities                                                  #
    # ------------------------------------------------------------------ #

    def get_heroes(self) -> tuple[list[dict], int]:
        """GetHeroes — each entry: id, name, localized_name."""
        return self._get("/IEconDOTA2_570/GetHeroes/v1", "heroes")

    def get_items(self) -> tuple[list[dict], int]:
        """GetGameItems — each entry: id, name, cost, secret_shop, side_shop, recipe, localized_name."""
        return self._get("/IEconDOTA2_570/GetGameItems/v1", "items")

    def get_abilities(self) -> tuple[list[dict], int]:
        """Reads abilities from the local JSON dump (same envelope as the API)."""
        with self._abilities_path.open(encoding="utf-8") as fh:
            result = json.load(fh)["result"]
        abilities = result.get("abilities") or []
        logger.info("[steam] Loaded %d abilities from %s", len(abilities), self._abilities_path)
        return abilities, result["status"]

    def get_leagues(self) -> tuple[list[dict], int]:
        """GetLeagueListing — leagues supported in-game via DotaTV."""
        return self._get("/IDOTA2Match_570/GetLeagueListing/v1", "leagues")

    # ------------------------------------------------------------------ #
    # Matches                                                             #
    # ------------------------------------------------------------------ #

    def get_live_league_matches(self) -> tuple[list[dict], int]:
        """GetLiveLeagueGames — league games currently in progress."""
        return self._get("/IDOTA2Match_570/GetLiveLeagueGames/v1", "games")

    def get_matches_by_seq_num(self, match_seq_num: int | None = None) -> tuple[list[dict], int]:
        """GetMatchHistoryBySequenceNum — matches from `match_seq_num` onwards.

        With no cursor upstream starts from the earliest data it has.
        Status: 1 = success, 8 = 'matches_requested' must be greater than 0.
        """
        return self._get(
            "/IDOTA2Match_570/GetMatchHistoryBySequenceNum/v1",
            "matches",
            start_at_match_seq_num=match_seq_num,
            matches_requested=self._matches_per_page,
        )
