"""
updater.py — Worker that pulls Dota 2 data from the Steam Web API into the DB.

Run as a standalone process:
    python -m dota_sync.updater                 # every job once
    python -m dota_sync.updater heroes matches  # selected jobs once
    python -m dota_sync.updater --loop          # poll forever

Jobs:
    heroes, items, abilities, leagues — reference entity refresh
    matches                           — match history from the last seq num
    live                              — persist league games that just finished

Environment variables (all optional, sensible defaults):
    STEAM_WEB_API_KEY         — Steam Web API key
    DATABASE_URL              — see database.py
    REDIS_URL                 — share the live snapshot across runs (cache.py);
                                required for one-shot `live` runs
    MAX_REQUESTS_PER_MINUTE   — self-imposed rate limit (default: 60)
    MATCHES_PER_PAGE          — matches_requested per history call (default: 100)
    POLL_INTERVAL_MINUTES     — match/live poll interval in --loop (default: 5)
    REFRESH_INTERVAL_HOURS    — reference refresh interval in --loop (default: 24)

Jobs always run one after another in this process, so a job never overlaps
another run of itself.  Running several updater processes against the same
database is not supported.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path

# Allow running as "python dota_sync/updater.py" from project root
_PROJECT_ROOT = Path(__file__).parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from dotenv import load_dotenv  # noqa: E402

load_dotenv(_PROJECT_ROOT / ".env")

from dota_sync.cache import MemoryCache, get_cache  # noqa: E402
from dota_sync.database import SessionLocal, create_all_tables  # noqa: E402
from dota_sync.ingest import MatchIngestor  # noqa: E402
from dota_sync.live import LiveMatchReconciler  # noqa: E402
from dota_sync.reconcile import ENTITY_KINDS, EntityReconciler  # noqa: E402
from dota_sync.steam_client import SteamWebApiClient  # noqa: E402
from dota_sync.store import SqlStore  # noqa: E402

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

POLL_INTERVAL_MINUTES: int = int(os.getenv("POLL_INTERVAL_MINUTES", "5"))
REFRESH_INTERVAL_HOURS: int = int(os.getenv("REFRESH_INTERVAL_HOURS", "24"))

REFERENCE_JOBS: tuple[str, ...] = tuple(ENTITY_KINDS)
MATCH_JOBS: tuple[str, ...] = ("matches", "live")
ALL_JOBS: tuple[str, ...] = REFERENCE_JOBS + MATCH_JOBS

logger = logging.getLogger("updater")


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

def run_job(name: str, client, store, cache):
    """Runs one job against the given collaborators and returns its result."""
    if name in ENTITY_KINDS:
        return EntityReconciler(store).refresh(name, client)
    if name == "matches":
        return MatchIngestor(client, store).ingest_matches()
    if name == "live":
        return LiveMatchReconciler(client, store, cache).reconcile_live_matches()
    raise ValueError(f"unknown job: {name}")


def run_jobs(names, client, cache) -> bool:
    """Runs jobs in order, each with its own session.  False if any failed."""
    ok = True
    for name in names:
        started = time.monotonic()
        try:
            with SessionLocal() as session:
                run_job(name, client, SqlStore(session), cache)
        except Exception as exc:
            logger.error("[updater] Job %s failed: %s", name, exc, exc_info=True)
            ok = False
            continue
        logger.info("[updater] Job %s finished in %.1f s", name, time.monotonic() - started)
    return ok


def warn_if_live_snapshot_is_lost(jobs, cache) -> bool:
    """One-shot `live` with the in-process cache starts cold every run.

    The snapshot dies with the process, so no finished game is ever
    detected.  Logs a WARNING and returns True in that case.
    """
    if "live" in jobs and isinstance(cache, MemoryCache):
        logger.warning(
            "[updater] live job in one-shot mode without REDIS_URL: the live "
            "snapshot is not kept between runs and no finished match will be "
            "saved.  Set REDIS_URL or run with --loop."
        )
        return True
    return False


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def run_forever(client, cache) -> None:
    last_refresh_time: float = 0.0

    while True:
        loop_start = time.monotonic()

        # --- Reference entities (once per REFRESH_INTERVAL_HOURS) ---
        if (time.time() - last_refresh_time) >= REFRESH_INTERVAL_HOURS * 3600:
            run_jobs(REFERENCE_JOBS, client, cache)
            last_refresh_time = time.time()

        # --- Match history + live games ---
        run_jobs(MATCH_JOBS, client, cache)

        # --- Sleep until next cycle ---
        elapsed = time.monotonic() - loop_start
        sleep_sec = max(0.0, POLL_INTERVAL_MINUTES * 60 - elapsed)
        logger.info(
            "[updater] Sleeping %.0f s until next cycle (cycle took %.1f s)...",
            sleep_sec, elapsed,
        )
        time.sleep(sleep_sec)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="dota-sync", description=__doc__.split("\n")[1])
    parser.add_argument(
        "jobs", nargs="*", metavar="JOB",
        help=f"jobs to run once: {', '.join(ALL_JOBS)} or all (default: all)",
    )
    parser.add_argument("--loop", action="store_true", help="poll forever")
    args = parser.parse_args(argv)
    unknown = set(args.jobs) - set(ALL_JOBS) - {"all"}
    if unknown:
        parser.error(f"unknown job(s): {', '.join(sorted(unknown))}")
    return args


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    args = _parse_args(argv)
    jobs = ALL_JOBS if not args.jobs or "all" in args.jobs else tuple(args.jobs)

    logger.info("=" * 60)
    logger.info("Dota sync updater starting")
    logger.info("  JOBS                    = %s", "loop" if args.loop else ", ".join(jobs))
    logger.info("  POLL_INTERVAL_MINUTES   = %d", POLL_INTERVAL_MINUTES)
    logger.info("  REFRESH_INTERVAL_HOURS  = %d", REFRESH_INTERVAL_HOURS)
    logger.info("=" * 60)

    # Ensure tables exist (safe to call multiple times)
    create_all_tables()
    cache = get_cache()
    if not args.loop:
        warn_if_live_snapshot_is_lost(jobs, cache)

    with SteamWebApiClient() as client:
        if args.loop:
            run_forever(client, cache)
            return 0
        return 0 if run_jobs(jobs, client, cache) else 1


if __name__ == "__main__":
    sys.exit(main())
