"""
reconcile.py — Upsert-by-natural-key for reference entities.

One algorithm, four kinds.  Each kind is a row in ENTITY_KINDS naming the
model, the natural-key column, the upstream field that carries that key and
the client method that fetches it.

Per cycle:
  1. fetch (records, status); anything but 200 → no writes at all
  2. index stored rows by natural key (one full-table read)
  3. existing key → field-level diff, write only if something changed
     new key      → stage for insert (upstream key remapped to our column)
  4. persist the changed rows one by one, then one bulk insert
"""

import logging
from dataclasses import dataclass
from typing import Callable

from dota_sync.config import STATUS_OK
from dota_sync.models import Ability, Hero, Item, League, column_names

logger = logging.getLogger(__name__)

FetchFn = Callable[[], tuple[list[dict], int]]


@dataclass(frozen=True)
class EntityKind:
    name: str
    model: type
    natural_key: str      # column on our side
    upstream_key: str     # field in the upstream record
    fetch: str            # SteamWebApiClient method name


ENTITY_KINDS: dict[str, EntityKind] = {
    k.name: k
    for k in (
        EntityKind("heroes", Hero, "steam_id", "id", "get_heroes"),
        EntityKind("items", Item, "steam_id", "id", "get_items"),
        EntityKind("abilities", Ability, "steam_id", "id", "get_abilities"),
        EntityKind("leagues", League, "leagueid", "leagueid", "get_leagues"),
    )
}


@dataclass
class ReconcileResult:
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: bool = False


def _to_row(kind: EntityKind, record: dict) -> dict:
    """Maps an upstream record onto the model's columns.

    The upstream key moves into the natural-key column; fields we don't store
    are dropped.  A record without its key raises KeyError.
    """
    columns = column_names(kind.model) - {"id"}
    row = {k: v for k, v in record.items() if k in columns and k != kind.upstream_key}
    row[kind.natural_key] = int(record[kind.upstream_key])
    return row


class EntityReconciler:
    def __init__(self, store) -> None:
        self.store = store

    def reconcile(self, kind: EntityKind, fetch_fn: FetchFn) -> ReconcileResult:
        result = ReconcileResult()
        logger.info("[refresh] Fetching %s...", kind.name)
        records, status = fetch_fn()
        if status != STATUS_OK:
            logger.warning("[refresh] %s: upstream status %s, nothing written", kind.name, status)
            result.skipped = True
            return result

        stored = {getattr(obj, kind.natural_key): obj for obj in self.store.find_all(kind.model)}
        changed = []
        new_rows = []

        for record in records:
            row = _to_row(kind, record)
            obj = stored.get(row[kind.natural_key])
            if obj is None:
                new_rows.append(row)
                continue

            diff = {k: v for k, v in row.items() if getattr(obj, k) != v}
            if not diff:
                result.unchanged += 1
                continue
            for k, v in diff.items():
                setattr(obj, k, v)
            changed.append(obj)

        for obj in changed:
            self.store.update(obj)
        self.store.bulk_insert(kind.model, new_rows)

        result.created = len(new_rows)
        result.updated = len(changed)
        logger.info(
            "[refresh] %s done: +%d new | %d updated | %d unchanged",
            kind.name, result.created, result.updated, result.unchanged,
        )
        return result

    def refresh(self, name: str, client) -> ReconcileResult:
        """Reconciles one kind by name, fetching through `client`."""
        kind = ENTITY_KINDS[name]
        return self.reconcile(kind, getattr(client, kind.fetch))

    def refresh_all(self, client) -> dict[str, ReconcileResult]:
        return {name: self.refresh(name, client) for name in ENTITY_KINDS}
