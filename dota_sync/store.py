"""
store.py — Persistence capability used by the reconcilers.

Wraps one SQLAlchemy Session:
  find_all(model)              — full table read (reference entity index)
  update(obj)                  — persist one changed entity
  bulk_insert(model, rows)     — one INSERT ... VALUES executemany, one commit
  max_field(model, field)      — SELECT max(field), None on an empty table
  existing_keys(model, f, vs)  — which of vs are already stored in column f

Each write commits on its own, so a bulk_insert is atomic per call (per page
for the match ingestor).  On any DB error the session is rolled back and the
exception is re-raised to the caller; there is no retry here.
"""

import logging
from typing import Any, Optional

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class SqlStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_all(self, model) -> list:
        return list(self.session.scalars(select(model)))

    def update(self, obj) -> None:
        self.session.add(obj)
        self._commit()

    def bulk_insert(self, model, rows: list[dict]) -> None:
        if not rows:
            return
        try:
            self.session.execute(insert(model), rows)
        except Exception:
            self.session.rollback()
            raise
        self._commit()
        logger.debug("[store] inserted %d rows into %s", len(rows), model.__tablename__)

    def max_field(self, model, field: str) -> Optional[Any]:
        return self.session.scalar(select(func.max(getattr(model, field))))

    def existing_keys(self, model, field: str, values) -> set:
        """Which of `values` already appear in `field` (one IN query)."""
        values = list(values)
        if not values:
            return set()
        column = getattr(model, field)
        return set(self.session.scalars(select(column).where(column.in_(values))))

    def _commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
