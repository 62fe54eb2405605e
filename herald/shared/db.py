from __future__ import annotations

import copy
import uuid
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from herald.shared.logging import get_logger
from herald.shared.utils import utc_now_iso

logger = get_logger("shared.db")


TABLES = ("users", "profiles", "nominations", "payments", "analytics_events")

# Unique columns per table (besides the id)
UNIQUE: Dict[str, tuple[str, ...]] = {
    "profiles": ("user_id",),
    "payments": ("razorpay_order_id",),
}


class DatabaseError(Exception):
    code = "db_error"


class UniqueViolation(DatabaseError):
    code = "23505"


class RowNotFound(DatabaseError):
    code = "no_rows"


def _matches(row: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    return all(row.get(k) == v for k, v in filters.items())


class Database:
    """
    In-process stand-in for the hosted relational store.

    Rows are plain dicts keyed by ``id``. Every call takes the lock and
    hands back copies, so a single call behaves like one row-level
    statement; there are no multi-statement transactions.
    """

    def __init__(self):
        self._lock = RLock()
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in TABLES}

    def _table(self, name: str) -> Dict[str, Dict[str, Any]]:
        try:
            return self._tables[name]
        except KeyError:
            raise DatabaseError(f"unknown table: {name}")

    def _check_unique(self, table: str, row: Dict[str, Any], exclude_id: Optional[str] = None) -> None:
        for col in UNIQUE.get(table, ()):
            val = row.get(col)
            if val is None:
                continue
            for other in self._table(table).values():
                if other["id"] != exclude_id and other.get(col) == val:
                    raise UniqueViolation(f"duplicate key value violates unique constraint {table}.{col}")

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            data = copy.deepcopy(row)
            data.setdefault("id", str(uuid.uuid4()))
            now = utc_now_iso()
            data.setdefault("created_at", now)
            data.setdefault("updated_at", now)
            if data["id"] in self._table(table):
                raise UniqueViolation(f"duplicate key value violates unique constraint {table}.id")
            self._check_unique(table, data)
            self._table(table)[data["id"]] = data
            return copy.deepcopy(data)

    def select(
        self,
        table: str,
        *,
        where: Optional[Callable[[Dict[str, Any]], bool]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        **filters: Any,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [r for r in self._table(table).values() if _matches(r, filters) and (where is None or where(r))]
            if order_by:
                rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
            return copy.deepcopy(rows)

    def first(self, table: str, **filters: Any) -> Optional[Dict[str, Any]]:
        rows = self.select(table, **filters)
        return rows[0] if rows else None

    def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._table(table).get(row_id)
            return copy.deepcopy(row) if row else None

    def update(self, table: str, row_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            current = self._table(table).get(row_id)
            if current is None:
                raise RowNotFound(f"{table}.{row_id} not found")
            merged = {**current, **copy.deepcopy(changes), "id": row_id}
            if "updated_at" not in changes:
                merged["updated_at"] = utc_now_iso()
            self._check_unique(table, merged, exclude_id=row_id)
            self._table(table)[row_id] = merged
            return copy.deepcopy(merged)

    def update_where(self, table: str, changes: Dict[str, Any], **filters: Any) -> List[Dict[str, Any]]:
        with self._lock:
            ids = [r["id"] for r in self._table(table).values() if _matches(r, filters)]
            return [self.update(table, i, changes) for i in ids]

    def delete(self, table: str, **filters: Any) -> int:
        with self._lock:
            ids = [r["id"] for r in self._table(table).values() if _matches(r, filters)]
            for i in ids:
                self._table(table).pop(i, None)
            return len(ids)

    def count(self, table: str, **filters: Any) -> int:
        return len(self.select(table, **filters))

    def log_event(self, event_type: str, user_id: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> None:
        """Analytics rows are best effort; a failure is logged, never raised."""
        try:
            self.insert("analytics_events", {"user_id": user_id, "event_type": event_type, "metadata": metadata or {}})
        except DatabaseError as e:
            logger.warning(f"analytics logging failed ({event_type}): {e}")
