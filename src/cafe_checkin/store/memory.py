"""In-process store implementation."""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone

from cafe_checkin.exceptions import RemoteError
from cafe_checkin.store.base import BaseStore, Collection, Record

COLLECTIONS: tuple[str, ...] = ("cafes", "beans", "favorites", "orders")


class MemoryStore(BaseStore):
    """Keeps collections in memory and assigns ids like the hosted backend."""

    def __init__(self, seed: dict[str, list[Record]] | None = None):
        self._rows: dict[str, list[Record]] = {name: [] for name in COLLECTIONS}
        for name, rows in (seed or {}).items():
            self._check(name)
            self._rows[name] = [copy.deepcopy(row) for row in rows]

    async def list(self, collection: Collection) -> list[Record]:
        self._check(collection)
        rows = [copy.deepcopy(row) for row in self._rows[collection]]
        if collection == "orders":
            rows.sort(key=lambda row: str(row.get("created_at") or ""), reverse=True)
        return rows

    async def insert(self, collection: Collection, fields: Record) -> Record:
        self._check(collection)
        row = dict(fields)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self._rows[collection].append(row)
        return copy.deepcopy(row)

    async def delete(self, collection: Collection, matching: Record) -> None:
        self._check(collection)
        if not matching:
            raise RemoteError("delete requires at least one filter")
        self._rows[collection] = [
            row
            for row in self._rows[collection]
            if any(row.get(key) != value for key, value in matching.items())
        ]

    @staticmethod
    def _check(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise RemoteError(f"Unknown collection: {collection}")
