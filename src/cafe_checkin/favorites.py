"""Favorites ledger with optimistic local updates."""

from __future__ import annotations

import asyncio
import functools
import itertools
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from cafe_checkin.exceptions import RemoteError
from cafe_checkin.notifications import Notifier
from cafe_checkin.schema import FavoriteKind
from cafe_checkin.store.base import BaseStore

logger = logging.getLogger(__name__)

FAVORITE_FIELDS: dict[str, str] = {"cafe": "cafe_id", "bean": "bean_id"}


class FavoritesLedger:
    """Favorited café and bean ids mirrored to the remote store.

    Toggling changes the local sets at once and syncs in the background.
    A failed sync is reported through the notifier and is not rolled back:
    local state stays the user's last intent.
    """

    def __init__(self, store: BaseStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier
        self._ids: dict[str, set[str]] = {kind: set() for kind in FAVORITE_FIELDS}
        self._pending: dict[tuple[str, str], asyncio.Task] = {}
        self._intent: dict[tuple[str, str], bool] = {}
        self._settled: dict[tuple[str, str], int] = {}
        self._clock = itertools.count(1)

    @property
    def cafe_ids(self) -> frozenset[str]:
        return frozenset(self._ids["cafe"])

    @property
    def bean_ids(self) -> frozenset[str]:
        return frozenset(self._ids["bean"])

    def is_favorite(self, kind: FavoriteKind, item_id: str) -> bool:
        return item_id in self._ids[_field_kind(kind)]

    def checkpoint(self) -> int:
        """Mark the moment favorite rows are about to be listed; pass it to ``load``."""
        return next(self._clock)

    def load(self, rows: Iterable[Mapping[str, Any]], since: int | None = None) -> None:
        """Replace the local sets with the stored favorite rows.

        Toggles whose sync was still in flight at ``since``, or had not
        finished by then, keep their toggled state over the rows. Without
        ``since`` the rows are assumed to include every finished sync.
        """
        ids: dict[str, set[str]] = {kind: set() for kind in FAVORITE_FIELDS}
        for row in rows:
            for kind, field in FAVORITE_FIELDS.items():
                value = row.get(field)
                if value:
                    ids[kind].add(str(value))
        for key, favorite in list(self._intent.items()):
            settled = self._settled.get(key)
            if settled is not None and (since is None or settled < since):
                del self._intent[key]
                del self._settled[key]
                continue
            kind, item_id = key
            if favorite:
                ids[kind].add(item_id)
            else:
                ids[kind].discard(item_id)
        self._ids = ids

    def toggle(self, kind: FavoriteKind, item_id: str) -> bool:
        """Flip membership of ``item_id`` and schedule the remote sync.

        Must be called from a running event loop. Calls for the same id are
        sent to the store in call order.

        Returns:
            True if the id is now a favorite.
        """
        kind = _field_kind(kind)
        loop = asyncio.get_running_loop()

        ids = self._ids[kind]
        if item_id in ids:
            ids.discard(item_id)
            favorite = False
        else:
            ids.add(item_id)
            favorite = True

        key = (kind, item_id)
        previous = self._pending.get(key)
        task = loop.create_task(self._sync(kind, item_id, favorite, previous))
        self._pending[key] = task
        self._intent[key] = favorite
        self._settled.pop(key, None)
        task.add_done_callback(functools.partial(self._forget, key))
        return favorite

    async def drain(self) -> None:
        """Wait until every scheduled sync has finished."""
        while self._pending:
            await asyncio.wait(list(self._pending.values()))

    async def _sync(
        self,
        kind: str,
        item_id: str,
        favorite: bool,
        previous: asyncio.Task | None,
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])

        matching = {FAVORITE_FIELDS[kind]: item_id}
        try:
            if favorite:
                await self.store.insert("favorites", matching)
            else:
                await self.store.delete("favorites", matching)
        except RemoteError as exc:
            action = "add" if favorite else "remove"
            logger.warning("failed to %s favorite %s %s: %s", action, kind, item_id, exc)
            self.notifier.error(f"Could not {action} favorite. Please try again.")

    def _forget(self, key: tuple[str, str], task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
            self._settled[key] = next(self._clock)


def _field_kind(kind: str) -> str:
    if kind not in FAVORITE_FIELDS:
        raise ValueError(f"Unsupported favorite kind: {kind}")
    return kind
