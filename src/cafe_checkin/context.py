"""Application context: the single source of truth for the app's state."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, tzinfo

from cafe_checkin.exceptions import FlowError, ParseError, RemoteError, ValidationError
from cafe_checkin.favorites import FavoritesLedger
from cafe_checkin.flow import OrderingFlow, parse_scan_payload
from cafe_checkin.navigation import (
    MemoryHistory,
    MemoryPreferences,
    NavigationController,
    NavigationHistory,
    PreferenceStore,
)
from cafe_checkin.notifications import LoggingNotifier, Notifier
from cafe_checkin.orders import OrderLog
from cafe_checkin.schema import Bean, Cafe, FavoriteKind, Order, ProfileSummary, Screen, Tab
from cafe_checkin.store.base import BaseStore
from cafe_checkin.view_models import Catalog, build_catalog, build_profile

logger = logging.getLogger(__name__)


class AppContext:
    """Coordinates catalog data, favorites, orders, the ordering flow and navigation.

    Construct one per app session (tests build a fresh one per case), then
    ``await load()``. Favorite toggles schedule work on the running loop, so
    mutating operations are meant to be called from inside it.
    """

    def __init__(
        self,
        store: BaseStore,
        *,
        notifier: Notifier | None = None,
        history: NavigationHistory | None = None,
        preferences: PreferenceStore | None = None,
    ):
        self.store = store
        self.notifier = notifier or LoggingNotifier()
        self.catalog = Catalog()
        self.favorites = FavoritesLedger(store, self.notifier)
        self.orders = OrderLog(store)
        self.flow = OrderingFlow()
        self.navigation = NavigationController(
            history if history is not None else MemoryHistory(),
            preferences if preferences is not None else MemoryPreferences(),
        )

    async def load(self) -> bool:
        """Load cafés and beans, then favorites and orders.

        Returns:
            True if every collection loaded. On failure the previous data
            for that collection is kept and a notification is emitted.
        """
        try:
            cafe_rows = await self.store.list("cafes")
            bean_rows = await self.store.list("beans")
        except RemoteError as exc:
            logger.warning("failed to load cafes/beans: %s", exc)
            self.notifier.error("Could not load cafés. Pull to refresh.")
            return False

        self.catalog = build_catalog(cafe_rows, bean_rows)
        results = await asyncio.gather(self._load_favorites(), self._load_orders())
        return all(results)

    async def reload(self) -> bool:
        return await self.load()

    async def settle(self) -> None:
        """Wait for background favorite syncs to finish."""
        await self.favorites.drain()

    # Favorites

    def toggle_favorite(self, kind: FavoriteKind, item_id: str) -> bool:
        return self.favorites.toggle(kind, item_id)

    def is_favorite(self, kind: FavoriteKind, item_id: str) -> bool:
        return self.favorites.is_favorite(kind, item_id)

    # Orders

    async def add_order(
        self,
        cafe_id: str,
        bean_id: str,
        method: str,
        rating: int | None = None,
        notes: str | None = None,
    ) -> Order | None:
        """Save an order.

        Returns:
            The stored order, or None if the store rejected it (the failure
            is reported through the notifier).

        Raises:
            ValidationError: If the café or bean is unknown or a field is invalid.
        """
        try:
            return await self.orders.add(self.catalog, cafe_id, bean_id, method, rating, notes)
        except RemoteError as exc:
            logger.warning("failed to save order for cafe %s bean %s: %s", cafe_id, bean_id, exc)
            self.notifier.error("Could not save your order. Please try again.")
            return None

    def grouped_orders(self, tz: tzinfo | None = None) -> list[tuple[date, list[Order]]]:
        return self.orders.grouped_by_day(tz)

    # Navigation

    def select_tab(self, tab: Tab) -> None:
        """Handle a bottom-navigation tap.

        The scan tab starts the ordering flow; every other tab ends it.
        Starting the flow leaves the open café or bean detail in place, so
        backing out of the flow returns to the screen it was started from.
        """
        if tab == "scan":
            self.start_flow()
            return
        self.flow.cancel()
        self.navigation.select_tab(tab)

    def open_cafe(self, cafe_id: str | None) -> None:
        self.navigation.open_cafe(cafe_id)

    def open_bean(self, bean_id: str | None) -> None:
        self.navigation.open_bean(bean_id)

    def select_cafe(self, cafe_id: str | None) -> None:
        self.navigation.select_cafe(cafe_id)

    @property
    def screen(self) -> Screen:
        return self.navigation.resolve_screen(self.flow.state)

    @property
    def profile(self) -> ProfileSummary:
        return build_profile(
            self.catalog,
            self.orders.orders,
            self.favorites.cafe_ids,
            self.favorites.bean_ids,
        )

    # Ordering flow

    def start_flow(self) -> None:
        self.flow.start()

    def cancel_flow(self) -> None:
        self.flow.cancel()

    def back(self) -> None:
        """Step the ordering flow back one screen."""
        self.flow.back()

    def on_scan_result(self, payload: str | None) -> str | None:
        """Scanner callback. Returns the café id when the scan advanced the flow."""
        if not self.flow.active or self.flow.step != "scan":
            logger.debug("dropping stale scan result %r", payload)
            return None
        try:
            cafe_id = parse_scan_payload(payload)
        except ParseError as exc:
            self.flow.report_scan_error(str(exc))
            return None
        self.flow.scan_complete(cafe_id)
        return cafe_id

    def on_scan_error(self, reason: str) -> None:
        self.flow.report_scan_error(reason)

    def select_bean(self, bean_id: str) -> None:
        self.flow.select_bean(bean_id)

    @property
    def scanned_cafe(self) -> Cafe | None:
        return self.catalog.cafe(self.flow.cafe_id)

    @property
    def selected_bean(self) -> Bean | None:
        return self.catalog.bean(self.flow.bean_id)

    def beans_for_scanned_cafe(self) -> list[Bean]:
        return self.catalog.beans_at(self.flow.cafe_id)

    async def complete(
        self,
        method: str,
        rating: int | None = None,
        notes: str | None = None,
    ) -> Order | None:
        """Finish the brew-order step.

        The flow ends and the map tab is shown whether or not the order was
        saved; a failure is reported through the notifier.

        Raises:
            FlowError: If the flow is not at the brew-order step.
        """
        if not self.flow.active or self.flow.step != "brew-order":
            raise FlowError(f"complete called in step {self.flow.step!r} (active={self.flow.active})")

        cafe_id, bean_id = self.flow.cafe_id, self.flow.bean_id
        order = None
        try:
            order = await self.add_order(cafe_id, bean_id, method, rating, notes)
        except ValidationError as exc:
            logger.warning("order rejected: %s", exc)
            self.notifier.error(f"Could not save your order: {exc}")
        finally:
            self.flow.cancel()
            self.navigation.select_tab("map")

        if order is not None:
            self.notifier.success("Order saved!")
        return order

    async def _load_favorites(self) -> bool:
        since = self.favorites.checkpoint()
        try:
            rows = await self.store.list("favorites")
        except RemoteError as exc:
            logger.warning("failed to load favorites: %s", exc)
            self.notifier.error("Could not load favorites.")
            return False
        self.favorites.load(rows, since)
        return True

    async def _load_orders(self) -> bool:
        try:
            rows = await self.store.list("orders")
        except RemoteError as exc:
            logger.warning("failed to load orders: %s", exc)
            self.notifier.error("Could not load order history.")
            return False
        self.orders.load(rows, self.catalog)
        return True
