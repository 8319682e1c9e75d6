"""Order log: completed check-ins, newest first."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, tzinfo
from typing import Any

from cafe_checkin.exceptions import ValidationError
from cafe_checkin.schema import BREW_METHODS, Order
from cafe_checkin.store.base import BaseStore
from cafe_checkin.view_models import Catalog, build_order, group_orders_by_day

logger = logging.getLogger(__name__)


class OrderLog:
    """Orders persisted in the remote store.

    Unlike favorites, orders are not optimistic: an order only enters the log
    once the store has accepted it.
    """

    def __init__(self, store: BaseStore):
        self.store = store
        self._orders: list[Order] = []

    @property
    def orders(self) -> tuple[Order, ...]:
        return tuple(self._orders)

    def __len__(self) -> int:
        return len(self._orders)

    def load(self, rows: Iterable[Mapping[str, Any]], catalog: Catalog) -> None:
        """Replace the log with stored rows, already sorted newest first.

        Orders saved here that are newer than every listed row but missing
        from it were inserted after the rows were listed, and are kept.
        """
        orders = [build_order(row, catalog) for row in rows]
        listed = {order.id for order in orders}
        newest = orders[0].date if orders else None
        recent = [
            order
            for order in self._orders
            if order.id not in listed and (newest is None or order.date > newest)
        ]
        self._orders = recent + orders

    async def add(
        self,
        catalog: Catalog,
        cafe_id: str,
        bean_id: str,
        method: str,
        rating: int | None = None,
        notes: str | None = None,
    ) -> Order:
        """Persist a new order and prepend it to the log.

        Args:
            catalog: Reference data used to validate ids and fill names.
            cafe_id: Café the order was placed at.
            bean_id: Bean that was brewed.
            method: One of the brew methods.
            rating: Optional 1-5 star rating.
            notes: Optional free-text note.

        Returns:
            The order as stored, with the server-issued id and timestamp.

        Raises:
            ValidationError: If an id does not resolve or a field is invalid.
            RemoteError: If the store rejects the insert. The log is unchanged.
        """
        if catalog.cafe(cafe_id) is None:
            raise ValidationError(f"Unknown café: {cafe_id}")
        bean = catalog.bean(bean_id)
        if bean is None:
            raise ValidationError(f"Unknown bean: {bean_id}")
        if method not in BREW_METHODS:
            raise ValidationError(f"Unsupported brew method: {method}")
        if rating is not None and (isinstance(rating, bool) or not 1 <= rating <= 5):
            raise ValidationError(f"Rating must be between 1 and 5, got {rating}")

        fields = {
            "cafe_id": cafe_id,
            "bean_id": bean_id,
            "method": method,
            "rating": rating,
            "notes": notes.strip() if notes and notes.strip() else None,
            "taste_profile": ", ".join(bean.flavor_notes),
        }
        row = await self.store.insert("orders", fields)
        order = build_order({**fields, **row}, catalog)
        self._orders.insert(0, order)
        logger.info("order %s saved for cafe %s bean %s", order.id, cafe_id, bean_id)
        return order

    def grouped_by_day(self, tz: tzinfo | None = None) -> list[tuple[date, list[Order]]]:
        return group_orders_by_day(self._orders, tz)
