"""Tests for the order log."""

import asyncio

import pytest

from cafe_checkin.exceptions import RemoteError, ValidationError
from cafe_checkin.orders import OrderLog
from cafe_checkin.view_models import build_catalog


@pytest.fixture
def catalog(cafe_rows, bean_rows):
    return build_catalog(cafe_rows, bean_rows)


@pytest.fixture
def log(store, catalog, order_rows):
    order_log = OrderLog(store)
    order_log.load(order_rows, catalog)
    return order_log


def test_load_keeps_store_order(log):
    assert [order.id for order in log.orders] == ["order-2", "order-1"]
    assert len(log) == 2


def test_add_prepends_canonical_order(log, store, catalog):
    order = asyncio.run(log.add(catalog, "cafe-1", "bean-1", "pour-over", 5, "  great cup  "))

    assert log.orders[0] == order
    assert len(log) == 3
    assert order.id not in {"order-1", "order-2"}
    assert order.notes == "great cup"
    assert order.cafe_name == "Artisan Coffee Lab"
    assert order.taste_profile == ("Floral", "Citrus", "Blueberry")
    assert store.calls[-1][2]["taste_profile"] == "Floral, Citrus, Blueberry"


def test_log_stays_sorted_newest_first(log, catalog):
    async def scenario():
        await log.add(catalog, "cafe-1", "bean-1", "espresso")
        await log.add(catalog, "cafe-2", "bean-3", "chemex", 3)

    asyncio.run(scenario())

    dates = [order.date for order in log.orders]
    assert dates == sorted(dates, reverse=True)
    assert log.orders[0].bean_id == "bean-3"


def test_unknown_bean_is_rejected_without_remote_call(log, store, catalog):
    with pytest.raises(ValidationError):
        asyncio.run(log.add(catalog, "cafe-1", "bean-404", "espresso"))

    assert len(log) == 2
    assert store.calls == []


def test_unknown_cafe_is_rejected(log, catalog):
    with pytest.raises(ValidationError):
        asyncio.run(log.add(catalog, "cafe-404", "bean-1", "espresso"))

    assert len(log) == 2


@pytest.mark.parametrize("method,rating", [("percolator", None), ("espresso", 0), ("espresso", 6)])
def test_invalid_fields_are_rejected(log, catalog, method, rating):
    with pytest.raises(ValidationError):
        asyncio.run(log.add(catalog, "cafe-1", "bean-1", method, rating))

    assert len(log) == 2


def test_remote_failure_leaves_log_untouched(log, store, catalog):
    store.failing.add(("insert", "orders"))

    with pytest.raises(RemoteError):
        asyncio.run(log.add(catalog, "cafe-1", "bean-1", "espresso"))

    assert [order.id for order in log.orders] == ["order-2", "order-1"]


def test_snapshot_survives_bean_changes(log, store, catalog, cafe_rows, bean_rows):
    asyncio.run(log.add(catalog, "cafe-1", "bean-1", "espresso"))
    bean_rows[0]["notes"] = "Smoky"
    changed = build_catalog(cafe_rows, bean_rows)

    rows = asyncio.run(store.list("orders"))
    log.load(rows, changed)

    assert log.orders[0].taste_profile == ("Floral", "Citrus", "Blueberry")
    assert log.orders[1].taste_profile == ("Chocolate", "Caramel")


def test_grouped_by_day(log):
    groups = log.grouped_by_day()

    assert len(groups) == 2
    assert groups[0][0] > groups[1][0]


def test_load_keeps_order_saved_after_listing(log, store, catalog):
    async def scenario():
        rows = await store.list("orders")
        order = await log.add(catalog, "cafe-1", "bean-1", "espresso")
        log.load(rows, catalog)
        return order

    order = asyncio.run(scenario())

    assert log.orders[0] == order
    assert [o.id for o in log.orders[1:]] == ["order-2", "order-1"]


def test_load_drops_older_orders_missing_from_rows(log, catalog, order_rows):
    log.load(order_rows[1:], catalog)
    log.load(order_rows[:1], catalog)

    assert [order.id for order in log.orders] == ["order-2"]
