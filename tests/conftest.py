"""Shared fixtures for cafe-checkin tests."""

import asyncio

import pytest

from cafe_checkin.context import AppContext
from cafe_checkin.exceptions import RemoteError
from cafe_checkin.navigation import MemoryHistory, MemoryPreferences
from cafe_checkin.notifications import Notifier
from cafe_checkin.store.memory import MemoryStore


class FlakyStore(MemoryStore):
    """MemoryStore that records writes and fails the operations listed in ``failing``."""

    def __init__(self, seed=None):
        super().__init__(seed)
        self.failing: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str, dict]] = []

    async def list(self, collection):
        if ("list", collection) in self.failing:
            raise RemoteError(f"list {collection} rejected")
        return await super().list(collection)

    async def insert(self, collection, fields):
        self.calls.append(("insert", collection, dict(fields)))
        if ("insert", collection) in self.failing:
            raise RemoteError(f"insert {collection} rejected")
        return await super().insert(collection, fields)

    async def delete(self, collection, matching):
        self.calls.append(("delete", collection, dict(matching)))
        if ("delete", collection) in self.failing:
            raise RemoteError(f"delete {collection} rejected")
        await super().delete(collection, matching)


@pytest.fixture
def cafe_rows():
    return [
        {
            "id": "cafe-1",
            "name": "Artisan Coffee Lab",
            "lat": "37.7749",
            "lng": -122.4194,
            "rating": 4.8,
            "reviews": 234,
            "is_open": True,
            "distance": "0.3 mi",
            "address": "123 Mission Street, San Francisco, CA 94103",
        },
        {
            "id": "cafe-2",
            "name": "Brew & Co.",
            "lat": "unknown",
            "lng": None,
            "rating": 4.9,
            "reviews": 189,
            "is_open": False,
        },
    ]


@pytest.fixture
def bean_rows():
    return [
        {
            "id": "bean-1",
            "name": "Ethiopian Yirgacheffe",
            "origin": "Yirgacheffe, Ethiopia",
            "roaster": "Blue Bottle Coffee",
            "notes": "Floral, Citrus, Blueberry",
            "roast_level": "Light",
            "process": "Washed",
            "altitude": "1,700-2,200m",
            "cafe_id": "cafe-1",
        },
        {
            "id": "bean-2",
            "name": "Colombian Supremo",
            "notes": "Chocolate, Caramel",
            "cafe_id": "cafe-1",
        },
        {
            "id": "bean-3",
            "name": "Kenyan AA",
            "notes": "Blackcurrant, Winey",
            "cafe_id": "cafe-2",
        },
        {
            "id": "bean-9",
            "name": "Orphan Bean",
            "notes": "Earthy",
            "cafe_id": "cafe-gone",
        },
    ]


@pytest.fixture
def favorite_rows():
    return [
        {"id": "fav-1", "cafe_id": "cafe-2"},
        {"id": "fav-2", "bean_id": "bean-1"},
    ]


@pytest.fixture
def order_rows():
    return [
        {
            "id": "order-2",
            "created_at": "2025-03-02T09:30:00+00:00",
            "cafe_id": "cafe-1",
            "bean_id": "bean-2",
            "method": "espresso",
            "rating": 4,
        },
        {
            "id": "order-1",
            "created_at": "2025-03-01T08:00:00+00:00",
            "cafe_id": "cafe-1",
            "bean_id": "bean-1",
            "method": "pour-over",
            "rating": 5,
            "notes": "Bright",
        },
    ]


@pytest.fixture
def store(cafe_rows, bean_rows, favorite_rows, order_rows):
    return FlakyStore(
        {
            "cafes": cafe_rows,
            "beans": bean_rows,
            "favorites": favorite_rows,
            "orders": order_rows,
        }
    )


@pytest.fixture
def notifier(mocker):
    return mocker.MagicMock(spec=Notifier)


@pytest.fixture
def history():
    return MemoryHistory()


@pytest.fixture
def preferences():
    return MemoryPreferences()


@pytest.fixture
def context(store, notifier, history, preferences):
    ctx = AppContext(store, notifier=notifier, history=history, preferences=preferences)
    assert asyncio.run(ctx.load()) is True
    return ctx
