"""Reshape stored rows into the denormalized models every screen consumes."""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Any

from cafe_checkin.schema import Bean, Cafe, CafeOffering, OpeningHours, Order, ProfileSummary

logger = logging.getLogger(__name__)

UNKNOWN_CAFE = "Unknown Café"
UNKNOWN_BEAN = "Unknown Bean"
UNKNOWN_METHOD = "Unknown"
MAX_FLAVOR_PREFERENCES = 12
TOP_TASTES = 3


@dataclass(frozen=True)
class Catalog:
    """Café and bean reference data keyed by id."""

    cafes_by_id: dict[str, Cafe] = field(default_factory=dict)
    beans_by_id: dict[str, Bean] = field(default_factory=dict)

    @property
    def cafes(self) -> list[Cafe]:
        return list(self.cafes_by_id.values())

    @property
    def beans(self) -> list[Bean]:
        return list(self.beans_by_id.values())

    def cafe(self, cafe_id: str | None) -> Cafe | None:
        if not cafe_id:
            return None
        return self.cafes_by_id.get(cafe_id)

    def bean(self, bean_id: str | None) -> Bean | None:
        if not bean_id:
            return None
        return self.beans_by_id.get(bean_id)

    def beans_at(self, cafe_id: str | None) -> list[Bean]:
        if not cafe_id:
            return []
        return [bean for bean in self.beans_by_id.values() if bean.cafe_id == cafe_id]


def build_catalog(
    cafe_rows: Iterable[Mapping[str, Any]],
    bean_rows: Iterable[Mapping[str, Any]],
) -> Catalog:
    """Build the café/bean catalog from raw store rows.

    Cafés get the names of the beans they offer, beans get the café that
    offers them. A bean whose café is gone keeps an empty ``cafes_offering``.
    """
    beans: dict[str, Bean] = {}
    for row in bean_rows:
        bean = _build_bean(row)
        if bean is not None:
            beans[bean.id] = bean

    offered: dict[str, list[Bean]] = {}
    for bean in beans.values():
        if bean.cafe_id:
            offered.setdefault(bean.cafe_id, []).append(bean)

    cafes: dict[str, Cafe] = {}
    for row in cafe_rows:
        cafe = _build_cafe(row, offered)
        if cafe is not None:
            cafes[cafe.id] = cafe

    for bean_id, bean in beans.items():
        owner = cafes.get(bean.cafe_id) if bean.cafe_id else None
        if owner is None:
            continue
        beans[bean_id] = bean.model_copy(
            update={
                "cafes_offering": [
                    CafeOffering(
                        id=owner.id,
                        name=owner.name,
                        distance=owner.distance,
                        rating=owner.rating,
                        is_open=owner.is_open,
                    )
                ]
            }
        )

    return Catalog(cafes_by_id=cafes, beans_by_id=beans)


def build_order(row: Mapping[str, Any], catalog: Catalog) -> Order:
    """Join an order row with the catalog to fill its display names."""
    cafe_id = _text(_first(row, "cafe_id", "cafeId"))
    bean_id = _text(_first(row, "bean_id", "beanId"))
    cafe = catalog.cafe(cafe_id)
    bean = catalog.bean(bean_id)

    snapshot = _first(row, "taste_profile", "tasteProfile")
    if snapshot is not None:
        taste_profile = _split_notes(snapshot)
    else:
        taste_profile = list(bean.flavor_notes) if bean else []

    return Order(
        id=_text(row.get("id")),
        date=_parse_timestamp(_first(row, "brewed_at", "created_at")),
        cafe_id=cafe_id,
        cafe_name=cafe.name if cafe else UNKNOWN_CAFE,
        bean_id=bean_id,
        bean_name=bean.name if bean else UNKNOWN_BEAN,
        brew_method=_text(_first(row, "method", "brew_method")) or UNKNOWN_METHOD,
        rating=_coerce_rating(row.get("rating")),
        notes=row.get("notes") or None,
        taste_profile=tuple(taste_profile),
    )


def group_orders_by_day(
    orders: Iterable[Order],
    tz: tzinfo | None = None,
) -> list[tuple[date, list[Order]]]:
    """Group orders by calendar day in the viewer's zone, newest day first."""
    groups: dict[date, list[Order]] = {}
    for order in orders:
        key = order.date.astimezone(tz).date()
        groups.setdefault(key, []).append(order)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


def build_profile(
    catalog: Catalog,
    orders: Iterable[Order],
    favorite_cafe_ids: Iterable[str],
    favorite_bean_ids: Iterable[str],
) -> ProfileSummary:
    """Summarize favorites and taste preferences for the profile screen."""
    orders = list(orders)
    cafe_ids = set(favorite_cafe_ids)
    bean_ids = set(favorite_bean_ids)
    favorite_cafes = [cafe for cafe in catalog.cafes if cafe.id in cafe_ids]
    favorite_beans = [bean for bean in catalog.beans if bean.id in bean_ids]

    counts = Counter(tag for order in orders for tag in order.taste_profile)
    top_tastes = [tag for tag, _ in counts.most_common(TOP_TASTES)]

    preferences: dict[str, None] = {}
    for bean in favorite_beans:
        for order in orders:
            if order.bean_id == bean.id:
                preferences.update(dict.fromkeys(order.taste_profile))
    preferences.update(dict.fromkeys(top_tastes))

    return ProfileSummary(
        favorite_cafes=favorite_cafes,
        favorite_beans=favorite_beans,
        order_count=len(orders),
        top_tastes=top_tastes,
        flavor_preferences=list(preferences)[:MAX_FLAVOR_PREFERENCES],
    )


def _build_cafe(row: Mapping[str, Any], offered: Mapping[str, list[Bean]]) -> Cafe | None:
    cafe_id = _text(row.get("id"))
    if not cafe_id:
        logger.debug("skipping cafe row without id: %r", row)
        return None

    beans = offered.get(cafe_id, [])
    return Cafe(
        id=cafe_id,
        name=_text(row.get("name")) or cafe_id,
        lat=_coerce_coordinate(row.get("lat")),
        lng=_coerce_coordinate(row.get("lng")),
        rating=_coerce_float(row.get("rating")),
        reviews=int(_coerce_float(row.get("reviews"))),
        is_open=_coerce_bool(_first(row, "is_open", "isOpen"), default=True),
        distance=_text(row.get("distance")),
        image_url=_first(row, "image_url", "imageUrl"),
        address=row.get("address"),
        phone=row.get("phone"),
        hours=_parse_hours(_first(row, "opening_hours", "hours")),
        bean_ids=[bean.id for bean in beans],
        beans=[bean.name for bean in beans],
    )


def _build_bean(row: Mapping[str, Any]) -> Bean | None:
    bean_id = _text(row.get("id"))
    if not bean_id:
        logger.debug("skipping bean row without id: %r", row)
        return None

    raw_notes = _first(row, "notes", "flavor_notes")
    flavor_notes = _split_notes(raw_notes)
    description = row.get("description") or (raw_notes if isinstance(raw_notes, str) else "")
    return Bean(
        id=bean_id,
        name=_text(row.get("name")) or bean_id,
        origin=_text(row.get("origin")),
        roaster=_text(row.get("roaster")),
        flavor_notes=flavor_notes,
        description=description,
        roast_level=_text(row.get("roast_level")),
        process=_text(row.get("process")),
        altitude=_text(row.get("altitude")),
        image_url=_first(row, "image_url", "imageUrl"),
        cafe_id=_text(_first(row, "cafe_id", "cafeId")) or None,
    )


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_coordinate(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _coerce_float(value: Any) -> float:
    number = _coerce_coordinate(value)
    return number if number is not None else 0.0


def _coerce_bool(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _coerce_rating(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        rating = int(value)
    except (TypeError, ValueError):
        return None
    return rating if 1 <= rating <= 5 else None


def _split_notes(value: Any) -> list[str]:
    if not value:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [str(item).strip() for item in items if str(item).strip()]


def _parse_hours(value: Any) -> list[OpeningHours]:
    if not isinstance(value, list):
        return []
    hours: list[OpeningHours] = []
    for item in value:
        if isinstance(item, Mapping) and item.get("day") and item.get("hours"):
            hours.append(OpeningHours(day=str(item["day"]), hours=str(item["hours"])))
    return hours


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning("unparseable order timestamp %r, using now", value)
            parsed = datetime.now(timezone.utc)
    else:
        parsed = datetime.now(timezone.utc)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
