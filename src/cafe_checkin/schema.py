"""Data models for cafe-checkin."""

from datetime import datetime
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

Tab = Literal["map", "scan", "history", "profile"]
FlowStep = Literal["scan", "bean-select", "brew-order"]
FavoriteKind = Literal["cafe", "bean"]
BrewMethod = Literal["espresso", "pour-over", "french-press", "cold-brew", "aeropress", "chemex"]
ScreenKind = Literal[
    "scan",
    "bean-select",
    "brew-order",
    "bean-detail",
    "cafe-detail",
    "map",
    "history",
    "profile",
]

TABS: tuple[str, ...] = get_args(Tab)
BREW_METHODS: tuple[str, ...] = get_args(BrewMethod)


class OpeningHours(BaseModel):
    """Opening hours for a single weekday."""

    day: str
    hours: str


class CafeOffering(BaseModel):
    """Compact café entry embedded in a bean."""

    id: str
    name: str
    distance: str = ""
    rating: float = 0.0
    is_open: bool = True


class Cafe(BaseModel):
    """Café view model with the names of the beans it offers."""

    id: str
    name: str
    lat: float | None = None
    lng: float | None = None
    rating: float = 0.0
    reviews: int = 0
    is_open: bool = True
    distance: str = ""
    image_url: str | None = None
    address: str | None = None
    phone: str | None = None
    hours: list[OpeningHours] = Field(default_factory=list)
    bean_ids: list[str] = Field(default_factory=list)
    beans: list[str] = Field(default_factory=list)


class Bean(BaseModel):
    """Bean view model with the cafés offering it."""

    id: str
    name: str
    origin: str = ""
    roaster: str = ""
    flavor_notes: list[str] = Field(default_factory=list)
    description: str = ""
    roast_level: str = ""
    process: str = ""
    altitude: str = ""
    image_url: str | None = None
    cafe_id: str | None = None
    cafes_offering: list[CafeOffering] = Field(default_factory=list)


class Order(BaseModel):
    """A completed brew check-in. Orders never change once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: datetime
    cafe_id: str
    cafe_name: str
    bean_id: str
    bean_name: str
    brew_method: str
    rating: int | None = None
    notes: str | None = None
    taste_profile: tuple[str, ...] = ()


class FlowState(BaseModel):
    """Snapshot of the ordering session."""

    model_config = ConfigDict(frozen=True)

    active: bool = False
    step: FlowStep = "scan"
    cafe_id: str | None = None
    bean_id: str | None = None
    scan_error: str | None = None


class Screen(BaseModel):
    """The screen the UI should render, with the id it is about."""

    model_config = ConfigDict(frozen=True)

    kind: ScreenKind
    id: str | None = None


class ProfileSummary(BaseModel):
    """Aggregates shown on the profile screen."""

    favorite_cafes: list[Cafe] = Field(default_factory=list)
    favorite_beans: list[Bean] = Field(default_factory=list)
    order_count: int = 0
    top_tastes: list[str] = Field(default_factory=list)
    flavor_preferences: list[str] = Field(default_factory=list)
