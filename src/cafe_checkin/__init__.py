"""cafe-checkin: State coordinator for a coffee-discovery and self-checkin app."""

from cafe_checkin.context import AppContext
from cafe_checkin.core import create_app_context
from cafe_checkin.flow import parse_scan_payload
from cafe_checkin.schema import Bean, Cafe, FlowState, Order, ProfileSummary, Screen
from cafe_checkin.view_models import Catalog, build_catalog

__version__ = "0.1.0"

__all__ = [
    "AppContext",
    "create_app_context",
    "parse_scan_payload",
    "build_catalog",
    "Bean",
    "Cafe",
    "Catalog",
    "FlowState",
    "Order",
    "ProfileSummary",
    "Screen",
    "__version__",
]
