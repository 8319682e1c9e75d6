"""Command-line interface for cafe-checkin."""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date

from cafe_checkin import __version__
from cafe_checkin.config import Settings
from cafe_checkin.core import create_app_context
from cafe_checkin.exceptions import CafeCheckinError
from cafe_checkin.notifications import Notifier
from cafe_checkin.schema import BREW_METHODS, Bean, Cafe, Order, ProfileSummary


class ConsoleNotifier(Notifier):
    """Prints notifications to stderr so JSON output stays clean."""

    def success(self, message: str) -> None:
        print(message, file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cafe-checkin",
        description="Browse cafés and beans, manage favorites and record brews",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cafe-checkin {__version__}",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("cafes", help="List cafés")
    commands.add_parser("beans", help="List beans")
    commands.add_parser("history", help="Show order history by day")
    commands.add_parser("profile", help="Show favorites and taste preferences")

    favorite = commands.add_parser("favorite", help="Toggle a favorite café or bean")
    favorite.add_argument("kind", choices=["cafe", "bean"])
    favorite.add_argument("id")

    order = commands.add_parser("order", help="Record a brew")
    order.add_argument("cafe_id")
    order.add_argument("bean_id")
    order.add_argument("method", choices=BREW_METHODS)
    order.add_argument("--rating", type=int, choices=range(1, 6), help="1-5 stars")
    order.add_argument("--note", help="Free-text tasting note")

    args = parser.parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(_run(args, settings))
    except CafeCheckinError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    context = create_app_context(settings, notifier=ConsoleNotifier())
    if not await context.load():
        return 1

    if args.command == "favorite":
        now_favorite = context.toggle_favorite(args.kind, args.id)
        await context.settle()
        print(f"{args.kind} {args.id}: {'added to' if now_favorite else 'removed from'} favorites")
        return 0

    if args.command == "order":
        saved = await context.add_order(args.cafe_id, args.bean_id, args.method, args.rating, args.note)
        if saved is None:
            return 1
        _emit(args.json, [saved], _print_orders)
        return 0

    if args.command == "cafes":
        _emit(args.json, context.catalog.cafes, _print_cafes)
    elif args.command == "beans":
        _emit(args.json, context.catalog.beans, _print_beans)
    elif args.command == "history":
        if args.json:
            _emit(True, list(context.orders.orders), _print_orders)
        else:
            _print_history(context.grouped_orders())
    elif args.command == "profile":
        profile = context.profile
        if args.json:
            print(profile.model_dump_json(indent=2))
        else:
            _print_profile(profile)
    return 0


def _emit(as_json: bool, items: list, printer) -> None:
    if as_json:
        payload = [item.model_dump(mode="json") for item in items]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        printer(items)


def _print_cafes(cafes: list[Cafe]) -> None:
    print()
    for cafe in cafes:
        status = "open" if cafe.is_open else "closed"
        print(f"  {cafe.name}  [{cafe.id}]  {cafe.rating:.1f} ({cafe.reviews})  {status}")
        print(f"  {'Beans:':<14} {_format_list(cafe.beans) or '-'}")
        print(f"  {'Location:':<14} {_format_location(cafe) or '-'}")
        print()


def _print_beans(beans: list[Bean]) -> None:
    print()
    for bean in beans:
        fields = [
            ("Roaster", bean.roaster),
            ("Origin", bean.origin),
            ("Process", bean.process),
            ("Roast Level", bean.roast_level),
            ("Flavor Notes", _format_list(bean.flavor_notes)),
            ("Offered At", _format_list([cafe.name for cafe in bean.cafes_offering])),
        ]
        print(f"  {bean.name}  [{bean.id}]")
        for label, value in fields:
            display = value if value else "-"
            print(f"  {label + ':':<14} {display}")
        print()


def _print_orders(orders: list[Order]) -> None:
    for order in orders:
        stars = "*" * order.rating if order.rating else "-"
        print(f"  {order.date.astimezone():%H:%M}  {order.bean_name} @ {order.cafe_name}  {order.brew_method}  {stars}")
        if order.notes:
            print(f"         {order.notes}")


def _print_history(groups: list[tuple[date, list[Order]]]) -> None:
    if not groups:
        print("  No orders yet")
        return
    for day, orders in groups:
        print()
        print(f"  {day:%B %d, %Y}")
        _print_orders(orders)
    print()


def _print_profile(profile: ProfileSummary) -> None:
    print()
    fields = [
        ("Orders", str(profile.order_count)),
        ("Top Tastes", _format_list(profile.top_tastes)),
        ("Preferences", _format_list(profile.flavor_preferences)),
        ("Fav. Cafés", _format_list([cafe.name for cafe in profile.favorite_cafes])),
        ("Fav. Beans", _format_list([bean.name for bean in profile.favorite_beans])),
    ]
    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<14} {display}")
    print()


def _format_location(cafe: Cafe) -> str | None:
    """Format coordinates, if known."""
    if cafe.lat is None or cafe.lng is None:
        return cafe.address
    return f"{cafe.lat:.5f}, {cafe.lng:.5f}"


def _format_list(items: list[str] | None) -> str | None:
    """Format list as comma-separated string."""
    if not items:
        return None
    return ", ".join(items)


if __name__ == "__main__":
    sys.exit(main())
