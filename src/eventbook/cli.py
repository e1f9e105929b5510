"""
EventBook CLI entrypoint.

Intended for local administration and quick checks without an HTTP client:
- `serve`: run the API with uvicorn
- `expand-dates`: print the dates a recurrence produces (no storage involved)
- `nearby`: proximity search over stored events
- `create-admin`: create an administrator account
- `export-bookings`: write the bookings CSV for a date range
"""

from __future__ import annotations

import argparse
import getpass
import json
from typing import Any

from eventbook.api.app import build_store
from eventbook.config.settings import get_settings
from eventbook.core.env import resolve_project_path
from eventbook.core.errors import EventBookError
from eventbook.core.logging import configure_logging
from eventbook.core.time import parse_date, parse_datetime
from eventbook.domain.models import RegisterRequest
from eventbook.scheduling.recurrence import RECURRENCE_TYPES, RecurrenceRequest, expand, normalize_frequency
from eventbook.services.bookings import export_bookings_csv
from eventbook.services.events import find_nearby_events
from eventbook.services.users import register_user


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "eventbook.api.app:build_default_app",
        factory=True,
        host=args.host,
        port=int(args.port),
        reload=bool(args.reload),
    )
    return 0


def _cmd_expand_dates(args: argparse.Namespace) -> int:
    settings = get_settings()
    selectors = args.frequency or (["0"] if args.type == "daily" else [])
    if not selectors:
        raise ValueError(f"--frequency is required for {args.type} recurrences")
    request = RecurrenceRequest(
        start_date=parse_date(args.start),
        end_date=parse_date(args.end),
        recurrence_type=args.type,
        frequency=normalize_frequency(selectors),
    )
    dedupe = settings.scheduling.dedupe_dates if args.dedupe is None else bool(args.dedupe)
    dates = expand(request, dedupe=dedupe)

    if args.json:
        print(json.dumps([d.isoformat() for d in dates], indent=2))
        return 0
    for d in dates:
        print(d.isoformat())
    print(f"{len(dates)} date(s)")
    return 0


def _cmd_nearby(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = build_store(settings)
    events = find_nearby_events(store, latitude=args.lat, longitude=args.lon, radius=args.radius)
    if args.sort:
        events = sorted(events, key=lambda e: e.distance_km)

    if args.json:
        print(json.dumps([e.model_dump(mode="json") for e in events], ensure_ascii=False, indent=2))
        return 0
    for i, e in enumerate(events, start=1):
        print(f"{i:>2}. {e.name} @ {e.location}  {e.distance_km:.2f} km  ({e.date_time.isoformat()})")
    return 0


def _cmd_create_admin(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = build_store(settings)
    password = args.password or getpass.getpass("Password: ")
    payload = RegisterRequest(
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        phone_number=args.phone,
        date_of_birth=parse_date(args.date_of_birth),
        address=args.address,
        password=password,
    )
    user = register_user(store, payload, settings.auth, is_admin=True)
    print(f"Created admin {user.email} ({user.id})")
    return 0


def _cmd_export_bookings(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = build_store(settings)
    tz = settings.app.timezone
    out_dir = resolve_project_path(args.out_dir or settings.exports.dir)
    path, count = export_bookings_csv(
        store,
        parse_datetime(args.from_date, tz),
        parse_datetime(args.to_date, tz),
        out_dir=out_dir,
        timezone=tz,
    )
    print(f"Exported {count} booking(s) to {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the EventBook CLI."""
    parser = argparse.ArgumentParser(prog="eventbook")
    parser.add_argument("--log-level", dest="log_level", default=None, help="Override app.log_level (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    srv = sub.add_parser("serve", help="Run the HTTP API.")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--reload", action="store_true")
    srv.set_defaults(func=_cmd_serve)

    exp = sub.add_parser("expand-dates", help="Print the occurrence dates of a recurrence.")
    exp.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    exp.add_argument("--end", required=True, help="End date (YYYY-MM-DD), inclusive")
    exp.add_argument("--type", required=True, choices=list(RECURRENCE_TYPES))
    exp.add_argument(
        "--frequency",
        action="append",
        default=[],
        help="Repeatable selector: weekday 0-6 (Sunday=0) for weekly, day of month for monthly.",
    )
    dd = exp.add_mutually_exclusive_group()
    dd.add_argument("--dedupe", dest="dedupe", action="store_true", default=None)
    dd.add_argument("--no-dedupe", dest="dedupe", action="store_false")
    exp.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    exp.set_defaults(func=_cmd_expand_dates)

    near = sub.add_parser("nearby", help="Find stored events inside a +/- radius degree box.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lon", required=True, type=float)
    near.add_argument("--radius", required=True, type=float, help="Half-width of the box, in degrees")
    near.add_argument("--sort", action="store_true", help="Sort by distance (closest first)")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    adm = sub.add_parser("create-admin", help="Create an administrator account.")
    adm.add_argument("--email", required=True)
    adm.add_argument("--first-name", dest="first_name", required=True)
    adm.add_argument("--last-name", dest="last_name", required=True)
    adm.add_argument("--phone", required=True, help="10-character phone number")
    adm.add_argument("--date-of-birth", dest="date_of_birth", required=True, help="YYYY-MM-DD")
    adm.add_argument("--address", required=True)
    adm.add_argument("--password", default=None, help="Prompted for when omitted")
    adm.set_defaults(func=_cmd_create_admin)

    ex = sub.add_parser("export-bookings", help="Write a bookings CSV for events in a date range.")
    ex.add_argument("--from", dest="from_date", required=True, help="ISO date/datetime")
    ex.add_argument("--to", dest="to_date", required=True, help="ISO date/datetime")
    ex.add_argument("--out-dir", dest="out_dir", default=None)
    ex.set_defaults(func=_cmd_export_bookings)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m eventbook.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (EventBookError, ValueError) as e:
        print(f"error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
