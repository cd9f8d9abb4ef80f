"""
Command-line entry point for the AutoBrilho scheduling engine.

Works against the database named by DATABASE_URL, or runs a scripted
demo against an in-memory store with no setup.

Usage:
    python main.py init-db
    python main.py services
    python main.py slots "Lavagem Simples" 2025-06-10
    python main.py book USER_ID "Lavagem Simples" 2025-06-10 09:00
    python main.py status APPOINTMENT_ID confirmed
    python main.py block 2025-06-10 --start 14:00 --end 15:00 --reason "Manutenção"
    python main.py unblock BLOCK_ID
    python main.py demo
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime, time, timedelta
from typing import Optional

from pydantic import ValidationError

from autobrilho.config import settings
from autobrilho.desk import BookingDesk
from autobrilho.errors import SchedulingError
from autobrilho.scheduling.calendar_policy import CalendarWindowPolicy, FixedClock
from autobrilho.scheduling.catalog import Catalog
from autobrilho.scheduling.staff import StaffDesk
from autobrilho.schemas.appointment_schema import AppointmentStatus
from autobrilho.schemas.service_schema import Service
from autobrilho.store.base import Datastore
from autobrilho.store.memory import InMemoryDatastore
from autobrilho.store.sql import SqlDatastore
from autobrilho.utils import format_hhmm

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def _ok(text: str) -> None:
    print(f"{GREEN}{text}{RESET}")


def _fail(text: str) -> None:
    print(f"{RED}{text}{RESET}")


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from None


def _parse_time(value: str) -> time:
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected HH:MM, got {value!r}") from None


def _open_store() -> SqlDatastore:
    return SqlDatastore.from_url(settings.database.url, echo=settings.database.echo)


def _resolve_service(store: Datastore, ref: str) -> Service:
    """Accept a service id or its exact name."""
    catalog = Catalog(store)
    by_name = catalog.find_by_name(ref)
    return by_name if by_name is not None else catalog.get(ref)


# ---------------------------------------------------------------------- #
# Commands
# ---------------------------------------------------------------------- #

def _cmd_init_db(args: argparse.Namespace) -> int:
    store = _open_store()
    store.create_schema()
    created = Catalog(store).seed_defaults()
    _ok(f"Database ready. {len(created)} services seeded.")
    return 0


def _cmd_services(args: argparse.Namespace) -> int:
    desk = BookingDesk(_open_store())
    for service in asyncio.run(desk.list_services()):
        print(
            f"{BOLD}{service.name}{RESET}  {settings.business.currency} {service.price}  "
            f"{service.duration_minutes} min  {DIM}{service.id}{RESET}"
        )
    return 0


def _cmd_slots(args: argparse.Namespace) -> int:
    store = _open_store()
    service = _resolve_service(store, args.service)
    result = asyncio.run(BookingDesk(store).available_slots(service.id, args.date))
    if not result.slots:
        print(f"{YELLOW}{result.message}{RESET}")
        return 0
    print(f"{BOLD}{service.name} on {args.date}:{RESET} "
          + ", ".join(format_hhmm(t) for t in result.slots))
    return 0


def _cmd_book(args: argparse.Namespace) -> int:
    store = _open_store()
    service = _resolve_service(store, args.service)
    result = asyncio.run(
        BookingDesk(store).book(args.user, service.id, args.date, args.time, notes=args.notes)
    )
    if result.success:
        _ok(result.message)
        print(f"{DIM}Appointment id: {result.appointment.id}{RESET}")
        return 0
    _fail(f"[{result.outcome.value}] {result.message}")
    return 75 if result.retryable else 1


def _cmd_status(args: argparse.Namespace) -> int:
    appointment = StaffDesk(_open_store()).set_status(
        args.appointment_id, AppointmentStatus(args.status)
    )
    _ok(f"Appointment {appointment.id} is now {appointment.status.value}.")
    return 0


def _cmd_block(args: argparse.Namespace) -> int:
    blackouts = StaffDesk(_open_store()).blackouts
    if args.start is None and args.end is None:
        block = blackouts.block_day(args.date, reason=args.reason)
    elif args.start is None or args.end is None:
        _fail("A partial block needs both --start and --end.")
        return 2
    else:
        block = blackouts.block_range(args.date, args.start, args.end, reason=args.reason)
    _ok(f"Block {block.id} created.")
    return 0


def _cmd_unblock(args: argparse.Namespace) -> int:
    StaffDesk(_open_store()).blackouts.remove_block(args.block_id)
    _ok(f"Block {args.block_id} removed.")
    return 0


def _cmd_demo(args: argparse.Namespace) -> int:
    """Walk through availability, a block, a booking race and a cancellation."""
    store = InMemoryDatastore()
    policy = CalendarWindowPolicy(clock=FixedClock(args.today))
    staff = StaffDesk(store)
    desk = BookingDesk(store, policy)
    staff.catalog.seed_defaults()
    service = staff.catalog.find_by_name("Lavagem Simples")
    day = args.today + timedelta(days=9)

    async def _scenario() -> None:
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.business.name} - booking demo for {day}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        first = await desk.book("cliente-1", service.id, day.isoformat(), "09:00")
        staff.confirm(first.appointment.id)
        staff.blackouts.block_range(day, time(14), time(15), reason="Manutenção")
        _ok("Booked and confirmed 09:00; blocked 14:00-15:00.")

        avail = await desk.available_slots(service.id, day)
        print(f"Open slots: {', '.join(format_hhmm(t) for t in avail.slots)}")

        second = await desk.book("cliente-2", service.id, day.isoformat(), "09:00")
        _fail(f"Second booking at 09:00 -> {second.outcome.value}")

        await desk.cancel("cliente-1", first.appointment.id)
        avail = await desk.available_slots(service.id, day)
        _ok(f"After cancellation: {', '.join(format_hhmm(t) for t in avail.slots)}")

    asyncio.run(_scenario())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"{settings.business.name} scheduling engine")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and seed the catalog").set_defaults(
        func=_cmd_init_db
    )
    sub.add_parser("services", help="List offerable services").set_defaults(
        func=_cmd_services
    )

    slots = sub.add_parser("slots", help="Show open start times")
    slots.add_argument("service", help="Service id or exact name")
    slots.add_argument("date", type=_parse_date)
    slots.set_defaults(func=_cmd_slots)

    book = sub.add_parser("book", help="Book an appointment")
    book.add_argument("user")
    book.add_argument("service", help="Service id or exact name")
    book.add_argument("date")
    book.add_argument("time")
    book.add_argument("--notes")
    book.set_defaults(func=_cmd_book)

    status = sub.add_parser("status", help="Change an appointment's status")
    status.add_argument("appointment_id")
    status.add_argument("status", choices=[s.value for s in AppointmentStatus])
    status.set_defaults(func=_cmd_status)

    block = sub.add_parser("block", help="Block a whole day or a time range")
    block.add_argument("date", type=_parse_date)
    block.add_argument("--start", type=_parse_time)
    block.add_argument("--end", type=_parse_time)
    block.add_argument("--reason")
    block.set_defaults(func=_cmd_block)

    unblock = sub.add_parser("unblock", help="Remove a block")
    unblock.add_argument("block_id")
    unblock.set_defaults(func=_cmd_unblock)

    demo = sub.add_parser("demo", help="Run a scripted scenario in memory")
    demo.add_argument("--today", type=_parse_date, default=date(2025, 6, 1))
    demo.set_defaults(func=_cmd_demo)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (SchedulingError, ValidationError) as exc:
        _fail(f"{exc.__class__.__name__}: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
