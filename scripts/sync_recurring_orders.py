# scripts/sync_recurring_orders.py
# Scheduled entry point for the recurring order sync (cron, systemd timer, ...)

import argparse
import asyncio
import sys
from datetime import date, timedelta

from firewood_ops.config import settings
from firewood_ops.db import async_session
from firewood_ops.services.errors import SyncError, SyncValidationError
from firewood_ops.services.recurring_sync import parse_sync_date, run_sync


async def sync_range(start: date, days: int = 1, session_factory=async_session) -> int:
    """Sync `days` consecutive dates from start. Returns the number of failed dates."""
    failures = 0
    async with session_factory() as session:
        for offset in range(days):
            target = start + timedelta(days=offset)
            try:
                result = await run_sync(session, target, timeout=settings.sync_timeout_seconds)
            except SyncError as exc:
                failures += 1
                await session.rollback()
                print(f"❌ {target.isoformat()}: {exc}")
                continue
            print(
                f"✅ {target.isoformat()}: added {result.stops_created} recurring stops "
                f"to schedule {result.schedule_number}"
            )
    return failures


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Turn recurring orders into delivery stops")
    parser.add_argument("--date", type=str, help="First date to sync (YYYY-MM-DD), default today")
    parser.add_argument("--days", type=int, default=1, help="Number of consecutive days to sync")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.days < 1:
        print("❌ --days must be at least 1")
        return 2
    try:
        start = parse_sync_date(args.date) if args.date else date.today()
    except SyncValidationError as exc:
        print(f"❌ {exc}")
        return 2

    failures = asyncio.run(sync_range(start, args.days))
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())


### Action	Command
#Sync today	python -m scripts.sync_recurring_orders
#Sync a date	python -m scripts.sync_recurring_orders --date 2024-01-15
#Sync next week	python -m scripts.sync_recurring_orders --days 7
