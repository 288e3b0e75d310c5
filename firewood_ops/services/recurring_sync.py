"""
Recurring order sync

Expands active recurring orders into delivery stops on the master dispatch
schedule for one date. Safe to re-run: a stop is created at most once per
(schedule, recurring order) pair.

Writes are not wrapped in one transaction. The schedule and every stop
commit on their own, so a failure part way through leaves the stops that
were already created in place; the next run picks up the rest.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from firewood_ops.crud import dispatch as dispatch_crud
from firewood_ops.services.errors import (
    FatalStoreFailure,
    LookupFailure,
    PartialInsertFailure,
    ScheduleConflict,
    SyncTimeout,
    SyncValidationError,
)
from firewood_ops.utils.recurrence import WEEKLY, frequency_applies, normalize_frequency, weekday_name

log = logging.getLogger(__name__)

# Errors meaning the store itself is gone rather than one row being bad
CONNECTION_ERRORS = (OperationalError, InterfaceError)


@dataclass
class SyncCandidate:
    """Plain copy of a recurring order and its customer.

    Taken before any writes so a rollback cannot expire what the loop reads.
    """
    order_id: str
    frequency: Optional[str]
    created_at: Optional[datetime]
    items: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    customer_phone: Optional[str] = None

    @classmethod
    def from_order(cls, order) -> "SyncCandidate":
        customer = order.customer
        return cls(
            order_id=order.id,
            frequency=order.frequency,
            created_at=order.created_at,
            items=order.items or "",
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else None,
            customer_address=customer.address if customer else None,
            customer_phone=customer.phone if customer else None,
        )


@dataclass
class SyncResult:
    schedule_id: str
    schedule_number: str
    sync_date: date
    stops_created: int = 0
    # (order id, reason) for qualifying orders that did not get a new stop
    skipped: List[Tuple[str, str]] = field(default_factory=list)

    def skip(self, order_id: str, reason: str):
        self.skipped.append((order_id, reason))


def parse_sync_date(value) -> date:
    """Accepts a date or an ISO 'YYYY-MM-DD' string (a full ISO timestamp is cut to its date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise SyncValidationError("Date parameter is required")

    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    # Browser toISOString() ends in Z, which fromisoformat only reads from 3.11
    if raw[-1:] in ("Z", "z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        raise SyncValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")


async def _create_schedule(db: AsyncSession, target_date: date):
    schedule_number = dispatch_crud.schedule_number_for(target_date)
    try:
        schedule = await dispatch_crud.create_schedule(db, target_date, schedule_number)
    except IntegrityError as exc:
        await db.rollback()
        raise ScheduleConflict(f"Schedule for {target_date} was created concurrently") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        raise FatalStoreFailure(f"Could not create schedule for {target_date}") from exc
    log.info("Created new schedule: %s", schedule.schedule_number)
    return schedule


async def resolve_schedule(db: AsyncSession, target_date: date) -> Tuple[str, str]:
    """Find the master schedule for the date or create it. Returns (id, number)."""
    try:
        schedule = await dispatch_crud.find_schedule_by_date(db, target_date)
    except SQLAlchemyError as exc:
        raise LookupFailure(f"Could not look up schedule for {target_date}") from exc

    if schedule:
        log.info("Using existing schedule: %s", schedule.schedule_number)
        return schedule.id, schedule.schedule_number

    try:
        schedule = await _create_schedule(db, target_date)
    except ScheduleConflict:
        # Lost the race; the unique date constraint guarantees a winner exists
        try:
            schedule = await dispatch_crud.find_schedule_by_date(db, target_date)
        except SQLAlchemyError as exc:
            raise LookupFailure(f"Could not re-read schedule for {target_date}") from exc
        if not schedule:
            raise FatalStoreFailure(f"Schedule for {target_date} conflicted but could not be found")
        log.info("Schedule %s created concurrently, reusing it", schedule.schedule_number)

    return schedule.id, schedule.schedule_number


async def _materialize_stop(db: AsyncSession, schedule_id: str, candidate: SyncCandidate, frequency_label: str):
    """Insert the stop for one candidate. Returns False when it already existed."""
    try:
        await dispatch_crud.create_stop(
            db,
            master_schedule_id=schedule_id,
            customer_id=candidate.customer_id,
            customer_name=candidate.customer_name or "",
            customer_address=candidate.customer_address or "",
            customer_phone=candidate.customer_phone or "",
            items=candidate.items,
            status="pending",
            is_recurring=True,
            recurring_order_id=candidate.order_id,
            notes=f"Auto-generated from recurring order ({frequency_label})",
        )
    except IntegrityError as exc:
        await db.rollback()
        # A concurrent sync may have inserted the same pair
        try:
            existing = await dispatch_crud.find_stop(db, schedule_id, candidate.order_id)
        except CONNECTION_ERRORS:
            raise
        except SQLAlchemyError:
            existing = None
        if existing:
            return False
        raise PartialInsertFailure(candidate.order_id, str(exc.orig)) from exc
    except CONNECTION_ERRORS:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PartialInsertFailure(candidate.order_id, str(exc)) from exc
    return True


async def sync_recurring_orders(db: AsyncSession, target_date: date) -> SyncResult:
    weekday = weekday_name(target_date)
    log.info("Syncing recurring orders for %s (%s)", target_date.isoformat(), weekday)

    try:
        orders = await dispatch_crud.list_active_recurring_orders(db, weekday)
    except SQLAlchemyError as exc:
        raise LookupFailure(f"Could not load recurring orders for {weekday}") from exc
    candidates = [SyncCandidate.from_order(o) for o in orders]
    log.info("Found %s recurring orders for %s", len(candidates), weekday)

    schedule_id, schedule_number = await resolve_schedule(db, target_date)
    result = SyncResult(schedule_id=schedule_id, schedule_number=schedule_number, sync_date=target_date)

    for candidate in candidates:
        frequency = normalize_frequency(candidate.frequency)
        if frequency is None and candidate.frequency:
            log.warning(
                "Recurring order %s has unrecognized frequency %r, treating as weekly",
                candidate.order_id, candidate.frequency,
            )

        if not frequency_applies(frequency or WEEKLY, candidate.created_at, target_date):
            log.info("Skipping order %s based on frequency rules", candidate.order_id)
            continue

        if not candidate.customer_id:
            log.warning("Order %s has no customer data, skipping", candidate.order_id)
            result.skip(candidate.order_id, "no customer")
            continue

        try:
            existing = await dispatch_crud.find_stop(db, schedule_id, candidate.order_id)
        except CONNECTION_ERRORS as exc:
            raise FatalStoreFailure(
                f"Store unavailable while checking stops for order {candidate.order_id}",
                stops_created=result.stops_created,
                schedule_id=schedule_id,
            ) from exc
        except SQLAlchemyError as exc:
            log.error("Error checking for existing stops for order %s: %s", candidate.order_id, exc)
            await db.rollback()
            result.skip(candidate.order_id, "stop lookup failed")
            continue

        if existing:
            log.info("Stop already exists for recurring order %s", candidate.order_id)
            result.skip(candidate.order_id, "already scheduled")
            continue

        label = frequency or candidate.frequency or WEEKLY
        try:
            created = await _materialize_stop(db, schedule_id, candidate, label)
        except PartialInsertFailure as exc:
            log.error("Error creating stop: %s", exc)
            result.skip(candidate.order_id, "insert failed")
            continue
        except CONNECTION_ERRORS as exc:
            raise FatalStoreFailure(
                f"Store unavailable while creating stop for order {candidate.order_id}",
                stops_created=result.stops_created,
                schedule_id=schedule_id,
            ) from exc

        if not created:
            log.info("Stop for recurring order %s was created concurrently", candidate.order_id)
            result.skip(candidate.order_id, "already scheduled")
            continue

        result.stops_created += 1
        log.info("Created stop for recurring order %s", candidate.order_id)

    log.info(
        "Recurring sync for %s finished: %s stops created on %s, %s skipped",
        target_date.isoformat(), result.stops_created, schedule_number, len(result.skipped),
    )
    return result


async def run_sync(db: AsyncSession, raw_date, timeout: Optional[float] = None) -> SyncResult:
    """Validate the input date and run the sync under an overall timeout."""
    target_date = parse_sync_date(raw_date)
    try:
        return await asyncio.wait_for(sync_recurring_orders(db, target_date), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise SyncTimeout(f"Recurring order sync for {target_date} timed out after {timeout}s") from exc
