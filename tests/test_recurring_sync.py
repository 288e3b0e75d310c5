from datetime import date, datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from firewood_ops.crud import dispatch as dispatch_crud
from firewood_ops.models.dispatch import DeliveryStop, DispatchSchedule
from firewood_ops.services.errors import (
    FatalStoreFailure,
    LookupFailure,
    SyncTimeout,
    SyncValidationError,
)
from firewood_ops.services.recurring_sync import (
    parse_sync_date,
    resolve_schedule,
    run_sync,
    sync_recurring_orders,
)

MONDAY = date(2024, 1, 15)


async def count_stops(db):
    result = await db.execute(select(func.count()).select_from(DeliveryStop))
    return result.scalar()


async def count_schedules(db):
    result = await db.execute(select(func.count()).select_from(DispatchSchedule))
    return result.scalar()


# --------- Input validation ---------

@pytest.mark.parametrize("raw", [None, "", "tomorrow", "2024-13-01", 20240115])
def test_parse_sync_date_rejects_bad_input(raw):
    with pytest.raises(SyncValidationError):
        parse_sync_date(raw)


def test_parse_sync_date_accepts_iso_forms():
    assert parse_sync_date("2024-01-15") == MONDAY
    assert parse_sync_date(" 2024-01-15 ") == MONDAY
    assert parse_sync_date("2024-01-15T08:00:00") == MONDAY
    assert parse_sync_date("2024-01-15T08:00:00.000Z") == MONDAY
    assert parse_sync_date(MONDAY) == MONDAY
    assert parse_sync_date(datetime(2024, 1, 15, 10)) == MONDAY


async def test_validation_error_does_no_work(db):
    with pytest.raises(SyncValidationError):
        await run_sync(db, "not-a-date")
    assert await count_schedules(db) == 0


# --------- Core behaviour ---------

async def test_end_to_end_weekly_and_biweekly(db, make_customer, make_order):
    customer_a = await make_customer(name="Customer A")
    customer_b = await make_customer(name="Customer B")
    await make_order(customer_a, frequency="weekly")
    await make_order(customer_b, frequency="biweekly", created_at=datetime(2024, 1, 1, 8, 0))

    first = await sync_recurring_orders(db, MONDAY)
    assert first.stops_created == 2
    assert await count_schedules(db) == 1

    second = await sync_recurring_orders(db, MONDAY)
    assert second.stops_created == 0
    assert second.schedule_id == first.schedule_id
    assert await count_stops(db) == 2


async def test_created_stop_fields(db, make_customer, make_order):
    customer = await make_customer(name="Pine Motel", address="4 Lake St", phone="555-0199")
    order = await make_order(customer, frequency="weekly", items="1 face cord maple")

    result = await sync_recurring_orders(db, MONDAY)

    stop = await dispatch_crud.find_stop(db, result.schedule_id, order.id)
    assert stop.customer_id == customer.id
    assert stop.customer_name == "Pine Motel"
    assert stop.customer_address == "4 Lake St"
    assert stop.customer_phone == "555-0199"
    assert stop.items == "1 face cord maple"
    assert stop.status == "pending"
    assert stop.is_recurring is True
    assert stop.notes == "Auto-generated from recurring order (weekly)"


async def test_stop_note_uses_normalized_frequency(db, make_customer, make_order):
    order_id = (await make_order(await make_customer(), frequency="bi-weekly")).id

    result = await sync_recurring_orders(db, MONDAY)

    stop = await dispatch_crud.find_stop(db, result.schedule_id, order_id)
    assert stop.notes == "Auto-generated from recurring order (biweekly)"


async def test_customer_edits_do_not_rewrite_existing_stops(db, make_customer, make_order):
    customer = await make_customer(name="Old Name")
    order = await make_order(customer)
    result = await sync_recurring_orders(db, MONDAY)

    customer.name = "New Name"
    await db.commit()

    stop = await dispatch_crud.find_stop(db, result.schedule_id, order.id)
    assert stop.customer_name == "Old Name"


async def test_schedule_created_as_draft_with_sequence_number(db, make_customer, make_order):
    await make_order(await make_customer())
    result = await sync_recurring_orders(db, MONDAY)

    schedule = await dispatch_crud.find_schedule_by_date(db, MONDAY)
    assert schedule.id == result.schedule_id
    assert schedule.schedule_number == "DS-20240115-01"
    assert schedule.status == "draft"


async def test_new_date_gets_new_schedule(db, make_customer, make_order):
    await make_order(await make_customer())
    first = await sync_recurring_orders(db, MONDAY)
    other = await sync_recurring_orders(db, date(2024, 1, 22))
    assert other.schedule_id != first.schedule_id


async def test_zero_candidates_still_resolves_schedule(db):
    result = await sync_recurring_orders(db, MONDAY)
    assert result.stops_created == 0
    assert result.schedule_number == "DS-20240115-01"


async def test_weekday_gating(db, make_customer, make_order):
    await make_order(await make_customer(), frequency="weekly", preferred_day="monday")

    tuesday = await sync_recurring_orders(db, date(2024, 1, 16))
    assert tuesday.stops_created == 0

    monday = await sync_recurring_orders(db, MONDAY)
    assert monday.stops_created == 1


async def test_preferred_day_match_is_case_insensitive(db, make_customer, make_order):
    await make_order(await make_customer(), preferred_day="Monday")
    result = await sync_recurring_orders(db, MONDAY)
    assert result.stops_created == 1


async def test_inactive_orders_never_sync(db, make_customer, make_order):
    await make_order(await make_customer(), active_status=False)
    result = await sync_recurring_orders(db, MONDAY)
    assert result.stops_created == 0
    assert await count_stops(db) == 0


async def test_biweekly_off_week_skipped(db, make_customer, make_order):
    await make_order(await make_customer(), frequency="biweekly", created_at=datetime(2024, 1, 1))
    result = await sync_recurring_orders(db, date(2024, 1, 8))
    assert result.stops_created == 0


async def test_monthly_only_first_occurrence(db, make_customer, make_order):
    await make_order(await make_customer(), frequency="monthly", preferred_day="friday")

    first = await sync_recurring_orders(db, date(2024, 1, 5))
    assert first.stops_created == 1
    for day in (12, 19, 26):
        result = await sync_recurring_orders(db, date(2024, 1, day))
        assert result.stops_created == 0


async def test_unknown_frequency_treated_as_weekly(db, make_customer, make_order, caplog):
    await make_order(await make_customer(), frequency="fortnightly")

    with caplog.at_level("WARNING"):
        result = await sync_recurring_orders(db, MONDAY)

    assert result.stops_created == 1
    assert "unrecognized frequency" in caplog.text


async def test_missing_customer_skipped_without_aborting(db, make_customer, make_order):
    orphan = await make_order(None)
    await make_order(await make_customer(name="Has Customer"))

    result = await sync_recurring_orders(db, MONDAY)

    assert result.stops_created == 1
    assert (orphan.id, "no customer") in result.skipped


# --------- Failure handling ---------

async def test_partial_insert_failure_continues_batch(db, make_customer, make_order, monkeypatch):
    bad_id = (await make_order(await make_customer(name="Bad"))).id
    await make_order(await make_customer(name="Good"))

    real_create_stop = dispatch_crud.create_stop

    async def flaky_create_stop(session, **fields):
        if fields["recurring_order_id"] == bad_id:
            raise IntegrityError("INSERT INTO delivery_stops", {}, Exception("FOREIGN KEY constraint failed"))
        return await real_create_stop(session, **fields)

    monkeypatch.setattr(dispatch_crud, "create_stop", flaky_create_stop)

    result = await sync_recurring_orders(db, MONDAY)

    assert result.stops_created == 1
    assert (bad_id, "insert failed") in result.skipped
    assert await count_stops(db) == 1


async def test_unique_violation_counts_as_existing(db, make_customer, make_order, monkeypatch):
    order_id = (await make_order(await make_customer())).id
    schedule_id, _ = await resolve_schedule(db, MONDAY)
    await dispatch_crud.create_stop(
        db, master_schedule_id=schedule_id, customer_name="Racer",
        recurring_order_id=order_id, is_recurring=True,
    )

    real_find_stop = dispatch_crud.find_stop
    calls = []

    # First lookup misses, as if another sync inserted between check and insert
    async def find_stop_once_blind(session, master_schedule_id, recurring_order_id):
        calls.append(recurring_order_id)
        if len(calls) == 1:
            return None
        return await real_find_stop(session, master_schedule_id, recurring_order_id)

    monkeypatch.setattr(dispatch_crud, "find_stop", find_stop_once_blind)

    result = await sync_recurring_orders(db, MONDAY)

    assert result.stops_created == 0
    assert (order_id, "already scheduled") in result.skipped
    assert await count_stops(db) == 1


async def test_fatal_store_failure_keeps_partial_count(db, make_customer, make_order, monkeypatch):
    first = await make_order(await make_customer(name="First"), created_at=datetime(2024, 1, 1, 8))
    first_id = first.id
    await make_order(await make_customer(name="Second"), created_at=datetime(2024, 1, 1, 9))

    real_create_stop = dispatch_crud.create_stop

    async def dying_create_stop(session, **fields):
        if fields["recurring_order_id"] != first_id:
            raise OperationalError("INSERT INTO delivery_stops", {}, Exception("server closed the connection"))
        return await real_create_stop(session, **fields)

    monkeypatch.setattr(dispatch_crud, "create_stop", dying_create_stop)

    with pytest.raises(FatalStoreFailure) as excinfo:
        await sync_recurring_orders(db, MONDAY)

    assert excinfo.value.stops_created == 1
    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert await count_stops(db) == 1


async def test_candidate_lookup_failure_is_fatal(db, monkeypatch):
    async def broken(session, weekday):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(dispatch_crud, "list_active_recurring_orders", broken)

    with pytest.raises(LookupFailure):
        await sync_recurring_orders(db, MONDAY)
    assert await count_schedules(db) == 0


async def test_schedule_conflict_recovers_existing(db, monkeypatch):
    existing_id = (await dispatch_crud.create_schedule(db, MONDAY, "DS-20240115-01")).id

    real_find = dispatch_crud.find_schedule_by_date
    calls = []

    async def stale_first_read(session, schedule_date):
        calls.append(schedule_date)
        if len(calls) == 1:
            return None
        return await real_find(session, schedule_date)

    monkeypatch.setattr(dispatch_crud, "find_schedule_by_date", stale_first_read)

    schedule_id, number = await resolve_schedule(db, MONDAY)

    assert schedule_id == existing_id
    assert number == "DS-20240115-01"
    assert len(calls) == 2
    assert await count_schedules(db) == 1


async def test_timeout_surfaces_as_sync_error(db, monkeypatch):
    import asyncio

    async def slow(session, weekday):
        await asyncio.sleep(1)
        return []

    monkeypatch.setattr(dispatch_crud, "list_active_recurring_orders", slow)

    with pytest.raises(SyncTimeout):
        await run_sync(db, "2024-01-15", timeout=0.01)
