from datetime import date
from typing import Optional
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from fastapi import HTTPException
from firewood_ops.models.customer import RecurringOrder
from firewood_ops.models.dispatch import DispatchSchedule, DeliveryStop
import uuid

# Allowed stop status moves; completed and cancelled are terminal
STOP_TRANSITIONS = {
    "pending": {"scheduled", "completed", "cancelled"},
    "scheduled": {"pending", "completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


def schedule_number_for(schedule_date: date) -> str:
    return f"DS-{schedule_date.strftime('%Y%m%d')}-01"


# --------- Recurring order candidates ---------
async def list_active_recurring_orders(db: AsyncSession, weekday: str):
    """Active orders whose preferred day is `weekday`, with their customer loaded"""
    result = await db.execute(
        select(RecurringOrder)
        .where(
            RecurringOrder.active_status == True,
            func.lower(RecurringOrder.preferred_day) == weekday.lower(),
        )
        .options(selectinload(RecurringOrder.customer))
        .order_by(RecurringOrder.created_at)
    )
    return result.scalars().all()


# --------- Schedules ---------
async def find_schedule_by_date(db: AsyncSession, schedule_date: date):
    result = await db.execute(
        select(DispatchSchedule).where(DispatchSchedule.schedule_date == schedule_date)
    )
    return result.scalar_one_or_none()


async def create_schedule(db: AsyncSession, schedule_date: date, schedule_number: str, notes: Optional[str] = None):
    """Insert a draft schedule. Raises IntegrityError if the date is taken."""
    schedule = DispatchSchedule(
        id=str(uuid.uuid4()),
        schedule_number=schedule_number,
        schedule_date=schedule_date,
        status="draft",
        notes=notes,
    )
    db.add(schedule)
    await db.commit()
    await db.refresh(schedule)
    return schedule


async def get_schedules(db: AsyncSession, schedule_date: Optional[date] = None):
    query = select(DispatchSchedule).order_by(DispatchSchedule.schedule_date.desc())
    if schedule_date:
        query = query.where(DispatchSchedule.schedule_date == schedule_date)
    result = await db.execute(query)
    return result.scalars().all()


async def get_schedule(db: AsyncSession, schedule_id: str):
    result = await db.execute(
        select(DispatchSchedule)
        .where(DispatchSchedule.id == schedule_id)
        .options(selectinload(DispatchSchedule.stops))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def set_schedule_status(db: AsyncSession, schedule_id: str, status: str):
    schedule = await get_schedule(db, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")
    if schedule.status == status:
        raise HTTPException(status_code=422, detail=f"Schedule is already {status}")

    schedule.status = status
    await db.commit()
    return await get_schedule(db, schedule_id)


# --------- Stops ---------
async def find_stop(db: AsyncSession, master_schedule_id: str, recurring_order_id: str):
    result = await db.execute(
        select(DeliveryStop).where(
            DeliveryStop.master_schedule_id == master_schedule_id,
            DeliveryStop.recurring_order_id == recurring_order_id,
        )
    )
    return result.scalars().first()


async def create_stop(db: AsyncSession, **fields):
    """Insert and commit one stop. Constraint violations propagate as IntegrityError."""
    stop = DeliveryStop(id=str(uuid.uuid4()), **fields)
    db.add(stop)
    await db.commit()
    return stop


async def get_stop(db: AsyncSession, stop_id: str):
    result = await db.execute(select(DeliveryStop).where(DeliveryStop.id == stop_id))
    return result.scalar_one_or_none()


async def next_stop_number(db: AsyncSession, master_schedule_id: str) -> int:
    result = await db.execute(
        select(func.max(DeliveryStop.stop_number)).where(
            DeliveryStop.master_schedule_id == master_schedule_id
        )
    )
    return (result.scalar() or 0) + 1


async def update_stop_status(db: AsyncSession, stop_id: str, status: str):
    stop = await get_stop(db, stop_id)
    if not stop:
        raise HTTPException(status_code=404, detail="Stop not found")

    if stop.status != status:
        allowed = STOP_TRANSITIONS.get(stop.status, set())
        if status not in allowed:
            raise HTTPException(
                status_code=422,
                detail=f"Cannot move stop from {stop.status} to {status}",
            )
        stop.status = status
        await db.commit()
        await db.refresh(stop)
    return stop
