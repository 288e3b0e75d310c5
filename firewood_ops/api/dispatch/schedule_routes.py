"""
Dispatch Schedule Routes

Master schedules (one per date) and their stops
"""
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from firewood_ops.auth.dependencies import require_service_token
from firewood_ops.crud import dispatch as dispatch_crud
from firewood_ops.db import get_db
from firewood_ops.schemas.dispatch import DispatchScheduleDetail, DispatchScheduleRead

router = APIRouter()


def _detail(schedule) -> DispatchScheduleDetail:
    detail = DispatchScheduleDetail.model_validate(schedule)
    # Numbered stops first, then by creation
    detail.stops = sorted(
        detail.stops,
        key=lambda s: (s.stop_number is None, s.stop_number or 0, s.created_at or datetime.min),
    )
    return detail


@router.get("/schedules", response_model=List[DispatchScheduleRead])
async def list_schedules(
    schedule_date: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """List schedules, newest date first, optionally for one date"""
    return await dispatch_crud.get_schedules(db, schedule_date)


@router.get("/schedules/{schedule_id}", response_model=DispatchScheduleDetail)
async def get_schedule(
    schedule_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Schedule with its stops"""
    schedule = await dispatch_crud.get_schedule(db, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return _detail(schedule)


@router.post("/schedules/{schedule_id}/submit", response_model=DispatchScheduleDetail)
async def submit_schedule(
    schedule_id: str,
    db: AsyncSession = Depends(get_db),
    _: Optional[str] = Depends(require_service_token),
):
    """Mark a draft schedule as submitted"""
    schedule = await dispatch_crud.set_schedule_status(db, schedule_id, "submitted")
    return _detail(schedule)


@router.post("/schedules/{schedule_id}/draft", response_model=DispatchScheduleDetail)
async def reopen_schedule(
    schedule_id: str,
    db: AsyncSession = Depends(get_db),
    _: Optional[str] = Depends(require_service_token),
):
    """Send a submitted schedule back to draft"""
    schedule = await dispatch_crud.set_schedule_status(db, schedule_id, "draft")
    return _detail(schedule)
