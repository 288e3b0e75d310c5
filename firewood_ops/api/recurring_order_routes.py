from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from firewood_ops.auth.dependencies import require_service_token
from firewood_ops.crud import customer as customer_crud
from firewood_ops.crud import recurring_order as recurring_crud
from firewood_ops.db import get_db
from firewood_ops.schemas.recurring_order import (
    OccurrencePreview,
    RecurringOrderCreate,
    RecurringOrderRead,
    RecurringOrderUpdate,
)
from firewood_ops.utils.recurrence import next_occurrences

router = APIRouter(prefix="/recurring-orders", tags=["Recurring Orders"])


async def _check_customer(db: AsyncSession, customer_id: Optional[str]):
    if customer_id and not await customer_crud.get_customer(db, customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")


@router.get("/", response_model=List[RecurringOrderRead])
async def list_recurring_orders(
    active: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
):
    return await recurring_crud.get_recurring_orders(db, active)


@router.post("/", response_model=RecurringOrderRead, status_code=201)
async def create_recurring_order(
    order: RecurringOrderCreate,
    db: AsyncSession = Depends(get_db),
    _: Optional[str] = Depends(require_service_token),
):
    await _check_customer(db, order.customer_id)
    return await recurring_crud.create_recurring_order(db, order)


@router.get("/{order_id}", response_model=RecurringOrderRead)
async def get_recurring_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
):
    order = await recurring_crud.get_recurring_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Recurring order not found")
    return order


@router.put("/{order_id}", response_model=RecurringOrderRead)
async def update_recurring_order(
    order_id: str,
    updates: RecurringOrderUpdate,
    db: AsyncSession = Depends(get_db),
    _: Optional[str] = Depends(require_service_token),
):
    await _check_customer(db, updates.customer_id)
    order = await recurring_crud.update_recurring_order(db, order_id, updates)
    if not order:
        raise HTTPException(status_code=404, detail="Recurring order not found")
    return order


@router.delete("/{order_id}")
async def delete_recurring_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    _: Optional[str] = Depends(require_service_token),
):
    """Delete an order. Stops it already produced stay on their schedules."""
    order = await recurring_crud.delete_recurring_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Recurring order not found")
    return {"message": "Recurring order deleted"}


@router.get("/{order_id}/occurrences", response_model=OccurrencePreview)
async def preview_occurrences(
    order_id: str,
    start: Optional[date] = None,
    count: int = Query(5, ge=1, le=52),
    db: AsyncSession = Depends(get_db),
):
    """Upcoming dates on which the sync would create a stop for this order"""
    order = await recurring_crud.get_recurring_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Recurring order not found")

    dates = []
    if order.active_status:
        dates = next_occurrences(order.frequency, order.preferred_day, order.created_at, start or date.today(), count)

    return OccurrencePreview(
        recurring_order_id=order.id,
        frequency=order.frequency,
        preferred_day=order.preferred_day,
        dates=dates,
    )
