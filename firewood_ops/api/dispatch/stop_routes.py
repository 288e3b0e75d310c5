"""
Delivery Stop Routes

Manual (non-recurring) stops and driver status updates
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from firewood_ops.auth.dependencies import require_service_token
from firewood_ops.crud import customer as customer_crud
from firewood_ops.crud import dispatch as dispatch_crud
from firewood_ops.db import get_db
from firewood_ops.schemas.dispatch import DeliveryStopCreate, DeliveryStopRead, StopStatusUpdate

router = APIRouter()


@router.post("/schedules/{schedule_id}/stops", response_model=DeliveryStopRead, status_code=201)
async def add_manual_stop(
    schedule_id: str,
    stop: DeliveryStopCreate,
    db: AsyncSession = Depends(get_db),
    _: Optional[str] = Depends(require_service_token),
):
    """Add an ad hoc stop for a customer to a schedule"""
    schedule = await dispatch_crud.get_schedule(db, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")

    customer = await customer_crud.get_customer(db, stop.customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    stop_number = await dispatch_crud.next_stop_number(db, schedule_id)
    return await dispatch_crud.create_stop(
        db,
        master_schedule_id=schedule_id,
        customer_id=customer.id,
        customer_name=customer.name,
        customer_address=customer.address or "",
        customer_phone=customer.phone or "",
        items=stop.items,
        status=stop.status.value,
        is_recurring=False,
        recurring_order_id=None,
        stop_number=stop_number,
        driver_name=stop.driver_name,
        notes=stop.notes,
    )


@router.patch("/stops/{stop_id}/status", response_model=DeliveryStopRead)
async def update_stop_status(
    stop_id: str,
    update: StopStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _: Optional[str] = Depends(require_service_token),
):
    """Driver-facing status change"""
    return await dispatch_crud.update_stop_status(db, stop_id, update.status.value)
