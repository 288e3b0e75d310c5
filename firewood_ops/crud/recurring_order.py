from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from firewood_ops.models.customer import RecurringOrder
from firewood_ops.schemas.recurring_order import RecurringOrderCreate, RecurringOrderUpdate
import uuid


async def create_recurring_order(db: AsyncSession, order: RecurringOrderCreate):
    new_order = RecurringOrder(
        id=str(uuid.uuid4()),
        customer_id=order.customer_id,
        items=order.items,
        frequency=order.frequency.value,
        preferred_day=order.preferred_day.value if order.preferred_day else None,
        active_status=order.active_status,
    )
    db.add(new_order)
    await db.commit()
    return await get_recurring_order(db, new_order.id)


async def get_recurring_orders(db: AsyncSession, active: Optional[bool] = None):
    query = (
        select(RecurringOrder)
        .options(selectinload(RecurringOrder.customer))
        .order_by(RecurringOrder.created_at)
    )
    if active is not None:
        query = query.where(RecurringOrder.active_status == active)
    result = await db.execute(query)
    return result.scalars().all()


async def get_recurring_order(db: AsyncSession, order_id: str):
    result = await db.execute(
        select(RecurringOrder)
        .where(RecurringOrder.id == order_id)
        .options(selectinload(RecurringOrder.customer))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def update_recurring_order(db: AsyncSession, order_id: str, updates: RecurringOrderUpdate):
    order = await get_recurring_order(db, order_id)
    if not order:
        return None

    update_data = updates.model_dump(exclude_unset=True)
    for key in ("frequency", "preferred_day"):
        if update_data.get(key) is not None:
            update_data[key] = update_data[key].value
    for key, value in update_data.items():
        setattr(order, key, value)

    await db.commit()
    return await get_recurring_order(db, order_id)


async def delete_recurring_order(db: AsyncSession, order_id: str):
    order = await get_recurring_order(db, order_id)
    if order:
        await db.delete(order)
        await db.commit()
    return order
