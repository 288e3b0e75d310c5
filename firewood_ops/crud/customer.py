from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from firewood_ops.models.customer import Customer
from firewood_ops.schemas.customer import CustomerCreate, CustomerUpdate
import uuid


async def create_customer(db: AsyncSession, customer: CustomerCreate):
    new_customer = Customer(
        id=str(uuid.uuid4()),
        name=customer.name,
        address=customer.address,
        phone=customer.phone,
        email=customer.email,
        customer_type=customer.customer_type.value,
        notes=customer.notes,
    )
    db.add(new_customer)
    await db.commit()
    await db.refresh(new_customer)
    return new_customer


async def get_customers(db: AsyncSession):
    result = await db.execute(select(Customer).order_by(Customer.name))
    return result.scalars().all()


async def get_customer(db: AsyncSession, customer_id: str):
    result = await db.execute(select(Customer).where(Customer.id == customer_id))
    return result.scalar_one_or_none()


async def update_customer(db: AsyncSession, customer_id: str, updates: CustomerUpdate):
    customer = await get_customer(db, customer_id)
    if not customer:
        return None

    update_data = updates.model_dump(exclude_unset=True)
    if update_data.get("customer_type") is not None:
        update_data["customer_type"] = update_data["customer_type"].value
    for key, value in update_data.items():
        setattr(customer, key, value)

    await db.commit()
    await db.refresh(customer)
    return customer
