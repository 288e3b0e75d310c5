from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from firewood_ops.auth.dependencies import require_service_token
from firewood_ops.crud import customer as customer_crud
from firewood_ops.db import get_db
from firewood_ops.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate
from firewood_ops.utils.cache import ReferenceCache, get_reference_cache

router = APIRouter(prefix="/customers", tags=["Customers"])

CUSTOMERS_CACHE_KEY = "customers:all"


@router.get("/", response_model=List[CustomerRead])
async def list_customers(
    db: AsyncSession = Depends(get_db),
    cache: ReferenceCache = Depends(get_reference_cache),
):
    """Customer directory, served from the reference cache"""
    async def load():
        customers = await customer_crud.get_customers(db)
        return [CustomerRead.model_validate(c).model_dump(mode="json") for c in customers]

    return await cache.get_or_load(CUSTOMERS_CACHE_KEY, load)


@router.post("/", response_model=CustomerRead, status_code=201)
async def create_customer(
    customer: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    cache: ReferenceCache = Depends(get_reference_cache),
    _: Optional[str] = Depends(require_service_token),
):
    created = await customer_crud.create_customer(db, customer)
    cache.invalidate(CUSTOMERS_CACHE_KEY)
    return created


@router.get("/{customer_id}", response_model=CustomerRead)
async def get_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
):
    customer = await customer_crud.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.put("/{customer_id}", response_model=CustomerRead)
async def update_customer(
    customer_id: str,
    updates: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    cache: ReferenceCache = Depends(get_reference_cache),
    _: Optional[str] = Depends(require_service_token),
):
    """Edit a customer. Existing stops keep the details they were created with."""
    customer = await customer_crud.update_customer(db, customer_id, updates)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    cache.invalidate(CUSTOMERS_CACHE_KEY)
    return customer
