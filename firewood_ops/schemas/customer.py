from pydantic import BaseModel
from typing import Optional
from enum import Enum
from datetime import datetime


class CustomerType(str, Enum):
    retail = "retail"
    wholesale = "wholesale"


class CustomerBase(BaseModel):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    customer_type: CustomerType = CustomerType.retail
    notes: Optional[str] = None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    customer_type: Optional[CustomerType] = None
    notes: Optional[str] = None


class CustomerRead(CustomerBase):
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerSummary(BaseModel):
    id: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True
