from pydantic import BaseModel
from typing import List, Optional
from enum import Enum
from datetime import date, datetime


# ---------- Enums ----------
class ScheduleStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"


class StopStatus(str, Enum):
    pending = "pending"
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


# ---------- Delivery Stop ----------
class DeliveryStopCreate(BaseModel):
    customer_id: str
    items: str = ""
    notes: Optional[str] = None
    driver_name: Optional[str] = None
    status: StopStatus = StopStatus.pending


class StopStatusUpdate(BaseModel):
    status: StopStatus


class DeliveryStopRead(BaseModel):
    id: str
    master_schedule_id: str
    customer_id: Optional[str] = None
    customer_name: str
    customer_address: str = ""
    customer_phone: str = ""
    items: str = ""
    status: str
    is_recurring: bool
    recurring_order_id: Optional[str] = None
    stop_number: Optional[int] = None
    driver_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ---------- Dispatch Schedule ----------
class DispatchScheduleRead(BaseModel):
    id: str
    schedule_number: str
    schedule_date: date
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DispatchScheduleDetail(DispatchScheduleRead):
    stops: List[DeliveryStopRead] = []
