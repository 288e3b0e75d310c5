from pydantic import BaseModel, field_validator
from typing import List, Optional
from enum import Enum
from datetime import date, datetime

from firewood_ops.schemas.customer import CustomerSummary


# ---------- Enums ----------
class Frequency(str, Enum):
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"


class PreferredDay(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


def _lower(value):
    if isinstance(value, str):
        value = value.strip().lower()
        if value in ("bi-weekly", "bi_weekly"):
            return "biweekly"
    return value


# ---------- Recurring Order ----------
class RecurringOrderBase(BaseModel):
    customer_id: Optional[str] = None
    items: str = ""
    frequency: Frequency = Frequency.weekly
    preferred_day: Optional[PreferredDay] = None
    active_status: bool = True

    @field_validator("frequency", "preferred_day", mode="before")
    @classmethod
    def normalize_choices(cls, value):
        return _lower(value)


class RecurringOrderCreate(RecurringOrderBase):
    pass


class RecurringOrderUpdate(BaseModel):
    customer_id: Optional[str] = None
    items: Optional[str] = None
    frequency: Optional[Frequency] = None
    preferred_day: Optional[PreferredDay] = None
    active_status: Optional[bool] = None

    @field_validator("frequency", "preferred_day", mode="before")
    @classmethod
    def normalize_choices(cls, value):
        return _lower(value)


class RecurringOrderRead(BaseModel):
    id: str
    customer_id: Optional[str] = None
    customer: Optional[CustomerSummary] = None
    items: str
    # Stored values are not re-validated; legacy rows may hold anything
    frequency: Optional[str] = None
    preferred_day: Optional[str] = None
    active_status: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OccurrencePreview(BaseModel):
    recurring_order_id: str
    frequency: Optional[str] = None
    preferred_day: Optional[str] = None
    dates: List[date] = []
