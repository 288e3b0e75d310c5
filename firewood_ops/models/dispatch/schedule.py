from sqlalchemy import Column, String, Text, DateTime, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from firewood_ops.models.base import Base
import uuid


class DispatchSchedule(Base):
    """Master dispatch schedule, one per calendar date"""
    __tablename__ = "dispatch_schedules"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    schedule_number = Column(String, nullable=False)  # DS-YYYYMMDD-01
    schedule_date = Column(Date, nullable=False)
    status = Column(String, default="draft", nullable=False)  # draft, submitted
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    stops = relationship(
        "DeliveryStop",
        back_populates="schedule",
        cascade="all, delete-orphan",
    )

    # Concurrent syncs for the same date must collide here
    __table_args__ = (
        UniqueConstraint("schedule_date", name="uq_dispatch_schedules_date"),
    )
