from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Text, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from firewood_ops.models.base import Base
import uuid


class DeliveryStop(Base):
    """One delivery to one customer within a master schedule"""
    __tablename__ = "delivery_stops"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    master_schedule_id = Column(String, ForeignKey("dispatch_schedules.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(String, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)

    # Snapshot of the customer at insert time
    customer_name = Column(String, nullable=False)
    customer_address = Column(String, nullable=False, default="")
    customer_phone = Column(String, nullable=False, default="")

    items = Column(Text, nullable=False, default="")
    status = Column(String, default="pending", nullable=False)  # pending, scheduled, completed, cancelled
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_order_id = Column(String, ForeignKey("recurring_orders.id", ondelete="SET NULL"), nullable=True)
    stop_number = Column(Integer, nullable=True)
    driver_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    schedule = relationship("DispatchSchedule", back_populates="stops")

    # NULL recurring_order_id (manual stops) never collides
    __table_args__ = (
        UniqueConstraint("master_schedule_id", "recurring_order_id", name="uq_delivery_stops_schedule_recurring"),
        Index("idx_delivery_stops_schedule", "master_schedule_id"),
        Index("idx_delivery_stops_customer", "customer_id"),
    )
