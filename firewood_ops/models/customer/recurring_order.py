from sqlalchemy import Column, String, Boolean, ForeignKey, Text, DateTime, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from firewood_ops.models.base import Base
import uuid


class RecurringOrder(Base):
    """Standing customer order that turns into a delivery stop on its cadence"""
    __tablename__ = "recurring_orders"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(String, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    items = Column(Text, nullable=False, default="")
    frequency = Column(String, nullable=True, default="weekly")  # weekly, biweekly, monthly
    preferred_day = Column(String, nullable=True)  # monday .. sunday
    active_status = Column(Boolean, default=True, nullable=False)
    # Anchor for biweekly parity
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="recurring_orders")

    __table_args__ = (
        Index("idx_recurring_orders_day_active", "preferred_day", "active_status"),
        Index("idx_recurring_orders_customer", "customer_id"),
    )
