from sqlalchemy import Column, String, Text, DateTime, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from firewood_ops.models.base import Base
import uuid


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    customer_type = Column(String, default="retail", nullable=False)  # retail, wholesale
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    recurring_orders = relationship("RecurringOrder", back_populates="customer")

    __table_args__ = (
        Index("idx_customers_name", "name"),
    )
