from .customer import Customer
from .recurring_order import RecurringOrder

__all__ = [
    "Customer",
    "RecurringOrder",
]
