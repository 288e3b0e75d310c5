from .base import Base
from .customer.customer import Customer
from .customer.recurring_order import RecurringOrder
from .dispatch import DispatchSchedule, DeliveryStop
