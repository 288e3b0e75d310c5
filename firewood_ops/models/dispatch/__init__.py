from .schedule import DispatchSchedule
from .stop import DeliveryStop

__all__ = [
    "DispatchSchedule",
    "DeliveryStop",
]
