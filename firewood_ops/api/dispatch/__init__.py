from fastapi import APIRouter
from . import sync_routes
from . import schedule_routes
from . import stop_routes

router = APIRouter()

# Sync first so /recurring-orders/sync wins over /recurring-orders/{order_id}
router.include_router(sync_routes.router, tags=["Recurring Sync"])

router.include_router(schedule_routes.router, prefix="/dispatch", tags=["Dispatch Schedules"])

router.include_router(stop_routes.router, prefix="/dispatch", tags=["Delivery Stops"])

__all__ = ["router"]
