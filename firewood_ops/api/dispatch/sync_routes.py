"""
Recurring Order Sync Routes

Trigger endpoint used by the dispatch screen's "sync recurring orders"
button and by scheduled callers.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from firewood_ops.auth.dependencies import require_service_token
from firewood_ops.config import Settings, get_settings
from firewood_ops.db import get_db
from firewood_ops.services.errors import FatalStoreFailure, SyncError, SyncValidationError
from firewood_ops.services.recurring_sync import run_sync

log = logging.getLogger(__name__)

router = APIRouter()


async def _run(raw_date, db: AsyncSession, settings: Settings) -> JSONResponse:
    try:
        result = await run_sync(db, raw_date, timeout=settings.sync_timeout_seconds)
    except SyncValidationError as exc:
        return JSONResponse({"success": False, "error": str(exc)}, status_code=400)
    except FatalStoreFailure as exc:
        log.error("Recurring sync aborted after %s stops: %s", exc.stops_created, exc)
        return JSONResponse({"success": False, "error": str(exc)}, status_code=500)
    except SyncError as exc:
        log.error("Recurring sync failed: %s", exc)
        return JSONResponse({"success": False, "error": str(exc)}, status_code=500)

    return JSONResponse({
        "success": True,
        "stopsCreated": result.stops_created,
        "scheduleId": result.schedule_id,
    })


@router.post("/recurring-orders/sync")
async def sync_recurring_orders(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: Optional[str] = Depends(require_service_token),
):
    """Create delivery stops for every recurring order due on {"date": "YYYY-MM-DD"}"""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    raw_date = payload.get("date") if isinstance(payload, dict) else None
    return await _run(raw_date, db, settings)


@router.get("/recurring-orders/sync")
async def sync_recurring_orders_get(
    date: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: Optional[str] = Depends(require_service_token),
):
    """Same as the POST form, with the date as a query parameter"""
    return await _run(date, db, settings)
