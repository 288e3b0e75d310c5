### firewood_ops/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import create_async_engine

import firewood_ops.models  # registers all models via models/__init__.py
from sqlalchemy.orm import configure_mappers
configure_mappers()

from firewood_ops.api import customer_routes, recurring_order_routes
from firewood_ops.api.dispatch import router as dispatch_router
from firewood_ops.config import Settings, settings as default_settings
from firewood_ops.db import async_session, build_session_factory, create_db_and_tables, engine as default_engine
from firewood_ops.utils.cache import ReferenceCache

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="Firewood Ops API",
        version="0.1.0",
        description="Customers, recurring orders and dispatch scheduling for firewood delivery.",
    )
    app.state.settings = settings

    # Default settings share the module engine; anything else gets its own
    if settings is default_settings:
        app.state.engine = default_engine
        app.state.session_factory = async_session
    else:
        app.state.engine = create_async_engine(settings.database_url, echo=settings.sql_echo)
        app.state.session_factory = build_session_factory(app.state.engine)

    # One cache per app instance, handed to routes via get_reference_cache
    app.state.reference_cache = ReferenceCache(ttl_seconds=settings.reference_cache_ttl_seconds)

    # Browser-triggered sync calls come from the dispatch frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup():
        if not settings.sync_api_token:
            log.warning("SYNC_API_TOKEN is not set; write endpoints accept unauthenticated calls")
        if settings.auto_create_tables:
            log.info("Starting DB setup...")
            await create_db_and_tables(app.state.engine)
            log.info("DB schema created.")

    @app.get("/health")
    async def health():
        return {"ok": True}

    # Dispatch first: /recurring-orders/sync must match before /recurring-orders/{order_id}
    app.include_router(dispatch_router)
    app.include_router(customer_routes.router)
    app.include_router(recurring_order_routes.router)

    return app


app = create_app()
