"""
Entity Ledger FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from entity_ledger.config import get_settings
from entity_ledger.logging_config import configure_logging
from entity_ledger.api.health import router as health_router
from entity_ledger.api.entities import router as entities_router
from entity_ledger.api.journals import router as journals_router
from entity_ledger.api.reports import router as reports_router
from entity_ledger.api.bookings import router as bookings_router
from entity_ledger.api.invoices import router as invoices_router
from entity_ledger.api.bills import router as bills_router
from entity_ledger.api.intercompany import router as intercompany_router

settings = get_settings()

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry general ledger for a group of legal entities",
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything the routers did not map becomes a 500."""
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path
    )
    detail = str(exc) if settings.is_development else "Internal server error"
    return JSONResponse(status_code=500, content={"detail": detail})


# Register routers
app.include_router(health_router)
app.include_router(entities_router)
app.include_router(journals_router)
app.include_router(reports_router)
app.include_router(bookings_router)
app.include_router(invoices_router)
app.include_router(bills_router)
app.include_router(intercompany_router)
