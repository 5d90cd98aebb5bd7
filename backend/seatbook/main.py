# backend/seatbook/main.py
"""
Seat reservation API entrypoint.

Run with: uvicorn seatbook.main:app
"""

import asyncio
from contextlib import asynccontextmanager
import contextlib
import logging
import threading
from typing import AsyncGenerator, Dict

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.constants import BRAND_NAME
from .core.exceptions import DomainException
from .database import SessionLocal, init_db
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes import seats
from .services.blackout_scheduler import BlackoutScheduler
from .services.seat_service import SeatService

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _prepare_store() -> None:
    """Create tables and provision the fixed seat pool."""
    init_db()
    with SessionLocal() as db:
        SeatService(db).provision()


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}, timezone: {settings.timezone}")

    if not settings.is_testing:
        await asyncio.to_thread(_prepare_store)

    scheduler_task: asyncio.Task[None] | None = None
    scheduler_stop_event: threading.Event | None = None
    if settings.scheduler_enabled and not settings.is_testing:
        scheduler_stop_event = threading.Event()
        scheduler_task = asyncio.create_task(
            asyncio.to_thread(BlackoutScheduler().run_forever, scheduler_stop_event)
        )

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")
    if scheduler_task is not None:
        if scheduler_stop_event is not None:
            scheduler_stop_event.set()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler_task


app = FastAPI(
    title=f"{BRAND_NAME} API",
    description="Seat reservation engine",
    version="1.0.0",
    lifespan=app_lifespan,
)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    http_exc = exc.to_http_exception()
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


app.include_router(seats.router, prefix="/seats")


@app.get("/health")
def health_check() -> Dict[str, str]:
    return {"status": "healthy", "service": BRAND_NAME.lower()}


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
