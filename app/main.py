"""
VisaTrack reminder backend: FastAPI app with database pool lifecycle.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.db.pool import db_pool
from app.features.visa_reminders.api.router import router as reminders_router
from app.infrastructure.observability.logging import get_logger, setup_logging
from app.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database pool on startup and close it on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    try:
        await db_pool.initialize()
    except Exception as e:
        logger.error("Failed to initialize database pool", error=str(e))
        raise

    logger.info("Delivery channels configured", channels=settings.get_channel_config())

    yield

    logger.info("Application shutting down")
    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


app = FastAPI(
    title="VisaTrack Reminders",
    description="Visa expiry reminder planning and multi-channel delivery",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(reminders_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
