"""FastAPI application for the Crisis Connect backend."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from crisisconnect import __version__
from crisisconnect.config import get_settings
from crisisconnect.database import check_db_ready, init_db
from crisisconnect.errors import DomainError
from crisisconnect.realtime import ConnectionManager, RoomPolicy, websocket_router
from crisisconnect.routers import (
    alerts_router,
    health_router,
    incidents_router,
    requests_router,
    resources_router,
    tasks_router,
    volunteer_profiles_router,
    volunteers_router,
)
from crisisconnect.services import EmailSmsNotifier, NotificationChannel
from crisisconnect.tasks.scheduler import setup_scheduler, shutdown_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.rate_limit_enabled,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting Crisis Connect backend...")

    try:
        if settings.auto_create_db:
            await init_db()
        await check_db_ready()
        logger.info("Database ready")
    except Exception as e:
        logger.error(f"Database not ready: {e}")
        raise

    setup_scheduler()

    yield

    # Shutdown
    await app.state.notifications.drain()
    shutdown_scheduler()
    logger.info("Crisis Connect backend shut down")


# Create FastAPI app
app = FastAPI(
    title="Crisis Connect API",
    description="Disaster response coordination: incidents, help requests and volunteers",
    version=__version__,
    lifespan=lifespan,
)

# Realtime transport and notification side channel live on app state so
# request handlers and tests share one instance
app.state.realtime = ConnectionManager()
app.state.room_policy = RoomPolicy(settings.enforce_room_membership)
app.state.notifications = NotificationChannel(EmailSmsNotifier(settings))

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report every invalid field at once."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": error.get("msg", "")})
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation failed", "code": "validation_error", "errors": errors},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Include routers
app.include_router(health_router)
app.include_router(incidents_router, prefix=settings.api_prefix)
app.include_router(requests_router, prefix=settings.api_prefix)
app.include_router(volunteer_profiles_router, prefix=settings.api_prefix)
app.include_router(volunteers_router, prefix=settings.api_prefix)
app.include_router(tasks_router, prefix=settings.api_prefix)
app.include_router(alerts_router, prefix=settings.api_prefix)
app.include_router(resources_router, prefix=settings.api_prefix)
app.include_router(websocket_router)  # WebSocket at /ws


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Crisis Connect API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "websocket": "/ws",
        "poll_interval_seconds": settings.poll_interval_seconds,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "crisisconnect.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
