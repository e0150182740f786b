"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rehearsal.api.errors import planning_error_handler
from rehearsal.api.v1.router import router as v1_router
from rehearsal.config import get_settings
from rehearsal.database import engine, init_models
from rehearsal.errors import PlanningError
from rehearsal.redis_client import close_redis, redis_is_healthy


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Rehearsal Room Reservations API...")

    await init_models()
    logger.info("Database tables ready")

    if not settings.DB_TRANSACTIONS_ENABLED:
        logger.warning(
            "DB_TRANSACTIONS_ENABLED is false: bookings are serialized by Redis "
            "room locks only and a recurring series may be partially written "
            "if the database fails mid-insert"
        )

    # Redis backs the per-room booking lock
    if await redis_is_healthy():
        logger.info("Redis connection established")
    else:
        logger.error("Redis is unreachable; bookings will fail until it recovers")

    yield

    # Shutdown
    logger.info("Shutting down Rehearsal Room Reservations API...")

    await close_redis()
    logger.info("Redis connection closed")

    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
## Rehearsal Room Reservations API

Book band rehearsal rooms for fixed time windows.

### Booking types
- **Exclusive**: the whole room for the window
- **Shared**: a number of participants; shared bookings may overlap while the
  total stays within room capacity

### Rules for regular users
- Bookings start at most 7 days ahead
- A booking lasts at most 5 hours
- Weekly recurring bookings are reserved for admins

### Consistency
Each change takes a Redis lock on the room and runs in one database
transaction; a recurring series is stored completely or not at all.

### Authentication
All endpoints require the `X-User-ID` header. Admins also send
`X-User-Role: admin`.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/api")

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        redis_ok = await redis_is_healthy()
        return {
            "status": "healthy" if redis_ok else "degraded",
            "version": settings.APP_VERSION,
            "redis": redis_ok,
            "transactions": settings.DB_TRANSACTIONS_ENABLED,
        }

    app.add_exception_handler(PlanningError, planning_error_handler)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc) if settings.DEBUG else None,
            },
        )

    return app


# Create application instance
app = create_app()


def run():
    """Run the application with uvicorn."""
    uvicorn.run(
        "rehearsal.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
