"""FastAPI application for the CareLink backend."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from carelink.config import get_settings
from carelink.database import check_db_ready
from carelink.limiter import limiter
from carelink.routers import emergencies_router, health_router, patients_router, session_router
from carelink.tasks.scheduler import setup_scheduler, shutdown_scheduler
from carelink.websocket.router import router as websocket_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting CareLink backend...")

    # Verify database is ready
    try:
        await check_db_ready()
        logger.info("Database ready")
    except Exception as e:
        logger.error(f"Database not ready: {e}")
        raise

    # Start the change watcher once DB is ready.
    setup_scheduler()

    yield

    # Shutdown
    shutdown_scheduler()
    logger.info("CareLink backend shut down")


# Create FastAPI app
app = FastAPI(
    title="CareLink API",
    description="Emergency reporting and patient records for healthcare providers",
    version="0.1.0",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
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
app.include_router(emergencies_router, prefix=settings.api_v1_prefix)
app.include_router(patients_router, prefix=settings.api_v1_prefix)
app.include_router(session_router, prefix=settings.api_v1_prefix)
app.include_router(websocket_router)  # WebSocket at /ws/emergencies


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "CareLink API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "carelink.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
