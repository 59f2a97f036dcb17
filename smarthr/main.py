import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from smarthr.api.v1.api import api_router
from smarthr.core.config import settings
from smarthr.core.database import Database
from smarthr.core.logging_config import setup_logging
from smarthr.middleware.logging import LoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    db = Database()
    db.connect()
    app.state.db = db
    logger.info(f"SmartHR API started ({settings.ENVIRONMENT})")
    try:
        yield
    finally:
        await db.disconnect()
        logger.info("SmartHR API stopped")


# Create FastAPI app
app_config = {
    "title": "SmartHR",
    "description": "HR management: organization, employees, assignments, approvals and vacation",
    "version": "1.0.0",
    "debug": settings.DEBUG,
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS
)
app.add_middleware(LoggingMiddleware)

# Include routers
app.include_router(api_router, prefix="/api")

@app.get("/")
async def root():
    return {
        "message": "Welcome to the SmartHR API",
        "status": "active",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
async def health_check(request: Request):
    database = "connected"
    db = getattr(request.app.state, "db", None)
    if db is None or db.engine is None:
        database = "disconnected"
    else:
        try:
            async with db.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Health check database error: {e}")
            database = "error"

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "components": {
            "database": database
        }
    }
