"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.config import settings
from app.core.errors import register_exception_handlers
from app.core.rate_limiter import RateLimitMiddleware
from app.db.mongodb import close_mongodb, init_mongodb
from app.db.postgres import close_postgres, init_postgres
from app.db.redis import close_redis, init_redis

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("Starting up MarkFlow API...")
    await init_postgres()
    await init_mongodb()
    await init_redis()
    logger.info("All database connections established")

    yield

    # Shutdown
    logger.info("Shutting down MarkFlow API...")
    await close_postgres()
    await close_mongodb()
    await close_redis()
    logger.info("All database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="MarkFlow API",
        description="Markdown documents, kanban boards and AI helpers",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate Limiting Middleware
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    # Include API routers
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "OK", "timestamp": datetime.now(UTC).isoformat()}

    return app


app = create_app()
