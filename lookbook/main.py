"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lookbook.api.middleware import RequestIdMiddleware
from lookbook.api.routes import api_router
from lookbook.domain.services.retailer_whitelist import RetailerWhitelistService
from lookbook.infrastructure.redis import redis_client
from lookbook.logging_config import setup_logging
from lookbook.persistence import models  # noqa: F401
from lookbook.persistence.database import AsyncSessionLocal, Base, engine
from lookbook.settings import settings

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)


async def _prepare_database() -> None:
    """Create tables for local SQLite and seed the default retailers."""
    if engine.url.get_backend_name() == "sqlite":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await RetailerWhitelistService(session).ensure_defaults()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    await redis_client.connect()
    try:
        await _prepare_database()
    except Exception:
        logger.exception("Database preparation failed")
        raise
    yield
    # Shutdown
    await redis_client.disconnect()


# Create FastAPI app
app = FastAPI(
    title="Lookbook Storefront API",
    description="Fashion catalog storefront: analytics, affiliate redirects and admin back office",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)

# Include API routes
app.include_router(api_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors and return a generic 500 body."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
