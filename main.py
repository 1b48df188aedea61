"""
MockPrep - Interview Practice Evaluation Engine

Main application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config.settings import get_settings
from src.api.router import api_router
from src.api.dependencies import cleanup, get_question_bank
from src.core.exceptions import PersistenceError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting MockPrep...")
    logger.info(f"Running in {'debug' if settings.debug else 'production'} mode")
    logger.info(f"Oracle {'enabled' if settings.oracle_enabled else 'disabled'}, "
                f"storage backend: {settings.storage_backend}")

    try:
        await get_question_bank().load_custom_questions()
    except PersistenceError as e:
        logger.warning(f"Custom questions not loaded: {e}")

    yield

    # Shutdown
    logger.info("Shutting down MockPrep...")
    await cleanup()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Interview Practice Evaluation Engine",
    version=settings.app_version,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "oracle_enabled": settings.oracle_enabled,
    }


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
