"""
Main FastAPI application.

Property intelligence service: aggregates public hazard, environmental,
weather and neighborhood providers for a single location.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.api_registry import API_REGISTRY
from app.core.config import get_settings
from app.api.v1 import property_intelligence
from app.intelligence.types import IntelligenceSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Runs on startup and shutdown.
    """
    # Startup
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    logger.info("Starting Property Intelligence Service")
    logger.info(f"Log level: {settings.log_level}")

    missing = [
        config.display_name
        for config in API_REGISTRY.values()
        if config.requires_key and not settings.get_api_key(config.config_key)
    ]
    if missing:
        logger.info(f"Providers not configured (will report unavailable): {', '.join(missing)}")

    yield

    # Shutdown
    logger.info("Shutting down")


# Create FastAPI app
app = FastAPI(
    title="Property Intelligence Service",
    description="Multi-source property risk and neighborhood intelligence",
    version="0.1.0",
    lifespan=lifespan
)

# CORS middleware (configure as needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(property_intelligence.router, prefix="/api/v1")


@app.get("/")
def root():
    """Root endpoint with service info."""
    return {
        "service": "Property Intelligence Service",
        "version": "0.1.0",
        "sources": [s.value for s in IntelligenceSource],
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """
    Health check endpoint.

    Reports which keyed providers are configured. Providers are not
    called; an unreachable provider only affects its own result.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "running",
        "providers": {
            name: (not config.requires_key) or bool(settings.get_api_key(config.config_key))
            for name, config in API_REGISTRY.items()
        },
    }
