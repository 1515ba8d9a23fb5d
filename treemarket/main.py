"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from treemarket.config import settings
from treemarket.api.dependencies import get_db, get_settings_service
from treemarket.api.rate_limit import limiter
from treemarket.api.v1.routers import bids, listings, site_settings, species, uploads, users
from treemarket.infrastructure.database import close_database, ensure_indexes
from treemarket.infrastructure.species_client import close_species_client
from treemarket.middleware.error_handler import ErrorHandlerMiddleware, request_validation_handler

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Bidding config: write_attempts={settings.bid_write_attempts}, "
                f"api_bid_limit={settings.api_bid_limit}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} write requests/minute")

    # Resolve through dependency overrides so tests can swap the database.
    db_factory = app.dependency_overrides.get(get_db, get_db)
    db = db_factory()
    ensure_indexes(db)
    get_settings_service(db).initialize()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await close_species_client()
    close_database()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Marketplace API for ex-ground trees

    Sellers list trees for a fixed price or by auction; buyers browse and bid.

    ## Features

    - **Listings**: Create and browse trees with size, health, location and
      pickup availability (a specific day, a date range, or recurring weekdays)
    - **Bidding**: Bids must beat both the current highest bid and the
      starting price; the check-and-record step is atomic per listing
    - **Species Lookup**: Autocomplete backed by the Atlas of Living Australia
    - **Image Uploads**: Up to 5 JPEG/PNG/WebP images per request
    - **Site Settings**: Admin-editable logo and landing page copy
    - **Rate Limiting**: Write endpoints are limited per client

    ## Errors

    Every failure returns `{"error": "<message>"}` with status 400, 401,
    403, 404 or 500.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
for module in (listings, bids, users, site_settings, uploads, species):
    app.include_router(module.router, prefix="/api")

# Uploaded images are served from the same origin
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
