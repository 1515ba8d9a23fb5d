"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Document Store
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )
    mongo_db_name: str = Field(
        default="tree_market",
        description="Database holding listings, bids, users and site settings"
    )

    # Species Lookup (Atlas of Living Australia)
    species_search_base_url: str = Field(
        default="https://api.ala.org.au/species",
        description="Base URL for the species autocomplete service"
    )
    species_bie_base_url: str = Field(
        default="https://bie.ala.org.au/ws",
        description="Base URL for the species detail service"
    )
    species_images_base_url: str = Field(
        default="https://images.ala.org.au/image",
        description="Base URL used to build species image links"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for species API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=5,
        description="Maximum wait time in seconds between retries"
    )

    # Bidding
    bid_write_attempts: int = Field(
        default=3,
        description="Attempts at the conditional highest-bid write before giving up"
    )
    api_bid_limit: int = Field(
        default=10,
        description="Number of top bids returned with a listing over the API"
    )

    # Uploads
    upload_dir: str = Field(
        default="public/uploads/listings",
        description="Directory where uploaded listing images are written"
    )
    upload_url_prefix: str = Field(
        default="/uploads/listings",
        description="Public URL prefix for uploaded listing images"
    )
    max_upload_files: int = Field(
        default=5,
        description="Maximum number of images per upload request"
    )
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum size of a single uploaded image"
    )
    allowed_image_types: list[str] = Field(
        default=["image/jpeg", "image/png", "image/webp"],
        description="Accepted image MIME types"
    )
    max_logo_bytes: int = Field(
        default=2 * 1024 * 1024,
        description="Maximum decoded size of a data URI site logo"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum write requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Tree Market API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
