"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import Field

from treemarket.domain.models import MarketModel


class ErrorResponse(MarketModel):
    """Body of every failed request."""
    error: str = Field(description="Human-readable error message")


class UserProfileResponse(MarketModel):
    """Response model for the current-user endpoint."""
    is_admin: bool = Field(description="Whether the user may edit site settings")
    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "isAdmin": False,
                "name": "Sam Seller",
                "email": "seller@example.com",
            }
        }


class UploadResponse(MarketModel):
    """Response model for image uploads."""
    urls: List[str] = Field(
        description="Public URLs of the stored images, in upload order"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "urls": [
                    "/uploads/listings/0b7c1d1e-6a3f-4d59-9d8e-2f7a1c0e9b11.jpg",
                ]
            }
        }


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid input"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}
