"""
API request models using Pydantic.

Required listing and bid fields are optional here on purpose: the services
decide what is missing and answer with the documented error messages.
"""
from typing import List, Optional
from pydantic import Field

from treemarket.domain.models import (
    HealthStatus,
    MarketModel,
    PickupWindow,
    PricingType,
)


class PrincipalFields(MarketModel):
    """Identity of the caller, as supplied by the authentication provider."""
    auth0_id: Optional[str] = Field(None, description="Authentication provider subject id")
    user_email: Optional[str] = Field(None, description="Email hint used when the user is first seen")
    user_name: Optional[str] = Field(None, description="Name hint used when the user is first seen")


class CreateListingRequest(PrincipalFields):
    """Body of a create-listing request."""
    title: Optional[str] = None
    description: Optional[str] = None
    species: Optional[str] = None
    height: Optional[float] = None
    trunk_diameter: Optional[float] = None
    canopy_width: Optional[float] = None
    health_status: Optional[HealthStatus] = None
    age: Optional[float] = None
    address: Optional[str] = None
    suburb: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    pricing_type: Optional[PricingType] = None
    price: Optional[float] = None
    expires_at: Optional[str] = None
    pickup_windows: List[PickupWindow] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "auth0Id": "auth0|64f1c2",
                "userEmail": "seller@example.com",
                "userName": "Sam Seller",
                "title": "Mature Jacaranda",
                "species": "Jacaranda mimosifolia",
                "height": 8,
                "healthStatus": "good",
                "address": "12 Example St",
                "suburb": "Paddington",
                "state": "QLD",
                "postcode": "4064",
                "pricingType": "auction",
                "price": 500,
                "pickupWindows": [
                    {"type": "flexible", "daysOfWeek": ["monday", "wednesday"]}
                ],
                "images": ["/uploads/listings/3f2b.jpg"],
            }
        }

    def listing_fields(self) -> dict:
        """The listing attributes, without the caller identity."""
        return self.model_dump(exclude=set(PrincipalFields.model_fields))


class PlaceBidRequest(PrincipalFields):
    """Body of a place-bid request."""
    listing_id: Optional[str] = None
    amount: Optional[float] = Field(None, allow_inf_nan=False)
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "listingId": "665f1b2c9d3e4a0012345678",
                "amount": 650,
                "message": "Can collect this weekend",
                "auth0Id": "auth0|64f1c2",
                "userEmail": "buyer@example.com",
                "userName": "Bea Buyer",
            }
        }


class UpdateSettingsRequest(MarketModel):
    """Body of a site settings update."""
    auth0_id: Optional[str] = None
    logo_url: Optional[str] = Field(None, description="Image URL or data URI, at most 2MB decoded")
    hero_title: Optional[str] = None
    hero_description: Optional[str] = None
    cta_title: Optional[str] = None
    cta_description: Optional[str] = None

    def settings_fields(self) -> dict:
        return self.model_dump(exclude={"auth0_id"})
