"""
Domain models for listings, bids, users and site settings.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.). Field names
are snake_case in Python and in storage; they serialize with camelCase
aliases so the JSON contract matches what browser clients send.
"""
import datetime as dt
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class MarketModel(BaseModel):
    """Base model with camelCase aliases."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class PricingType(str, Enum):
    FIXED = "fixed"
    AUCTION = "auction"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    EXPIRED = "expired"
    REMOVED = "removed"


class HealthStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class BidStatus(str, Enum):
    # Only PENDING is ever assigned; there are no transitions yet.
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class BusinessType(str, Enum):
    LANDSCAPE_ARCHITECT = "landscape_architect"
    DEVELOPER = "developer"
    DEMOLITION = "demolition"
    ENTHUSIAST = "enthusiast"
    OTHER = "other"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


WEEKDAY_ORDER = [day.value for day in DayOfWeek]


# ============================================================
# Pickup windows
# ============================================================

class SpecificPickupWindow(MarketModel):
    """Collection on a single day, optionally within a time slot."""
    type: Literal["specific"] = "specific"
    date: dt.date
    start_time: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_time_order(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError("end time must not be before start time")
        return self


class RangePickupWindow(MarketModel):
    """Collection any day between two dates, inclusive."""
    type: Literal["range"] = "range"
    start_date: dt.date
    end_date: dt.date
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end date must not be before start date")
        return self


class FlexiblePickupWindow(MarketModel):
    """Collection on a recurring set of weekdays."""
    type: Literal["flexible"] = "flexible"
    days_of_week: List[DayOfWeek] = Field(min_length=1)
    notes: Optional[str] = None

    @field_validator("days_of_week", mode="after")
    @classmethod
    def normalize_days(cls, days):
        # A set of days: drop duplicates and keep calendar order.
        values = {getattr(day, "value", day) for day in days}
        return [day for day in WEEKDAY_ORDER if day in values]


PickupWindow = Annotated[
    Union[SpecificPickupWindow, RangePickupWindow, FlexiblePickupWindow],
    Field(discriminator="type"),
]


# ============================================================
# Entities
# ============================================================

class Listing(MarketModel):
    """A tree offered for sale at a fixed price or by auction."""
    id: Optional[str] = None
    title: str
    description: Optional[str] = None
    species: str
    height: Optional[float] = Field(None, ge=0, description="Height in metres")
    trunk_diameter: Optional[float] = Field(None, ge=0, description="Trunk diameter in centimetres")
    canopy_width: Optional[float] = Field(None, ge=0, description="Canopy width in metres")
    health_status: Optional[HealthStatus] = None
    age: Optional[float] = Field(None, ge=0, description="Approximate age in years")
    address: str
    suburb: str
    state: str
    postcode: str
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    pricing_type: PricingType
    price: Optional[float] = Field(
        None, ge=0, allow_inf_nan=False,
        description="Fixed price, or the starting price of an auction"
    )
    status: ListingStatus = ListingStatus.ACTIVE
    images: List[str] = Field(default_factory=list)
    pickup_windows: List[PickupWindow] = Field(default_factory=list)
    seller_id: str
    highest_bid: Optional[float] = Field(
        None, description="Highest accepted bid amount, maintained by bid placement"
    )
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    expires_at: Optional[dt.datetime] = None


class Bid(MarketModel):
    """A monetary offer against an auction listing."""
    id: Optional[str] = None
    listing_id: str
    bidder_id: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    message: Optional[str] = None
    status: BidStatus = BidStatus.PENDING
    created_at: Optional[dt.datetime] = None


class User(MarketModel):
    """A principal known by its authentication provider subject id."""
    id: Optional[str] = None
    auth0_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    business_name: Optional[str] = None
    business_type: Optional[BusinessType] = None
    is_admin: bool = False
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


DEFAULT_HERO_TITLE = "Find Your Perfect Tree"
DEFAULT_HERO_DESCRIPTION = (
    "Connect with property owners, demolition sites, and tree sellers. "
    "Quality ex-ground stock for landscape architects, developers, and enthusiasts."
)
DEFAULT_CTA_TITLE = "Ready to Get Started?"
DEFAULT_CTA_DESCRIPTION = (
    "Whether you have trees to sell or are looking for the perfect specimen, "
    "Tree Market connects you with the right people."
)


class SiteSettings(MarketModel):
    """Site branding and landing page copy."""
    logo_url: Optional[str] = None
    hero_title: str = DEFAULT_HERO_TITLE
    hero_description: str = DEFAULT_HERO_DESCRIPTION
    cta_title: str = DEFAULT_CTA_TITLE
    cta_description: str = DEFAULT_CTA_DESCRIPTION
    updated_at: Optional[dt.datetime] = None


# ============================================================
# Value objects
# ============================================================

class PriceKind(str, Enum):
    FIXED = "fixed"
    CONTACT_FOR_PRICE = "contact_for_price"
    HIGHEST_BID = "highest_bid"
    STARTING_PRICE = "starting_price"
    NO_BIDS = "no_bids"


class CurrentPrice(MarketModel):
    """Derived price of a listing; never stored."""
    kind: PriceKind
    amount: Optional[float] = None
    label: str


class SellerSummary(MarketModel):
    """Public profile fields of a listing's seller."""
    id: str
    name: Optional[str] = None
    business_name: Optional[str] = None
    email: Optional[str] = None


class ListingFilter(MarketModel):
    """Optional criteria for browsing active listings."""
    species: Optional[str] = None
    suburb: Optional[str] = None
    state: Optional[str] = None
    pricing_type: Optional[PricingType] = None


# ============================================================
# Read models
# ============================================================

class BidView(Bid):
    """A bid with its bidder's display name."""
    bidder_name: Optional[str] = None


class ListingSummary(Listing):
    """A listing as shown when browsing."""
    seller: Optional[SellerSummary] = None


class ListingDetail(Listing):
    """A listing with its seller, top bids and derived price."""
    seller: Optional[SellerSummary] = None
    bids: List[BidView] = Field(default_factory=list)
    current_price: CurrentPrice
