"""
Application service: listing creation and retrieval.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from treemarket.config import settings
from treemarket.domain.errors import NotFoundError, ValidationError
from treemarket.domain.models import (
    BidView,
    Listing,
    ListingDetail,
    ListingFilter,
    ListingStatus,
    ListingSummary,
    SellerSummary,
    User,
)
from treemarket.infrastructure.repositories import (
    BidRepository,
    ListingRepository,
    UserRepository,
)
from treemarket.services.domain import bid_rules

logger = logging.getLogger(__name__)


REQUIRED_LISTING_FIELDS = (
    "title",
    "species",
    "address",
    "suburb",
    "state",
    "postcode",
    "pricing_type",
)


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a pydantic error into a single human-readable sentence."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


class ListingService:
    """
    Application service for listings.

    Owns listing creation and the read paths that join listings with their
    sellers and bids.
    """

    def __init__(
        self,
        listings: ListingRepository,
        bids: BidRepository,
        users: UserRepository,
    ):
        self.listings = listings
        self.bids = bids
        self.users = users

    def create_listing(self, seller_id: str, fields: Dict[str, Any]) -> Listing:
        """
        Create an active listing owned by seller_id.

        Args:
            seller_id: Internal id of the (already ensured) seller
            fields: Listing attributes keyed by snake_case field name

        Returns:
            The stored Listing

        Raises:
            ValidationError: If a required field is missing or a value is malformed
        """
        missing = [name for name in REQUIRED_LISTING_FIELDS if not fields.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        data = {key: value for key, value in fields.items() if value is not None}
        data.update(seller_id=seller_id, status=ListingStatus.ACTIVE)
        data.pop("id", None)
        data.pop("highest_bid", None)
        try:
            listing = Listing(**data)
        except PydanticValidationError as e:
            raise ValidationError(describe_validation_error(e))

        created = self.listings.insert(listing)
        logger.info(
            f"Listing {created.id} created by seller {seller_id} "
            f"({created.pricing_type}, {len(created.pickup_windows)} pickup windows)"
        )
        return created

    def get_listing(self, listing_id: str, bid_limit: Optional[int] = None) -> ListingDetail:
        """
        Fetch a listing with its seller and highest bids.

        Args:
            listing_id: Listing id
            bid_limit: Number of bids to include, highest first

        Returns:
            ListingDetail with seller profile, top bids and current price

        Raises:
            NotFoundError: If no listing has this id
        """
        listing = self.listings.get(listing_id)
        if listing is None:
            raise NotFoundError("Listing not found")

        limit = bid_limit or settings.api_bid_limit
        bids = self.bids.top_for_listing(listing.id, limit)
        people = self.users.get_many([listing.seller_id, *(bid.bidder_id for bid in bids)])

        return ListingDetail(
            **listing.model_dump(),
            seller=_seller_summary(people.get(listing.seller_id), include_email=True),
            bids=[
                BidView(
                    **bid.model_dump(),
                    bidder_name=people[bid.bidder_id].name if bid.bidder_id in people else None,
                )
                for bid in bids
            ],
            current_price=bid_rules.current_price(listing, bids),
        )

    def list_listings(self, criteria: Optional[ListingFilter] = None) -> List[ListingSummary]:
        """
        Browse active listings, newest first.

        Species and suburb match case-insensitive substrings; state and
        pricing type match exactly.
        """
        listings = self.listings.find_active(criteria or ListingFilter())
        sellers = self.users.get_many(listing.seller_id for listing in listings)
        return [
            ListingSummary(
                **listing.model_dump(),
                seller=_seller_summary(sellers.get(listing.seller_id)),
            )
            for listing in listings
        ]


def _seller_summary(user: Optional[User], include_email: bool = False) -> Optional[SellerSummary]:
    if user is None:
        return None
    return SellerSummary(
        id=user.id,
        name=user.name,
        business_name=user.business_name,
        email=user.email if include_email else None,
    )
