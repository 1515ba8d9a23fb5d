"""
Application service: bid validation and recording.
"""
import logging
import math
from typing import Optional

from treemarket.config import settings
from treemarket.domain.errors import (
    AuthenticationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from treemarket.domain.models import Bid, BidStatus
from treemarket.infrastructure.repositories import BidRepository, ListingRepository
from treemarket.services.domain import bid_rules

logger = logging.getLogger(__name__)


class BidService:
    """
    Application service for placing bids on auction listings.

    The read-validate-write sequence is made atomic per listing with a
    conditional update on the listing's stored highest bid. A conflicting
    concurrent bid makes the update miss, and the whole check is re-run
    against fresh state.
    """

    def __init__(
        self,
        listings: ListingRepository,
        bids: BidRepository,
        max_attempts: Optional[int] = None,
    ):
        self.listings = listings
        self.bids = bids
        self.max_attempts = max_attempts or settings.bid_write_attempts

    def check_offer(self, listing_id: Optional[str], amount: Optional[float]) -> None:
        """
        Reject a bid request whose listing id or amount is unusable.

        Needs no stored state, so callers can run it before provisioning
        the bidder.

        Raises:
            ValidationError: If listing_id or amount is missing, or amount
                is negative or not a finite number
        """
        if not listing_id or not amount:
            raise ValidationError("Listing ID and amount are required")
        if not math.isfinite(amount):
            raise ValidationError("Bid amount must be a finite number")
        if amount < 0:
            raise ValidationError("Bid amount must be positive")

    def place_bid(
        self,
        listing_id: Optional[str],
        bidder_id: Optional[str],
        amount: Optional[float],
        message: Optional[str] = None,
    ) -> Bid:
        """
        Place a bid on an auction listing.

        Args:
            listing_id: Target listing id
            bidder_id: Internal id of the (already ensured) bidder
            amount: Offered amount in dollars
            message: Optional note to the seller

        Returns:
            The recorded Bid, with status pending

        Raises:
            AuthenticationError: If there is no bidder
            ValidationError: If listing_id or amount is missing, or amount
                does not exceed the current highest bid / starting price
            NotFoundError: If the listing does not exist
            InvalidStateError: If the listing is not an active auction
        """
        if not bidder_id:
            raise AuthenticationError("Authentication required")
        self.check_offer(listing_id, amount)

        for attempt in range(1, self.max_attempts + 1):
            listing = self.listings.get(listing_id)
            if listing is None:
                raise NotFoundError("Listing not found")
            bid_rules.ensure_accepts_bids(listing)

            highest = self.bids.highest_for_listing(listing.id)
            highest_amount = max(
                highest.amount if highest else 0,
                listing.highest_bid or 0,
            )
            floor = bid_rules.bid_floor(listing, highest_amount)
            bid_rules.ensure_clears_floor(amount, floor)

            if self.listings.reserve_highest_bid(listing.id, amount) is None:
                logger.info(
                    f"Bid of {amount} on listing {listing.id} lost a race "
                    f"(attempt {attempt}/{self.max_attempts}); re-checking"
                )
                continue

            try:
                bid = self.bids.insert(Bid(
                    listing_id=listing.id,
                    bidder_id=bidder_id,
                    amount=amount,
                    message=message,
                    status=BidStatus.PENDING,
                ))
            except Exception:
                self.listings.release_highest_bid(listing.id, amount, listing.highest_bid)
                raise

            logger.info(f"Bid {bid.id} of {amount} accepted on listing {listing.id}")
            return bid

        logger.warning(f"Giving up on bid of {amount} for listing {listing_id} after {self.max_attempts} attempts")
        raise StorageError("Could not record bid, please try again")
