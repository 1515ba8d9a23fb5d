"""
Domain service: pricing and bid acceptance rules.

Pure functions over domain models. Nothing here touches storage; the
application layer loads the listing and bids and asks these rules what
the current price is and whether an offer clears the floor.
"""
from typing import Optional, Sequence

from treemarket.domain.errors import InvalidStateError, ValidationError
from treemarket.domain.models import (
    Bid,
    CurrentPrice,
    Listing,
    ListingStatus,
    PriceKind,
    PricingType,
)


CONTACT_FOR_PRICE_LABEL = "Contact for price"
NO_BIDS_LABEL = "No bids yet"


def format_amount(amount: float) -> str:
    """Render a currency amount without a trailing '.0' for whole dollars."""
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}".rstrip("0")


def highest_bid_amount(bids: Sequence[Bid]) -> Optional[float]:
    """Return the largest bid amount, or None when there are no bids."""
    if not bids:
        return None
    return max(bid.amount for bid in bids)


def current_price(listing: Listing, bids: Sequence[Bid]) -> CurrentPrice:
    """
    Derive the price to display for a listing.

    Fixed listings show their price (or ask buyers to get in touch).
    Auctions show the highest bid, falling back to the starting price
    and then to a "no bids" marker.

    Args:
        listing: The listing being priced
        bids: Bids for the listing, in any order

    Returns:
        CurrentPrice describing the amount and how it was derived
    """
    if listing.pricing_type == PricingType.FIXED:
        if listing.price is None:
            return CurrentPrice(kind=PriceKind.CONTACT_FOR_PRICE, label=CONTACT_FOR_PRICE_LABEL)
        return CurrentPrice(
            kind=PriceKind.FIXED,
            amount=listing.price,
            label=f"${format_amount(listing.price)}",
        )

    highest = highest_bid_amount(bids)
    if highest is not None:
        return CurrentPrice(
            kind=PriceKind.HIGHEST_BID,
            amount=highest,
            label=f"${format_amount(highest)}",
        )
    if listing.price is not None:
        return CurrentPrice(
            kind=PriceKind.STARTING_PRICE,
            amount=listing.price,
            label=f"Starting at ${format_amount(listing.price)}",
        )
    return CurrentPrice(kind=PriceKind.NO_BIDS, label=NO_BIDS_LABEL)


def bid_floor(listing: Listing, highest_bid: Optional[float]) -> float:
    """A new bid must be strictly greater than this amount."""
    return max(highest_bid or 0, listing.price or 0)


def ensure_accepts_bids(listing: Listing) -> None:
    """
    Raise InvalidStateError unless the listing is an active auction.

    Raises:
        InvalidStateError: If the listing is not active or not an auction
    """
    if listing.status != ListingStatus.ACTIVE:
        raise InvalidStateError("Listing is no longer active")
    if listing.pricing_type != PricingType.AUCTION:
        raise InvalidStateError("This listing does not accept bids")


def ensure_clears_floor(amount: float, floor: float) -> None:
    """
    Raise ValidationError unless amount is strictly above floor.

    Raises:
        ValidationError: With the floor embedded in the message
    """
    if amount <= floor:
        raise ValidationError(f"Bid must be higher than ${format_amount(floor)}")
