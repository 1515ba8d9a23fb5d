"""
API router for bid endpoints.
"""
from fastapi import APIRouter, Request, status

from treemarket.api.dependencies import BidServiceDep, UserServiceDep
from treemarket.api.rate_limit import WRITE_LIMIT, limiter
from treemarket.api.v1.models.requests import PlaceBidRequest
from treemarket.api.v1.models.responses import ERROR_RESPONSES, ErrorResponse
from treemarket.domain.errors import AuthenticationError
from treemarket.domain.models import Bid


router = APIRouter(
    prefix="/bids",
    tags=["bids"],
)


@router.post(
    "",
    response_model=Bid,
    status_code=status.HTTP_201_CREATED,
    summary="Place a bid",
    description="""
    Place a bid on an active auction listing.

    The amount must be strictly higher than both the current highest bid
    and the listing's starting price. Fixed-price and inactive listings do
    not accept bids.
    """,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Listing not found"},
        **ERROR_RESPONSES,
    },
)
@limiter.limit(WRITE_LIMIT)
def place_bid(
    request: Request,
    body: PlaceBidRequest,
    user_service: UserServiceDep,
    bid_service: BidServiceDep,
) -> Bid:
    if not body.auth0_id:
        raise AuthenticationError("Authentication required")
    # Reject unusable input before a user record is created for the caller.
    bid_service.check_offer(body.listing_id, body.amount)
    bidder = user_service.ensure_user(body.auth0_id, email=body.user_email, name=body.user_name)
    return bid_service.place_bid(
        listing_id=body.listing_id,
        bidder_id=bidder.id,
        amount=body.amount,
        message=body.message,
    )
