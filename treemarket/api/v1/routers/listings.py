"""
API router for listing endpoints.
"""
from fastapi import APIRouter, Path, Query, Request, status
from typing import Annotated, List, Optional

from treemarket.api.dependencies import ListingServiceDep, UserServiceDep
from treemarket.api.rate_limit import WRITE_LIMIT, limiter
from treemarket.api.v1.models.requests import CreateListingRequest
from treemarket.api.v1.models.responses import ERROR_RESPONSES, ErrorResponse
from treemarket.domain.models import (
    Listing,
    ListingDetail,
    ListingFilter,
    ListingSummary,
    PricingType,
)


router = APIRouter(
    prefix="/listings",
    tags=["listings"],
)


@router.get(
    "",
    response_model=List[ListingSummary],
    summary="Browse active listings",
    description="""
    Return active listings, newest first, each with its seller's name and
    business name.

    - `species` and `suburb` match case-insensitive substrings
    - `state` and `pricingType` match exactly
    """,
    responses={500: ERROR_RESPONSES[500]},
)
def list_listings(
    listing_service: ListingServiceDep,
    species: Annotated[Optional[str], Query()] = None,
    suburb: Annotated[Optional[str], Query()] = None,
    state: Annotated[Optional[str], Query()] = None,
    pricing_type: Annotated[Optional[PricingType], Query(alias="pricingType")] = None,
) -> List[ListingSummary]:
    criteria = ListingFilter(
        species=species,
        suburb=suburb,
        state=state,
        pricing_type=pricing_type,
    )
    return listing_service.list_listings(criteria)


@router.get(
    "/{listing_id}",
    response_model=ListingDetail,
    summary="Get a listing",
    description="""
    Return a listing with its seller's public profile, its highest bids
    (highest first) and its current price.
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Listing not found"},
        500: ERROR_RESPONSES[500],
    },
)
def get_listing(
    listing_id: Annotated[str, Path(description="Unique identifier for the listing")],
    listing_service: ListingServiceDep,
    bid_limit: Annotated[
        Optional[int],
        Query(alias="bidLimit", ge=1, le=50, description="Number of bids to include"),
    ] = None,
) -> ListingDetail:
    return listing_service.get_listing(listing_id, bid_limit=bid_limit)


@router.post(
    "",
    response_model=Listing,
    status_code=status.HTTP_201_CREATED,
    summary="Create a listing",
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        **ERROR_RESPONSES,
    },
)
@limiter.limit(WRITE_LIMIT)
def create_listing(
    request: Request,
    body: CreateListingRequest,
    user_service: UserServiceDep,
    listing_service: ListingServiceDep,
) -> Listing:
    """
    Create an active listing for the calling seller.

    The seller's user record is created on first use from the supplied
    email and name.
    """
    seller = user_service.ensure_user(body.auth0_id, email=body.user_email, name=body.user_name)
    return listing_service.create_listing(seller.id, body.listing_fields())
