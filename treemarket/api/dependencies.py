"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends
from pymongo.database import Database

from treemarket.infrastructure.database import get_database
from treemarket.infrastructure.image_storage import ImageStore
from treemarket.infrastructure.repositories import (
    BidRepository,
    ListingRepository,
    SettingsRepository,
    UserRepository,
)
from treemarket.infrastructure.species_client import SpeciesClient, get_species_client
from treemarket.services.application.bid_service import BidService
from treemarket.services.application.listing_service import ListingService
from treemarket.services.application.settings_service import SettingsService
from treemarket.services.application.user_service import UserService


def get_db() -> Database:
    """
    Dependency factory for the MongoDB database.

    Returns:
        Database handle shared by all repositories
    """
    return get_database()


DatabaseDep = Annotated[Database, Depends(get_db)]


def get_user_service(db: DatabaseDep) -> UserService:
    return UserService(users=UserRepository(db))


def get_listing_service(db: DatabaseDep) -> ListingService:
    """
    Dependency factory for ListingService.

    Args:
        db: Database (injected)

    Returns:
        ListingService instance
    """
    return ListingService(
        listings=ListingRepository(db),
        bids=BidRepository(db),
        users=UserRepository(db),
    )


def get_bid_service(db: DatabaseDep) -> BidService:
    """
    Dependency factory for BidService.

    Args:
        db: Database (injected)

    Returns:
        BidService instance
    """
    return BidService(listings=ListingRepository(db), bids=BidRepository(db))


def get_settings_service(db: DatabaseDep) -> SettingsService:
    return SettingsService(store=SettingsRepository(db), users=UserRepository(db))


def get_image_store() -> ImageStore:
    return ImageStore()


# Type aliases for cleaner route signatures
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
BidServiceDep = Annotated[BidService, Depends(get_bid_service)]
SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]
ImageStoreDep = Annotated[ImageStore, Depends(get_image_store)]
SpeciesClientDep = Annotated[SpeciesClient, Depends(get_species_client)]
