"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- An in-memory MongoDB (mongomock) database
- Repositories and services wired to that database
- Sample sellers, bidders and listings
- FastAPI test client with the database overridden
"""
import mongomock
import pytest
from typing import Iterator
from fastapi.testclient import TestClient

from treemarket.api.dependencies import get_db, get_image_store
from treemarket.api.rate_limit import limiter
from treemarket.infrastructure.database import USERS, ensure_indexes
from treemarket.infrastructure.image_storage import ImageStore
from treemarket.infrastructure.repositories import (
    BidRepository,
    ListingRepository,
    SettingsRepository,
    UserRepository,
)
from treemarket.main import app
from treemarket.services.application.bid_service import BidService
from treemarket.services.application.listing_service import ListingService
from treemarket.services.application.settings_service import SettingsService
from treemarket.services.application.user_service import UserService


# ============================================================
# Database Fixtures
# ============================================================

@pytest.fixture
def db():
    """Fresh in-memory database with production indexes."""
    database = mongomock.MongoClient()["tree_market_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def listing_repo(db) -> ListingRepository:
    return ListingRepository(db)


@pytest.fixture
def bid_repo(db) -> BidRepository:
    return BidRepository(db)


@pytest.fixture
def user_repo(db) -> UserRepository:
    return UserRepository(db)


@pytest.fixture
def settings_repo(db) -> SettingsRepository:
    return SettingsRepository(db)


# ============================================================
# Service Fixtures
# ============================================================

@pytest.fixture
def user_service(user_repo) -> UserService:
    return UserService(users=user_repo)


@pytest.fixture
def listing_service(listing_repo, bid_repo, user_repo) -> ListingService:
    return ListingService(listings=listing_repo, bids=bid_repo, users=user_repo)


@pytest.fixture
def bid_service(listing_repo, bid_repo) -> BidService:
    return BidService(listings=listing_repo, bids=bid_repo)


@pytest.fixture
def settings_service(settings_repo, user_repo) -> SettingsService:
    return SettingsService(store=settings_repo, users=user_repo)


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def seller(db, user_service):
    """A seller with a business name."""
    user_service.ensure_user("auth0|seller", email="seller@example.com", name="Sam Seller")
    db[USERS].update_one({"auth0_id": "auth0|seller"}, {"$set": {"business_name": "Sam's Trees"}})
    return user_service.get_user("auth0|seller")


@pytest.fixture
def bidder(user_service):
    return user_service.ensure_user("auth0|bidder", email="bidder@example.com", name="Bea Buyer")


@pytest.fixture
def admin(db, user_service):
    """A user with the admin flag set."""
    user = user_service.ensure_user("auth0|admin", email="admin@example.com", name="Ada Admin")
    db[USERS].update_one({"auth0_id": "auth0|admin"}, {"$set": {"is_admin": True}})
    return user


@pytest.fixture
def listing_fields() -> dict:
    """Minimal valid fields for an auction listing."""
    return {
        "title": "Mature Jacaranda",
        "species": "Jacaranda mimosifolia",
        "address": "12 Example St",
        "suburb": "Paddington",
        "state": "QLD",
        "postcode": "4064",
        "pricing_type": "auction",
        "price": 500,
    }


@pytest.fixture
def auction_listing(listing_service, seller, listing_fields):
    """Active auction starting at $500 with no bids."""
    return listing_service.create_listing(seller.id, listing_fields)


@pytest.fixture
def fixed_listing(listing_service, seller, listing_fields):
    """Active fixed-price listing at $1200."""
    fields = dict(listing_fields, title="Potted Olive", pricing_type="fixed", price=1200)
    return listing_service.create_listing(seller.id, fields)


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(db, tmp_path) -> Iterator[TestClient]:
    """Test client backed by the in-memory database, with lifespan run."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_image_store] = lambda: ImageStore(
        directory=str(tmp_path), url_prefix="/uploads/listings"
    )
    limiter.enabled = False
    try:
        with TestClient(app) as client:
            yield client
    finally:
        limiter.enabled = True
        app.dependency_overrides.clear()
