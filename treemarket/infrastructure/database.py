"""
Infrastructure layer: MongoDB connection and index setup.
"""
import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from treemarket.config import settings

logger = logging.getLogger(__name__)


# Collection names
LISTINGS = "listings"
BIDS = "bids"
USERS = "users"
SITE_SETTINGS = "site_settings"


_client: Optional[MongoClient] = None
_database: Optional[Database] = None


def get_database() -> Database:
    """
    Get or create the singleton database handle.

    Returns:
        pymongo Database for the configured database name
    """
    global _client, _database
    if _database is None:
        _client = MongoClient(settings.mongo_uri, tz_aware=True)
        _database = _client[settings.mongo_db_name]
        logger.info(f"Connected to MongoDB database '{settings.mongo_db_name}'")
    return _database


def close_database() -> None:
    """Close the client opened by get_database, if any."""
    global _client, _database
    if _client is not None:
        _client.close()
    _client = None
    _database = None


def ensure_indexes(db: Database) -> None:
    """
    Create the indexes the queries and uniqueness rules rely on.

    Safe to run on every start; MongoDB ignores indexes that already exist.
    """
    db[LISTINGS].create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    db[LISTINGS].create_index([("suburb", ASCENDING), ("state", ASCENDING)])
    db[BIDS].create_index([("listing_id", ASCENDING), ("amount", DESCENDING)])
    db[BIDS].create_index([("bidder_id", ASCENDING)])
    db[USERS].create_index("auth0_id", unique=True)
    # Users created without an email have no email field at all.
    db[USERS].create_index("email", unique=True, sparse=True)
    logger.info("MongoDB indexes ensured")
