"""
Infrastructure layer: MongoDB repositories.

Each repository maps one collection to its domain model. Documents keep
snake_case field names; the ObjectId in ``_id`` is exposed as a string ``id``.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from treemarket.domain.models import (
    Bid,
    Listing,
    ListingFilter,
    ListingStatus,
    PricingType,
    SiteSettings,
    User,
)
from treemarket.infrastructure import database


SITE_SETTINGS_ID = "site"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """Parse a string id, returning None for anything that is not an ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def _from_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return data


class ListingRepository:
    """Persistence for listings."""

    def __init__(self, db: Database):
        self.collection = db[database.LISTINGS]

    def insert(self, listing: Listing) -> Listing:
        now = utcnow()
        doc = listing.model_dump(exclude={"id"})
        # Calendar dates have no BSON type; windows are stored as JSON values.
        doc["pickup_windows"] = [
            window.model_dump(mode="json") for window in listing.pickup_windows
        ]
        doc["created_at"] = now
        doc["updated_at"] = now
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return Listing(**_from_document(doc))

    def get(self, listing_id: str) -> Optional[Listing]:
        oid = to_object_id(listing_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return Listing(**_from_document(doc)) if doc else None

    def find_active(self, criteria: ListingFilter) -> List[Listing]:
        query: Dict[str, Any] = {"status": ListingStatus.ACTIVE.value}
        if criteria.species:
            query["species"] = {"$regex": re.escape(criteria.species), "$options": "i"}
        if criteria.suburb:
            query["suburb"] = {"$regex": re.escape(criteria.suburb), "$options": "i"}
        if criteria.state:
            query["state"] = criteria.state
        if criteria.pricing_type:
            query["pricing_type"] = criteria.pricing_type
        cursor = self.collection.find(query).sort("created_at", DESCENDING)
        return [Listing(**_from_document(doc)) for doc in cursor]

    def reserve_highest_bid(self, listing_id: str, amount: float) -> Optional[Listing]:
        """
        Atomically record amount as the listing's highest bid.

        The write only matches while the listing is an active auction whose
        stored highest bid is absent or strictly lower than amount, so two
        concurrent bidders can never both claim the same floor.

        Returns:
            The updated listing, or None if the condition no longer held
        """
        oid = to_object_id(listing_id)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {
                "_id": oid,
                "status": ListingStatus.ACTIVE.value,
                "pricing_type": PricingType.AUCTION.value,
                "$or": [
                    {"highest_bid": None},
                    {"highest_bid": {"$lt": amount}},
                ],
            },
            {"$set": {"highest_bid": amount, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return Listing(**_from_document(doc)) if doc else None

    def release_highest_bid(
        self,
        listing_id: str,
        amount: float,
        previous: Optional[float],
    ) -> bool:
        """Undo a reservation, unless a later bid has already replaced it."""
        result = self.collection.update_one(
            {"_id": to_object_id(listing_id), "highest_bid": amount},
            {"$set": {"highest_bid": previous, "updated_at": utcnow()}},
        )
        return result.modified_count == 1


class BidRepository:
    """Persistence for bids."""

    def __init__(self, db: Database):
        self.collection = db[database.BIDS]

    def insert(self, bid: Bid) -> Bid:
        doc = bid.model_dump(exclude={"id"})
        doc["created_at"] = utcnow()
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return Bid(**_from_document(doc))

    def top_for_listing(self, listing_id: str, limit: int) -> List[Bid]:
        """Bids for a listing by amount, highest first."""
        cursor = (
            self.collection.find({"listing_id": listing_id})
            .sort("amount", DESCENDING)
            .limit(limit)
        )
        return [Bid(**_from_document(doc)) for doc in cursor]

    def highest_for_listing(self, listing_id: str) -> Optional[Bid]:
        bids = self.top_for_listing(listing_id, 1)
        return bids[0] if bids else None


class UserRepository:
    """Persistence for users, keyed by authentication provider id."""

    def __init__(self, db: Database):
        self.collection = db[database.USERS]

    def ensure(
        self,
        auth0_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> User:
        """
        Return the user for auth0_id, creating it on first sight.

        Profile hints only apply on insert; an existing record is never
        overwritten.

        Raises:
            DuplicateKeyError: If email belongs to a different user
        """
        now = utcnow()
        on_insert: Dict[str, Any] = {
            "auth0_id": auth0_id,
            "is_admin": False,
            "created_at": now,
            "updated_at": now,
        }
        if email:
            on_insert["email"] = email
        if name:
            on_insert["name"] = name
        try:
            doc = self.collection.find_one_and_update(
                {"auth0_id": auth0_id},
                {"$setOnInsert": on_insert},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # Lost an insert race for the same auth0_id; the winner's record is ours.
            doc = self.collection.find_one({"auth0_id": auth0_id})
            if doc is None:
                raise
        return User(**_from_document(doc))

    def get_by_auth0_id(self, auth0_id: str) -> Optional[User]:
        doc = self.collection.find_one({"auth0_id": auth0_id})
        return User(**_from_document(doc)) if doc else None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        oids = [oid for oid in (to_object_id(uid) for uid in set(user_ids)) if oid]
        if not oids:
            return {}
        users = {}
        for doc in self.collection.find({"_id": {"$in": oids}}):
            user = User(**_from_document(doc))
            users[user.id] = user
        return users


class SettingsRepository:
    """Persistence for the singleton site settings document."""

    def __init__(self, db: Database):
        self.collection = db[database.SITE_SETTINGS]

    def ensure_defaults(self) -> SiteSettings:
        """Write the default settings if none exist and return what is stored."""
        defaults = SiteSettings().model_dump(exclude_none=True)
        defaults["updated_at"] = utcnow()
        doc = self.collection.find_one_and_update(
            {"_id": SITE_SETTINGS_ID},
            {"$setOnInsert": defaults},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        doc.pop("_id", None)
        return SiteSettings(**doc)

    def update(self, fields: Dict[str, Any]) -> SiteSettings:
        changes = dict(fields)
        changes["updated_at"] = utcnow()
        # Defaults fill whatever the update does not mention.
        defaults = {
            key: value
            for key, value in SiteSettings().model_dump(exclude_none=True).items()
            if key not in changes
        }
        update: Dict[str, Any] = {"$set": changes}
        if defaults:
            update["$setOnInsert"] = defaults
        doc = self.collection.find_one_and_update(
            {"_id": SITE_SETTINGS_ID},
            update,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        doc.pop("_id", None)
        return SiteSettings(**doc)
