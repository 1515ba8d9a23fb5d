"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle against an in-memory database,
with the species lookup client replaced by a mock.
"""
import pytest
from unittest.mock import AsyncMock

from treemarket.domain.errors import NotFoundError
from treemarket.infrastructure.database import USERS
from treemarket.infrastructure.species_client import (
    SpeciesClient,
    SpeciesDetail,
    SpeciesSuggestion,
    get_species_client,
)
from treemarket.main import app


SELLER = {"auth0Id": "auth0|seller", "userEmail": "seller@example.com", "userName": "Sam Seller"}
BIDDER = {"auth0Id": "auth0|bidder", "userEmail": "bidder@example.com", "userName": "Bea Buyer"}


@pytest.fixture
def listing_body() -> dict:
    return {
        **SELLER,
        "title": "Mature Jacaranda",
        "species": "Jacaranda mimosifolia",
        "address": "12 Example St",
        "suburb": "Paddington",
        "state": "QLD",
        "postcode": "4064",
        "pricingType": "auction",
        "price": 500,
        "pickupWindows": [{"type": "flexible", "daysOfWeek": ["saturday", "sunday"]}],
    }


@pytest.fixture
def created_listing(test_client, listing_body) -> dict:
    response = test_client.post("/api/listings", json=listing_body)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def mock_species_client():
    client = AsyncMock(spec=SpeciesClient)
    app.dependency_overrides[get_species_client] = lambda: client
    return client


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ============================================================
# Listing Endpoint Tests
# ============================================================

class TestListingEndpoints:
    """Tests for creating, browsing and reading listings."""

    def test_create_listing(self, created_listing):
        assert created_listing["id"]
        assert created_listing["status"] == "active"
        assert created_listing["pricingType"] == "auction"
        assert created_listing["sellerId"]
        assert created_listing["pickupWindows"][0]["type"] == "flexible"

    def test_create_requires_identity(self, test_client, listing_body):
        listing_body.pop("auth0Id")

        response = test_client.post("/api/listings", json=listing_body)

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_create_missing_suburb(self, test_client, listing_body):
        listing_body.pop("suburb")

        response = test_client.post("/api/listings", json=listing_body)

        assert response.status_code == 400
        assert "suburb" in response.json()["error"]
        assert test_client.get("/api/listings").json() == []

    def test_create_with_bad_enum(self, test_client, listing_body):
        listing_body["pricingType"] = "barter"

        response = test_client.post("/api/listings", json=listing_body)

        assert response.status_code == 400
        assert "error" in response.json()

    def test_browse_with_filters(self, test_client, listing_body):
        test_client.post("/api/listings", json=listing_body)
        test_client.post("/api/listings", json={
            **listing_body, "title": "Potted Olive", "species": "Olea europaea",
            "pricingType": "fixed", "price": 1200,
        })

        everything = test_client.get("/api/listings").json()
        olives = test_client.get("/api/listings", params={"species": "olea"}).json()
        fixed = test_client.get("/api/listings", params={"pricingType": "fixed"}).json()

        assert len(everything) == 2
        assert [item["title"] for item in olives] == ["Potted Olive"]
        assert [item["title"] for item in fixed] == ["Potted Olive"]
        assert fixed[0]["seller"]["name"] == "Sam Seller"

    def test_browse_rejects_unknown_pricing_type(self, test_client):
        response = test_client.get("/api/listings", params={"pricingType": "barter"})

        assert response.status_code == 400

    def test_get_unknown_listing(self, test_client):
        response = test_client.get("/api/listings/0123456789abcdef01234567")

        assert response.status_code == 404
        assert response.json() == {"error": "Listing not found"}

    def test_get_listing_detail(self, test_client, created_listing):
        test_client.post("/api/bids", json={**BIDDER, "listingId": created_listing["id"], "amount": 650})

        response = test_client.get(f"/api/listings/{created_listing['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["seller"]["email"] == "seller@example.com"
        assert data["bids"][0]["amount"] == 650
        assert data["bids"][0]["bidderName"] == "Bea Buyer"
        assert data["currentPrice"]["kind"] == "highest_bid"
        assert data["currentPrice"]["label"] == "$650"

    def test_bid_limit_out_of_range(self, test_client, created_listing):
        response = test_client.get(
            f"/api/listings/{created_listing['id']}", params={"bidLimit": 0}
        )

        assert response.status_code == 400
        assert "bidLimit" in response.json()["error"]


# ============================================================
# Bid Endpoint Tests
# ============================================================

class TestBidEndpoints:
    """Tests for placing bids over HTTP."""

    def test_place_bid(self, test_client, created_listing):
        response = test_client.post(
            "/api/bids",
            json={**BIDDER, "listingId": created_listing["id"], "amount": 501, "message": "Keen"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["amount"] == 501
        assert data["status"] == "pending"
        assert data["listingId"] == created_listing["id"]

    def test_bid_at_starting_price(self, test_client, created_listing):
        response = test_client.post(
            "/api/bids", json={**BIDDER, "listingId": created_listing["id"], "amount": 500}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Bid must be higher than $500"}

    def test_bid_on_fixed_listing(self, test_client, listing_body):
        listing = test_client.post(
            "/api/listings", json={**listing_body, "pricingType": "fixed", "price": 900}
        ).json()

        response = test_client.post(
            "/api/bids", json={**BIDDER, "listingId": listing["id"], "amount": 5000}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "This listing does not accept bids"}

    def test_bid_on_unknown_listing(self, test_client):
        response = test_client.post(
            "/api/bids", json={**BIDDER, "listingId": "0123456789abcdef01234567", "amount": 10}
        )

        assert response.status_code == 404

    def test_bid_requires_identity(self, test_client, created_listing):
        response = test_client.post(
            "/api/bids", json={"listingId": created_listing["id"], "amount": 600}
        )

        assert response.status_code == 401

    def test_bid_requires_amount(self, test_client, created_listing):
        response = test_client.post(
            "/api/bids", json={**BIDDER, "listingId": created_listing["id"]}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Listing ID and amount are required"}

    def test_rejected_bid_does_not_create_user(self, test_client, db, created_listing):
        response = test_client.post(
            "/api/bids",
            json={"auth0Id": "auth0|fresh", "userName": "Fresh", "listingId": created_listing["id"]},
        )

        assert response.status_code == 400
        assert db[USERS].count_documents({"auth0_id": "auth0|fresh"}) == 0

    @pytest.mark.parametrize("literal", ["Infinity", "NaN", "-Infinity"])
    def test_non_finite_amount(self, test_client, created_listing, literal):
        body = (
            f'{{"auth0Id": "{BIDDER["auth0Id"]}", '
            f'"listingId": "{created_listing["id"]}", "amount": {literal}}}'
        )

        response = test_client.post(
            "/api/bids", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert "amount" in response.json()["error"]

        detail = test_client.get(f"/api/listings/{created_listing['id']}").json()
        assert detail["highestBid"] is None
        assert detail["currentPrice"]["kind"] == "starting_price"

        follow_up = test_client.post(
            "/api/bids", json={**BIDDER, "listingId": created_listing["id"], "amount": 501}
        )
        assert follow_up.status_code == 201


# ============================================================
# User Endpoint Tests
# ============================================================

class TestUserEndpoints:
    """Tests for the current-user endpoint."""

    def test_requires_auth0_id(self, test_client):
        response = test_client.get("/api/user/me")

        assert response.status_code == 400
        assert response.json() == {"error": "auth0Id required"}

    def test_creates_and_returns_profile(self, test_client):
        params = {"auth0Id": "auth0|new", "email": "new@example.com", "name": "Newbie"}

        first = test_client.get("/api/user/me", params=params)
        second = test_client.get("/api/user/me", params={"auth0Id": "auth0|new"})

        assert first.status_code == 200
        assert first.json() == {"isAdmin": False, "name": "Newbie", "email": "new@example.com"}
        assert second.json() == first.json()

    def test_admin_flag(self, test_client, admin):
        response = test_client.get("/api/user/me", params={"auth0Id": admin.auth0_id})

        assert response.json()["isAdmin"] is True


# ============================================================
# Settings Endpoint Tests
# ============================================================

class TestSettingsEndpoints:
    """Tests for site settings administration."""

    def test_defaults_available_after_startup(self, test_client):
        response = test_client.get("/api/admin/settings")

        assert response.status_code == 200
        assert response.json()["heroTitle"]

    def test_update_requires_identity(self, test_client):
        response = test_client.put("/api/admin/settings", json={"heroTitle": "Hi"})

        assert response.status_code == 401

    def test_non_admin_forbidden(self, test_client, seller):
        before = test_client.get("/api/admin/settings").json()

        response = test_client.put(
            "/api/admin/settings", json={"auth0Id": seller.auth0_id, "heroTitle": "Hacked"}
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required"}
        assert test_client.get("/api/admin/settings").json() == before

    def test_admin_update(self, test_client, admin):
        before = test_client.get("/api/admin/settings").json()

        response = test_client.put(
            "/api/admin/settings", json={"auth0Id": admin.auth0_id, "heroTitle": "Trees for all"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["heroTitle"] == "Trees for all"
        assert data["ctaTitle"] == before["ctaTitle"]


# ============================================================
# Upload Endpoint Tests
# ============================================================

class TestUploadEndpoint:
    """Tests for listing image uploads."""

    def test_upload_images(self, test_client, tmp_path):
        response = test_client.post(
            "/api/upload",
            files=[
                ("files", ("front.jpg", b"\xff\xd8\xff" + b"\x00" * 64, "image/jpeg")),
                ("files", ("side.png", b"\x89PNG" + b"\x00" * 64, "image/png")),
            ],
        )

        assert response.status_code == 200
        urls = response.json()["urls"]
        assert len(urls) == 2
        assert all(url.startswith("/uploads/listings/") for url in urls)
        assert urls[1].endswith(".png")
        assert len(list(tmp_path.iterdir())) == 2

    def test_upload_wrong_type(self, test_client, tmp_path):
        response = test_client.post(
            "/api/upload",
            files=[("files", ("anim.gif", b"GIF89a", "image/gif"))],
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid file type: image/gif")
        assert list(tmp_path.iterdir()) == []


# ============================================================
# Species Endpoint Tests
# ============================================================

class TestSpeciesEndpoints:
    """Tests for the species lookup proxy."""

    def test_search(self, test_client, mock_species_client):
        mock_species_client.search.return_value = [
            SpeciesSuggestion(scientific_name="Jacaranda mimosifolia", common_name="Jacaranda"),
        ]

        response = test_client.get("/api/species/search", params={"q": "jac"})

        assert response.status_code == 200
        assert response.json()[0]["scientificName"] == "Jacaranda mimosifolia"
        mock_species_client.search.assert_awaited_once_with("jac")

    def test_detail_with_url_guid(self, test_client, mock_species_client):
        mock_species_client.get_species.return_value = SpeciesDetail(
            scientific_name="Ficus macrophylla", common_name="Moreton Bay Fig"
        )

        response = test_client.get(
            "/api/species/https%3A%2F%2Fid.biodiversity.org.au%2Fnode%2Fapni%2F2912252"
        )

        assert response.status_code == 200
        assert response.json()["commonName"] == "Moreton Bay Fig"
        mock_species_client.get_species.assert_awaited_once_with(
            "https://id.biodiversity.org.au/node/apni/2912252"
        )

    def test_unknown_species(self, test_client, mock_species_client):
        mock_species_client.get_species.side_effect = NotFoundError("Species not found")

        response = test_client.get("/api/species/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"error": "Species not found"}


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API documentation."""

    def test_openapi_schema_available(self, test_client):
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        for path in ("/api/listings", "/api/listings/{listing_id}", "/api/bids",
                     "/api/user/me", "/api/admin/settings", "/api/upload",
                     "/api/species/search"):
            assert path in paths

    def test_docs_endpoint_available(self, test_client):
        response = test_client.get("/docs")

        assert response.status_code == 200

    def test_redoc_endpoint_available(self, test_client):
        response = test_client.get("/redoc")

        assert response.status_code == 200


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
