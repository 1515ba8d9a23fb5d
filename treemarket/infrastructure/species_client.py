"""
Infrastructure layer: species lookup client with retry logic.

A read-through proxy over the Atlas of Living Australia species services,
used to autocomplete species names when creating a listing.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from treemarket.config import settings
from treemarket.domain.errors import NotFoundError
from treemarket.domain.models import MarketModel
from treemarket.infrastructure.api_constants import APIConstants, SpeciesAPIEndpoints

logger = logging.getLogger(__name__)


class SpeciesSuggestion(MarketModel):
    """One autocomplete match."""
    scientific_name: str
    guid: Optional[str] = None
    common_name: Optional[str] = None
    rank: Optional[str] = None
    matched_names: List[str] = Field(default_factory=list)


class SpeciesDetail(MarketModel):
    """Names and imagery for a single taxon."""
    scientific_name: Optional[str] = None
    common_name: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class AutocompleteItem(BaseModel):
    """Raw autocomplete entry from the species API."""
    name: str
    guid: Optional[str] = None
    commonName: Optional[str] = None
    rankString: Optional[str] = None
    matchedNames: Optional[List[str]] = None


class SpeciesAPIError(Exception):
    """Custom exception for species API errors."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SpeciesClient:
    """
    Client for the ALA species search and profile services.
    Implements retry logic with exponential backoff.
    """

    def __init__(self):
        """Initialize the API client with configuration."""
        self.search_base_url = settings.species_search_base_url.rstrip("/")
        self.bie_base_url = settings.species_bie_base_url.rstrip("/")
        self.images_base_url = settings.species_images_base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            headers={"accept": APIConstants.CONTENT_TYPE_JSON},
            timeout=APIConstants.DEFAULT_TIMEOUT,
        )

    async def __aenter__(self) -> "SpeciesClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.TransportError)),
        reraise=True,
    )
    async def _make_request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        Make an HTTP request with retry logic.

        Server errors and transport failures are retried; client errors
        are not.

        Raises:
            SpeciesAPIError: On a 4xx response
            httpx.HTTPStatusError: On a 5xx response once retries are exhausted
        """
        response = await self.client.request(method, url, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code >= 500:
                raise
            raise SpeciesAPIError(
                f"Species API request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )
        return response.json()

    async def search(self, query: Optional[str]) -> List[SpeciesSuggestion]:
        """
        Autocomplete species names.

        Queries shorter than two characters return no suggestions without
        calling the remote service.
        """
        if not query or len(query) < APIConstants.MIN_QUERY_LENGTH:
            return []
        data = await self._make_request(
            "GET",
            f"{self.search_base_url}{SpeciesAPIEndpoints.AUTOCOMPLETE}",
            params={
                "q": query,
                "idxType": APIConstants.AUTOCOMPLETE_INDEX_TYPE,
                "limit": APIConstants.AUTOCOMPLETE_LIMIT,
            },
        )
        items = [AutocompleteItem(**item) for item in data.get("autoCompleteList") or []]
        return [
            SpeciesSuggestion(
                scientific_name=item.name,
                guid=item.guid or None,
                common_name=item.commonName or None,
                rank=item.rankString or None,
                matched_names=item.matchedNames or [],
            )
            for item in items
        ]

    async def get_species(self, guid: str) -> SpeciesDetail:
        """
        Fetch names and image links for a taxon.

        Raises:
            NotFoundError: If the species service does not know the GUID
        """
        try:
            data = await self._make_request(
                "GET", f"{self.bie_base_url}{SpeciesAPIEndpoints.get_species(guid)}"
            )
        except SpeciesAPIError as e:
            logger.warning(f"Species lookup for {guid!r} failed: {e.message}")
            raise NotFoundError("Species not found")

        taxon = data.get("taxonConcept") or {}
        common_names = data.get("commonNames") or []
        detail = SpeciesDetail(
            scientific_name=taxon.get("nameString") or data.get("nameString"),
            common_name=common_names[0].get("nameString") if common_names else None,
        )
        image_id = data.get("imageIdentifier")
        if image_id:
            detail.image_url = (
                f"{self.images_base_url}{SpeciesAPIEndpoints.IMAGE.format(image_id=image_id)}"
            )
            detail.thumbnail_url = (
                f"{self.images_base_url}{SpeciesAPIEndpoints.THUMBNAIL}?imageId={image_id}"
            )
        return detail


# Singleton instance
_species_client: Optional[SpeciesClient] = None


def get_species_client() -> SpeciesClient:
    """
    Get or create the singleton species client instance.

    Returns:
        SpeciesClient instance
    """
    global _species_client
    if _species_client is None:
        _species_client = SpeciesClient()
    return _species_client


async def close_species_client() -> None:
    """Close and forget the singleton, if one was created."""
    global _species_client
    if _species_client is not None:
        await _species_client.close()
    _species_client = None
