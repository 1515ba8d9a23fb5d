"""
API endpoint constants and configuration.

This module contains the species lookup endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""
from urllib.parse import quote


# Atlas of Living Australia endpoints
class SpeciesAPIEndpoints:
    """ALA species endpoint paths."""

    AUTOCOMPLETE = "/search/auto"
    SPECIES_BY_GUID = "/species/{guid}"
    IMAGE = "/{image_id}"
    THUMBNAIL = "/proxyImageThumbnail"

    @classmethod
    def get_species(cls, guid: str) -> str:
        """
        Species detail endpoint for a taxon GUID.

        GUIDs are usually URLs themselves, so they are fully percent-encoded.
        """
        return cls.SPECIES_BY_GUID.format(guid=quote(guid, safe=""))


# API Configuration Constants
class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"

    # Timeouts (in seconds)
    DEFAULT_TIMEOUT = 30.0

    # Autocomplete
    AUTOCOMPLETE_INDEX_TYPE = "TAXON"
    AUTOCOMPLETE_LIMIT = 10
    MIN_QUERY_LENGTH = 2
