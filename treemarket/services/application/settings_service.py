"""
Application service: site branding and landing page copy.
"""
import base64
import binascii
import logging
from typing import Any, Dict, Optional

from treemarket.config import settings
from treemarket.domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
)
from treemarket.domain.models import SiteSettings
from treemarket.infrastructure.repositories import SettingsRepository, UserRepository

logger = logging.getLogger(__name__)


EDITABLE_FIELDS = ("logo_url", "hero_title", "hero_description", "cta_title", "cta_description")


def data_uri_size(uri: str) -> int:
    """
    Decoded payload size of a ``data:`` URI.

    Raises:
        ValidationError: If the URI is not well formed
    """
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ValidationError("Logo must be a valid data URI")
    if header.endswith(";base64"):
        try:
            return len(base64.b64decode(payload, validate=True))
        except (binascii.Error, ValueError):
            raise ValidationError("Logo data URI is not valid base64")
    return len(payload.encode("utf-8"))


class SettingsService:
    """Reads and updates the singleton site settings document."""

    def __init__(self, store: SettingsRepository, users: UserRepository):
        self.store = store
        self.users = users

    def initialize(self) -> SiteSettings:
        """Write default settings if none exist. Run once at startup."""
        current = self.store.ensure_defaults()
        logger.info("Site settings initialized")
        return current

    def get_settings(self) -> SiteSettings:
        # Read-or-create is an atomic upsert, so concurrent first readers agree.
        return self.store.ensure_defaults()

    def update_settings(self, caller_id: Optional[str], fields: Dict[str, Any]) -> SiteSettings:
        """
        Update site settings on behalf of an admin.

        Only the supplied (non-None) editable fields change.

        Args:
            caller_id: Authentication provider id of the caller
            fields: New values keyed by snake_case field name

        Returns:
            The updated SiteSettings

        Raises:
            AuthenticationError: If caller_id is missing
            AuthorizationError: If the caller is unknown or not an admin
            ValidationError: If the logo data URI is malformed or too large
        """
        if not caller_id:
            raise AuthenticationError("Authentication required")

        user = self.users.get_by_auth0_id(caller_id)
        if user is None or not user.is_admin:
            logger.warning(f"Rejected settings update from non-admin {caller_id}")
            raise AuthorizationError("Admin access required")

        changes = {
            name: fields[name]
            for name in EDITABLE_FIELDS
            if fields.get(name) is not None
        }
        logo = changes.get("logo_url")
        if logo and logo.startswith("data:") and data_uri_size(logo) > settings.max_logo_bytes:
            raise ValidationError(
                f"Logo is too large. Maximum size is {settings.max_logo_bytes // (1024 * 1024)}MB"
            )

        updated = self.store.update(changes)
        logger.info(f"Site settings updated by {caller_id}: {', '.join(sorted(changes)) or 'no changes'}")
        return updated
