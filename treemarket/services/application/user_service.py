"""
Application service: caller identity provisioning.
"""
import logging
from typing import Optional

from pymongo.errors import DuplicateKeyError

from treemarket.domain.errors import AuthenticationError, ValidationError
from treemarket.domain.models import User
from treemarket.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """
    Resolves authenticated principals to user records.

    Routers call ensure_user once per request, before handing the user id
    to any other service; no domain operation creates users on its own.
    """

    def __init__(self, users: UserRepository):
        self.users = users

    def ensure_user(
        self,
        auth0_id: Optional[str],
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> User:
        """
        Get the user for an authentication provider id, creating it if needed.

        Idempotent: repeated calls with the same auth0_id return the same
        record and never create a duplicate.

        Args:
            auth0_id: Subject id from the authentication provider
            email: Email hint, stored only when the user is created
            name: Display name hint, stored only when the user is created

        Returns:
            The existing or newly created User

        Raises:
            AuthenticationError: If no auth0_id was supplied
            ValidationError: If the email already belongs to another account
        """
        if not auth0_id:
            raise AuthenticationError("Authentication required")
        try:
            user = self.users.ensure(auth0_id, email=email, name=name)
        except DuplicateKeyError:
            logger.warning(f"Email {email!r} is already registered to another account")
            raise ValidationError("Email is already registered to another account")
        return user

    def get_user(self, auth0_id: Optional[str]) -> Optional[User]:
        """Look up a user without creating one."""
        if not auth0_id:
            return None
        return self.users.get_by_auth0_id(auth0_id)
