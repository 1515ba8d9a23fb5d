"""
Domain error taxonomy.

Each error carries the HTTP status it maps to so the error handling
middleware can translate it without knowing about individual services.
"""


class MarketError(Exception):
    """Base class for errors raised by marketplace operations."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketError):
    """Missing or malformed input, or a bid below the current floor."""

    status_code = 400


class AuthenticationError(MarketError):
    """No caller identity was supplied."""

    status_code = 401


class AuthorizationError(MarketError):
    """The caller is known but lacks the required privilege."""

    status_code = 403


class NotFoundError(MarketError):
    """The referenced listing, user or species does not exist."""

    status_code = 404


class InvalidStateError(MarketError):
    """The target is in a state that does not permit the operation."""

    status_code = 400


class StorageError(MarketError):
    """The document or file store failed."""

    status_code = 500
