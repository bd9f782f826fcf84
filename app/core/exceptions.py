"""
Error taxonomy for Civic Guard.

Every error carries the HTTP status the API answers with. Routes let these
propagate; app.main registers a single handler for CivicGuardError.
"""

from typing import Optional


class CivicGuardError(Exception):
    """Base class for domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CivicGuardError):
    """Missing or malformed input. Raised before any network call is made."""

    status_code = 422


class UploadError(CivicGuardError):
    """Object-storage write failed."""

    status_code = 502


class StoreError(CivicGuardError):
    """Database read or write failed."""

    status_code = 503


class ReportNotFoundError(StoreError):
    status_code = 404


class InvalidTransitionError(CivicGuardError):
    """Review action not allowed from the report's current status."""

    status_code = 409


class ActionInProgressError(CivicGuardError):
    """Another review action on the same report is still running."""

    status_code = 409


class RelayError(CivicGuardError):
    """Notification send or call failed."""

    status_code = 502


class AnchorError(CivicGuardError):
    """External anchoring endpoint returned a non-success status."""

    status_code = 502


class SessionRequiredError(CivicGuardError):
    """No active reviewer session. Browsers are redirected to the login page."""

    status_code = 401


class RelayAccessError(CivicGuardError):
    """Relay request without a valid relay key."""

    status_code = 401


class RateLimitError(CivicGuardError):
    status_code = 429


class AuthError(CivicGuardError):
    """
    Identity provider failure.

    `category` is one of the generic categories below. The provider's own
    wording is kept in `provider_message` for logs and never sent to clients.
    """

    INVALID_CREDENTIALS = "InvalidCredentials"
    NETWORK_UNAVAILABLE = "NetworkUnavailable"
    UNKNOWN = "Unknown"

    _STATUS_BY_CATEGORY = {
        INVALID_CREDENTIALS: 401,
        NETWORK_UNAVAILABLE: 503,
        UNKNOWN: 500,
    }

    _MESSAGE_BY_CATEGORY = {
        INVALID_CREDENTIALS: "Invalid email or password",
        NETWORK_UNAVAILABLE: "Authentication service unavailable",
        UNKNOWN: "Authentication failed",
    }

    def __init__(self, category: str, provider_message: Optional[str] = None):
        super().__init__(self._MESSAGE_BY_CATEGORY.get(category, "Authentication failed"))
        self.category = category
        self.provider_message = provider_message
        self.status_code = self._STATUS_BY_CATEGORY.get(category, 500)
