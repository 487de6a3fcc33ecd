"""
Domain exceptions - Closed error taxonomy for the waitlist.

Every failure a request can surface is one of the WaitlistError subclasses
below. The API layer maps each class to an HTTP status and a client-safe
message exactly once (see waitlist.api.errors).

StorageError, EmailDeliveryError and AuthProviderError are raised by
adapters to report infrastructure failures without leaking driver types
into the domain. Services decide whether they are fatal.
"""

from enum import Enum


class ValidationErrorKind(str, Enum):
    """Reason a signup payload was rejected."""

    INVALID_BODY = "invalid_body"
    FULL_NAME_REQUIRED = "full_name_required"
    EMAIL_REQUIRED = "email_required"
    FULL_NAME_TOO_LONG = "full_name_too_long"
    EMAIL_TOO_LONG = "email_too_long"
    BRAND_NAME_TOO_LONG = "brand_name_too_long"
    INVALID_EMAIL_FORMAT = "invalid_email_format"

    @property
    def field(self) -> str | None:
        """Name of the offending field, if the error concerns a single field."""
        for name in ("full_name", "email", "brand_name"):
            if self.value.startswith(name + "_"):
                return name
        return None


class WaitlistError(Exception):
    """Base class for waitlist domain errors."""

    pass


class ValidationFailed(WaitlistError):
    """Signup payload failed validation."""

    def __init__(self, kind: ValidationErrorKind) -> None:
        super().__init__(kind.value)
        self.kind = kind


class DuplicateEntry(WaitlistError):
    """Email was inserted by a concurrent request."""

    pass


class RateLimited(WaitlistError):
    """Client exceeded the request budget for the current window."""

    def __init__(self, window_seconds: int) -> None:
        super().__init__(f"rate limit exceeded ({window_seconds}s window)")
        self.window_seconds = window_seconds


class LinkGenerationFailed(WaitlistError):
    """Auth provider could not issue a magic link. The signup itself persisted."""

    pass


class EmailQuotaExceeded(WaitlistError):
    """Email provider refused delivery due to quota. The signup itself persisted."""

    pass


class EmailSendFailed(WaitlistError):
    """Email provider failed to deliver. The signup itself persisted."""

    pass


class Unauthorized(WaitlistError):
    """Bearer token missing, malformed or rejected by the auth provider."""

    MISSING = "unauthorized"
    INVALID_TOKEN = "invalid_token"

    def __init__(self, reason: str = MISSING) -> None:
        super().__init__(reason)
        self.reason = reason


class ProfileNotFound(WaitlistError):
    """Authenticated identity has no signup record."""

    pass


class LeaderboardUnavailable(WaitlistError):
    """Leaderboard query failed."""

    pass


class StorageError(Exception):
    """Datastore operation failed."""

    pass


class AuthProviderError(Exception):
    """Auth provider could not be reached or answered unexpectedly."""

    pass


class EmailDeliveryError(Exception):
    """
    Email provider rejected a message.

    Carries the provider's HTTP status and error code (when known) so the
    signup orchestrator can tell quota exhaustion apart from other failures.
    """

    def __init__(
        self, message: str, status_code: int | None = None, code: str | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
