"""
Domain layer - Pure business logic with zero framework imports.

This package contains the waitlist signup and referral logic. It defines
its own port interfaces for infrastructure abstraction, ensuring true
hexagonal architecture decoupling.
"""

from .dashboard import DashboardService
from .exceptions import (
    AuthProviderError,
    DuplicateEntry,
    EmailDeliveryError,
    EmailQuotaExceeded,
    EmailSendFailed,
    LeaderboardUnavailable,
    LinkGenerationFailed,
    ProfileNotFound,
    RateLimited,
    StorageError,
    Unauthorized,
    ValidationErrorKind,
    ValidationFailed,
    WaitlistError,
)
from .leaderboard import LeaderboardService
from .models import Dashboard, LeaderboardEntry, Signup, SignupRequest
from .ports import AuthProvider, EmailSender, RateLimitStore, SignupOutcome, SignupRepository
from .rate_limit import RateLimiter
from .signup import SignupService
from .validation import FieldLimits, validate_signup

__all__ = [
    "AuthProvider",
    "AuthProviderError",
    "Dashboard",
    "DashboardService",
    "DuplicateEntry",
    "EmailDeliveryError",
    "EmailQuotaExceeded",
    "EmailSendFailed",
    "EmailSender",
    "FieldLimits",
    "LeaderboardEntry",
    "LeaderboardService",
    "LeaderboardUnavailable",
    "LinkGenerationFailed",
    "ProfileNotFound",
    "RateLimitStore",
    "RateLimited",
    "RateLimiter",
    "Signup",
    "SignupOutcome",
    "SignupRepository",
    "SignupRequest",
    "SignupService",
    "StorageError",
    "Unauthorized",
    "ValidationErrorKind",
    "ValidationFailed",
    "WaitlistError",
    "validate_signup",
]
