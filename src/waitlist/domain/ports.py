"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols by structural
subtyping and report failures with the infrastructure exceptions from
waitlist.domain.exceptions (StorageError, AuthProviderError,
EmailDeliveryError).
"""

from datetime import datetime
from enum import Enum
from typing import Protocol

from .models import Signup


class SignupOutcome(Enum):
    """
    Result of a signup attempt that did not raise.

    JOINED: a new record was created and the welcome email was sent.
    RETURNING: the email was already on the waitlist; a fresh dashboard link was sent.
    """

    JOINED = "joined"
    RETURNING = "returning"


class SignupRepository(Protocol):
    """Port interface for signup persistence."""

    def find_by_email(self, email: str) -> Signup | None:
        """Return the signup for a normalized email, or None."""
        ...

    def create(
        self,
        full_name: str,
        email: str,
        referral_code: str,
        brand_name: str | None = None,
        referred_by: str | None = None,
    ) -> Signup | None:
        """
        Atomically insert a new signup.

        The database UNIQUE constraint on email arbitrates concurrent inserts.

        Returns:
            The created Signup, or None if the email already exists
        """
        ...

    def increment_referral_count(self, referral_code: str) -> bool:
        """
        Add exactly one to the referral_count of the signup owning referral_code.

        Implementations must perform the increment server-side in a single
        statement so concurrent referrals are never lost.

        Returns:
            True if a referrer matched, False if the code is unknown
        """
        ...

    def list_referrals(self, referral_code: str, limit: int) -> list[Signup]:
        """Return signups referred by referral_code, newest first."""
        ...

    def top_by_referrals(self, limit: int) -> list[Signup]:
        """
        Return signups ordered by referral_count descending.

        Ties are broken by earliest created_at, then id.
        """
        ...


class RateLimitStore(Protocol):
    """Port interface for the rate-limit event log."""

    def acquire(
        self, ip: str, endpoint: str, at: datetime, window_start: datetime, max_requests: int
    ) -> bool:
        """
        Record an event for (ip, endpoint) at `at` if fewer than max_requests
        events fall at or after window_start.

        Counting and recording must be atomic per (ip, endpoint): concurrent
        callers for the same key never both see the last free slot. Events
        older than window_start may be dropped.

        Returns:
            True if the event was recorded, False if the budget is spent
        """
        ...


class AuthProvider(Protocol):
    """Port interface for the managed auth service."""

    def generate_magic_link(self, email: str, redirect_to: str) -> str | None:
        """
        Issue a one-time sign-in link for email.

        Returns:
            The action link, or None if the provider refused to issue one
        """
        ...

    def verify_token(self, token: str) -> str | None:
        """
        Resolve a bearer token to the email of its holder.

        Returns:
            The verified email, or None if the token is invalid or expired
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_welcome(
        self, email: str, full_name: str, referral_link: str, magic_link: str
    ) -> None:
        """Send the waitlist confirmation with referral and dashboard links."""
        ...

    def send_dashboard_link(self, email: str, magic_link: str, referral_count: int) -> None:
        """Send a returning user a fresh dashboard link."""
        ...
