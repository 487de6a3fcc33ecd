"""
Signup domain service - Waitlist join flow.

This module contains the business logic for joining the waitlist and
crediting referrers.

Join Flow
=========

1. Existence check by normalized email
   - found: returning user, send a fresh dashboard link (no writes)
2. Insert (ON CONFLICT on email -> DuplicateEntry)
3. Credit the referrer (best effort, atomic increment)
4. Issue a magic link           (failure -> LinkGenerationFailed)
5. Send the welcome email       (failure -> EmailQuotaExceeded / EmailSendFailed)

The signup row is the durable source of truth. Nothing after step 2 is
rolled back: later failures are reported as "on the waitlist, but X failed".
"""

import logging
import secrets
from dataclasses import dataclass, field

from .exceptions import (
    AuthProviderError,
    DuplicateEntry,
    EmailDeliveryError,
    EmailQuotaExceeded,
    EmailSendFailed,
    LinkGenerationFailed,
    StorageError,
)
from .models import Signup, SignupRequest
from .ports import AuthProvider, EmailSender, SignupOutcome, SignupRepository
from .validation import FieldLimits, validate_signup

logger = logging.getLogger(__name__)

REFERRAL_CODE_BYTES = 6  # 8 URL-safe characters


def build_share_link(referral_base_url: str, referral_code: str) -> str:
    """Public link that attributes new signups to referral_code."""
    return f"{referral_base_url}?ref={referral_code}"


@dataclass
class SignupService:
    """
    Domain service for waitlist signups.

    Orchestrates validation, persistence, referral crediting, magic-link
    issuance and notification.
    """

    repository: SignupRepository
    auth: AuthProvider
    email_sender: EmailSender
    referral_base_url: str
    dashboard_url: str
    limits: FieldLimits = field(default_factory=FieldLimits)

    def join(self, payload: object) -> SignupOutcome:
        """
        Add the payload's email to the waitlist.

        Args:
            payload: Decoded JSON request body

        Returns:
            JOINED for a new signup, RETURNING if the email was already listed

        Raises:
            ValidationFailed: Payload rejected
            DuplicateEntry: A concurrent request inserted the same email
            LinkGenerationFailed: Signup stored, magic link not issued
            EmailQuotaExceeded: Signup stored, email provider over quota
            EmailSendFailed: Signup stored, email not delivered
        """
        request = validate_signup(payload, self.limits)

        existing = self.repository.find_by_email(request.email)
        if existing is not None:
            self._resend_dashboard_link(existing)
            return SignupOutcome.RETURNING

        signup = self.repository.create(
            full_name=request.full_name,
            email=request.email,
            referral_code=self._generate_referral_code(),
            brand_name=request.brand_name,
            referred_by=request.ref,
        )
        if signup is None:
            raise DuplicateEntry(request.email)
        logger.info("New waitlist signup %s (ref=%s)", signup.referral_code, request.ref)

        if request.ref:
            self._credit_referrer(request.ref)

        magic_link = self._issue_magic_link(signup.email)
        referral_link = build_share_link(self.referral_base_url, signup.referral_code)
        try:
            self.email_sender.send_welcome(
                signup.email, signup.full_name, referral_link, magic_link
            )
        except EmailDeliveryError as e:
            raise self._classify_delivery_error(e) from e

        return SignupOutcome.JOINED

    def _resend_dashboard_link(self, signup: Signup) -> None:
        magic_link = self._issue_magic_link(signup.email)
        try:
            self.email_sender.send_dashboard_link(
                signup.email, magic_link, signup.referral_count
            )
        except EmailDeliveryError as e:
            raise self._classify_delivery_error(e) from e
        logger.info("Dashboard link re-sent to returning signup %s", signup.referral_code)

    def _credit_referrer(self, referral_code: str) -> None:
        """
        Increment the referrer's count by one.

        Referral accounting never fails a signup: errors are logged and dropped.
        """
        try:
            credited = self.repository.increment_referral_count(referral_code)
        except StorageError:
            logger.warning("Referral increment failed for code %s", referral_code, exc_info=True)
            return
        if not credited:
            logger.info("Unknown referral code %s, nothing to credit", referral_code)

    def _issue_magic_link(self, email: str) -> str:
        try:
            link = self.auth.generate_magic_link(email, redirect_to=self.dashboard_url)
        except AuthProviderError as e:
            logger.error("Magic link generation failed: %s", e)
            raise LinkGenerationFailed(email) from e
        if not link:
            logger.error("Auth provider returned no magic link")
            raise LinkGenerationFailed(email)
        return link

    def _classify_delivery_error(self, error: EmailDeliveryError) -> Exception:
        """Map a provider rejection to quota exhaustion or generic send failure."""
        logger.error(
            "Email delivery failed (status=%s code=%s): %s",
            error.status_code,
            error.code,
            error.message,
        )
        code = (error.code or "").lower()
        if error.status_code == 429 or "quota" in code or "quota" in error.message.lower():
            return EmailQuotaExceeded(error.message)
        return EmailSendFailed(error.message)

    def _generate_referral_code(self) -> str:
        """
        Generate an opaque referral code.

        Uses the secrets module so codes cannot be enumerated.
        """
        return secrets.token_urlsafe(REFERRAL_CODE_BYTES)
