"""
Unit tests for SignupService domain logic.

Tests domain logic with mocked ports to verify:
- New signup and returning-user paths
- Duplicate-insert translation
- Best-effort referral crediting
- Post-insert failure reporting (magic link, email quota, email send)
"""

import logging
import re
from unittest.mock import Mock

import pytest

from waitlist.domain.exceptions import (
    AuthProviderError,
    DuplicateEntry,
    EmailDeliveryError,
    EmailQuotaExceeded,
    EmailSendFailed,
    LinkGenerationFailed,
    StorageError,
    ValidationFailed,
)
from waitlist.domain.ports import SignupOutcome
from waitlist.domain.signup import SignupService, build_share_link
from waitlist.domain.validation import FieldLimits

ADA = {"full_name": "Ada Lovelace", "email": "ada@example.com"}
MAGIC_LINK = "https://project.supabase.test/auth/v1/verify?token=abc"


@pytest.fixture
def repo(make_signup) -> Mock:
    repo = Mock()
    repo.find_by_email.return_value = None
    repo.create.side_effect = lambda **kwargs: make_signup(
        full_name=kwargs["full_name"],
        email=kwargs["email"],
        referral_code=kwargs["referral_code"],
        brand_name=kwargs["brand_name"],
        referred_by=kwargs["referred_by"],
    )
    repo.increment_referral_count.return_value = True
    return repo


@pytest.fixture
def auth() -> Mock:
    auth = Mock()
    auth.generate_magic_link.return_value = MAGIC_LINK
    return auth


@pytest.fixture
def sender() -> Mock:
    return Mock()


@pytest.fixture
def service(repo: Mock, auth: Mock, sender: Mock) -> SignupService:
    return SignupService(
        repository=repo,
        auth=auth,
        email_sender=sender,
        referral_base_url="https://waitlist.test",
        dashboard_url="https://waitlist.test/dashboard",
    )


class TestNewSignup:
    """Tests for the create path."""

    def test_returns_joined(self, service: SignupService) -> None:
        assert service.join(ADA) == SignupOutcome.JOINED

    def test_creates_exactly_one_record(self, service: SignupService, repo: Mock) -> None:
        service.join(ADA)
        repo.create.assert_called_once()

    def test_creates_with_normalized_fields(self, service: SignupService, repo: Mock) -> None:
        service.join(
            {"full_name": " Ada ", "email": " ADA@Example.com ", "brand_name": " Engines "}
        )

        kwargs = repo.create.call_args.kwargs
        assert kwargs["full_name"] == "Ada"
        assert kwargs["email"] == "ada@example.com"
        assert kwargs["brand_name"] == "Engines"
        assert kwargs["referred_by"] is None

    def test_referral_code_is_opaque_and_non_empty(
        self, service: SignupService, repo: Mock
    ) -> None:
        service.join(ADA)

        code = repo.create.call_args.kwargs["referral_code"]
        assert code
        assert re.fullmatch(r"[A-Za-z0-9_-]{8}", code)

    def test_referral_codes_vary(self, service: SignupService, repo: Mock) -> None:
        """Codes are random (probability of a repeat in 10 draws is negligible)."""
        codes = set()
        for i in range(10):
            service.join({"full_name": "Ada", "email": f"ada{i}@example.com"})
            codes.add(repo.create.call_args.kwargs["referral_code"])

        assert len(codes) == 10

    def test_magic_link_redirects_to_dashboard(self, service: SignupService, auth: Mock) -> None:
        service.join(ADA)
        auth.generate_magic_link.assert_called_once_with(
            "ada@example.com", redirect_to="https://waitlist.test/dashboard"
        )

    def test_welcome_email_contains_share_and_magic_links(
        self, service: SignupService, repo: Mock, sender: Mock
    ) -> None:
        service.join(ADA)

        code = repo.create.call_args.kwargs["referral_code"]
        sender.send_welcome.assert_called_once_with(
            "ada@example.com",
            "Ada Lovelace",
            f"https://waitlist.test?ref={code}",
            MAGIC_LINK,
        )

    def test_validation_runs_before_any_io(
        self, service: SignupService, repo: Mock, auth: Mock, sender: Mock
    ) -> None:
        with pytest.raises(ValidationFailed):
            service.join({"full_name": "Ada", "email": "not-an-email"})

        repo.find_by_email.assert_not_called()
        repo.create.assert_not_called()
        auth.generate_magic_link.assert_not_called()
        sender.send_welcome.assert_not_called()

    def test_configured_limits_apply(self, repo: Mock, auth: Mock, sender: Mock) -> None:
        service = SignupService(
            repository=repo,
            auth=auth,
            email_sender=sender,
            referral_base_url="https://waitlist.test",
            dashboard_url="https://waitlist.test/dashboard",
            limits=FieldLimits(full_name=3),
        )
        with pytest.raises(ValidationFailed):
            service.join(ADA)


class TestReturningUser:
    """Tests for the idempotent existing-email path."""

    @pytest.fixture
    def existing(self, repo: Mock, make_signup):
        signup = make_signup(email="ada@example.com", referral_count=4)
        repo.find_by_email.return_value = signup
        return signup

    def test_returns_returning(self, service: SignupService, existing) -> None:
        assert service.join(ADA) == SignupOutcome.RETURNING

    def test_does_not_create_or_increment(
        self, service: SignupService, repo: Mock, existing
    ) -> None:
        service.join({**ADA, "ref": "someone"})

        repo.create.assert_not_called()
        repo.increment_referral_count.assert_not_called()

    def test_lookup_uses_normalized_email(
        self, service: SignupService, repo: Mock, existing
    ) -> None:
        service.join({"full_name": "Ada", "email": "  ADA@EXAMPLE.COM "})
        repo.find_by_email.assert_called_once_with("ada@example.com")

    def test_sends_fresh_dashboard_link(
        self, service: SignupService, sender: Mock, existing
    ) -> None:
        service.join(ADA)

        sender.send_dashboard_link.assert_called_once_with("ada@example.com", MAGIC_LINK, 4)
        sender.send_welcome.assert_not_called()

    def test_repeated_calls_stay_idempotent(
        self, service: SignupService, repo: Mock, existing
    ) -> None:
        for _ in range(3):
            assert service.join(ADA) == SignupOutcome.RETURNING
        repo.create.assert_not_called()

    def test_link_failure_is_reported(self, service: SignupService, auth: Mock, existing) -> None:
        auth.generate_magic_link.return_value = None
        with pytest.raises(LinkGenerationFailed):
            service.join(ADA)


class TestDuplicateRace:
    """Tests for the insert losing a race to a concurrent request."""

    def test_conflict_raises_duplicate_entry(
        self, service: SignupService, repo: Mock, sender: Mock
    ) -> None:
        repo.create.side_effect = None
        repo.create.return_value = None

        with pytest.raises(DuplicateEntry):
            service.join(ADA)

        repo.increment_referral_count.assert_not_called()
        sender.send_welcome.assert_not_called()


class TestReferralCredit:
    """Tests for best-effort referral crediting."""

    def test_increments_referrer(self, service: SignupService, repo: Mock) -> None:
        service.join({**ADA, "ref": "grace01"})

        repo.increment_referral_count.assert_called_once_with("grace01")
        assert repo.create.call_args.kwargs["referred_by"] == "grace01"

    def test_no_ref_no_increment(self, service: SignupService, repo: Mock) -> None:
        service.join(ADA)
        repo.increment_referral_count.assert_not_called()

    def test_unknown_ref_is_noop(
        self, service: SignupService, repo: Mock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An unknown code credits nobody and the signup still succeeds."""
        repo.increment_referral_count.return_value = False

        with caplog.at_level(logging.INFO):
            assert service.join({**ADA, "ref": "nobody"}) == SignupOutcome.JOINED

        assert "Unknown referral code" in caplog.text

    def test_storage_failure_is_swallowed(
        self, service: SignupService, repo: Mock, sender: Mock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Referral accounting failures never fail the signup."""
        repo.increment_referral_count.side_effect = StorageError("deadlock detected")

        with caplog.at_level(logging.WARNING):
            assert service.join({**ADA, "ref": "grace01"}) == SignupOutcome.JOINED

        sender.send_welcome.assert_called_once()
        assert "Referral increment failed" in caplog.text


class TestPostInsertFailures:
    """Tests for failures after the record is stored."""

    def test_missing_magic_link(self, service: SignupService, auth: Mock, repo: Mock) -> None:
        auth.generate_magic_link.return_value = None

        with pytest.raises(LinkGenerationFailed):
            service.join(ADA)

        repo.create.assert_called_once()

    def test_auth_provider_error(self, service: SignupService, auth: Mock, sender: Mock) -> None:
        auth.generate_magic_link.side_effect = AuthProviderError("timeout")

        with pytest.raises(LinkGenerationFailed):
            service.join(ADA)

        sender.send_welcome.assert_not_called()

    def test_referral_credited_before_link_failure(
        self, service: SignupService, auth: Mock, repo: Mock
    ) -> None:
        auth.generate_magic_link.return_value = None

        with pytest.raises(LinkGenerationFailed):
            service.join({**ADA, "ref": "grace01"})

        repo.increment_referral_count.assert_called_once_with("grace01")

    @pytest.mark.parametrize(
        "error",
        [
            EmailDeliveryError("Too many requests", status_code=429),
            EmailDeliveryError("daily limit", status_code=403, code="daily_quota_exceeded"),
            EmailDeliveryError("You have reached your daily email quota", status_code=403),
        ],
    )
    def test_quota_errors(self, service: SignupService, sender: Mock, error) -> None:
        sender.send_welcome.side_effect = error

        with pytest.raises(EmailQuotaExceeded):
            service.join(ADA)

    @pytest.mark.parametrize(
        "error",
        [
            EmailDeliveryError("Invalid `to` field", status_code=422, code="validation_error"),
            EmailDeliveryError("Resend request failed: connection reset"),
            EmailDeliveryError("Internal server error", status_code=500),
        ],
    )
    def test_other_send_errors(self, service: SignupService, sender: Mock, error) -> None:
        sender.send_welcome.side_effect = error

        with pytest.raises(EmailSendFailed):
            service.join(ADA)

    def test_returning_user_quota_error(
        self, service: SignupService, repo: Mock, sender: Mock, make_signup
    ) -> None:
        repo.find_by_email.return_value = make_signup(email="ada@example.com")
        sender.send_dashboard_link.side_effect = EmailDeliveryError("quota", status_code=429)

        with pytest.raises(EmailQuotaExceeded):
            service.join(ADA)


class TestShareLink:
    def test_build_share_link(self) -> None:
        assert build_share_link("https://waitlist.test", "abc") == "https://waitlist.test?ref=abc"
