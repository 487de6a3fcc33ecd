"""
Unit tests for ResendEmailSender adapter.

Outbound HTTP is served by httpx.MockTransport; no network is used.
"""

import json

import httpx
import pytest

from waitlist.adapters.email.resend import RESEND_API_URL, ResendEmailSender
from waitlist.domain.exceptions import EmailDeliveryError


def make_sender(handler) -> ResendEmailSender:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ResendEmailSender(
        client=client,
        api_key="re_test_key",
        sender="Waitlist <hello@waitlist.test>",
        welcome_subject="You're on the waitlist",
    )


class TestRequest:
    """Tests for the request sent to Resend."""

    def test_welcome_payload(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"id": "email_123"})

        make_sender(handler).send_welcome(
            "ada@example.com", "Ada", "https://waitlist.test?ref=abc", "https://magic.test/link"
        )

        (request,) = captured
        assert request.method == "POST"
        assert str(request.url) == RESEND_API_URL
        assert request.headers["authorization"] == "Bearer re_test_key"
        body = json.loads(request.content)
        assert body["from"] == "Waitlist <hello@waitlist.test>"
        assert body["to"] == ["ada@example.com"]
        assert body["subject"] == "You're on the waitlist"
        assert "https://waitlist.test?ref=abc" in body["html"]
        assert "https://magic.test/link" in body["text"]

    def test_dashboard_link_payload(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"id": "email_456"})

        make_sender(handler).send_dashboard_link("ada@example.com", "https://magic.test/x", 2)

        body = json.loads(captured[0].content)
        assert body["subject"] == "Access your referral dashboard"
        assert "2 referrals" in body["text"]


class TestErrors:
    """Tests for translating Resend failures to EmailDeliveryError."""

    def test_quota_error_carries_status_and_name(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                429,
                json={"name": "daily_quota_exceeded", "message": "You have reached your daily quota"},
            )

        with pytest.raises(EmailDeliveryError) as exc_info:
            make_sender(handler).send_welcome("ada@example.com", "Ada", "r", "m")

        assert exc_info.value.status_code == 429
        assert exc_info.value.code == "daily_quota_exceeded"
        assert "daily quota" in exc_info.value.message

    def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="upstream exploded")

        with pytest.raises(EmailDeliveryError) as exc_info:
            make_sender(handler).send_welcome("ada@example.com", "Ada", "r", "m")

        assert exc_info.value.status_code == 500
        assert exc_info.value.code is None
        assert exc_info.value.message == "upstream exploded"

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EmailDeliveryError) as exc_info:
            make_sender(handler).send_welcome("ada@example.com", "Ada", "r", "m")

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.message
