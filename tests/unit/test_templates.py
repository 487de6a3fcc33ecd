"""
Unit tests for email templates.
"""

from waitlist.adapters.email.templates import (
    DASHBOARD_LINK_SUBJECT,
    render_dashboard_link,
    render_welcome,
)


class TestWelcome:
    def test_contains_both_links(self) -> None:
        email = render_welcome(
            "Welcome", "Ada", "https://waitlist.test?ref=abc", "https://magic.test/x"
        )

        assert email.subject == "Welcome"
        for body in (email.html, email.text):
            assert "https://waitlist.test?ref=abc" in body
            assert "https://magic.test/x" in body

    def test_name_is_escaped_in_html(self) -> None:
        email = render_welcome("Welcome", "<script>alert(1)</script>", "r", "m")

        assert "<script>" not in email.html
        assert "&lt;script&gt;" in email.html
        assert "<script>alert(1)</script>" in email.text


class TestDashboardLink:
    def test_subject(self) -> None:
        assert render_dashboard_link("m", 0).subject == DASHBOARD_LINK_SUBJECT

    def test_singular_referral(self) -> None:
        assert "1 referral)" in render_dashboard_link("m", 1).text

    def test_plural_referrals(self) -> None:
        assert "0 referrals" in render_dashboard_link("m", 0).text
        assert "7 referrals" in render_dashboard_link("m", 7).html
