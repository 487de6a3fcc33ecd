"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outgoing links instead of delivering mail.
Selected with EMAIL_BACKEND=console for local development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def send_welcome(
        self, email: str, full_name: str, referral_link: str, magic_link: str
    ) -> None:
        logger.info(
            "[WELCOME] Email: %s Name: %s Referral: %s Dashboard: %s",
            email,
            full_name,
            referral_link,
            magic_link,
        )

    def send_dashboard_link(self, email: str, magic_link: str, referral_count: int) -> None:
        logger.info(
            "[DASHBOARD] Email: %s Referrals: %d Dashboard: %s",
            email,
            referral_count,
            magic_link,
        )
