"""
Resend email sender adapter - Implements EmailSender protocol over HTTP.

Posts messages to the Resend REST API with a shared httpx.Client. Any
rejection is raised as EmailDeliveryError carrying the provider's status
and error name (e.g. 429 / "daily_quota_exceeded") for classification by
the signup service.
"""

import logging

import httpx

from waitlist.domain.exceptions import EmailDeliveryError

from .templates import RenderedEmail, render_dashboard_link, render_welcome

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailSender:
    """
    Implements EmailSender protocol via the Resend API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        client: httpx.Client,
        api_key: str,
        sender: str,
        welcome_subject: str,
        api_url: str = RESEND_API_URL,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._sender = sender
        self._welcome_subject = welcome_subject
        self._api_url = api_url

    def send_welcome(
        self, email: str, full_name: str, referral_link: str, magic_link: str
    ) -> None:
        message = render_welcome(self._welcome_subject, full_name, referral_link, magic_link)
        self._send(email, message)

    def send_dashboard_link(self, email: str, magic_link: str, referral_count: int) -> None:
        self._send(email, render_dashboard_link(magic_link, referral_count))

    def _send(self, to: str, message: RenderedEmail) -> None:
        payload = {
            "from": self._sender,
            "to": [to],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            response = self._client.post(self._api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Resend request failed: {e}") from e

        if response.is_error:
            name, detail = _error_details(response)
            raise EmailDeliveryError(detail, status_code=response.status_code, code=name)

        logger.info("Email '%s' accepted by Resend", message.subject)


def _error_details(response: httpx.Response) -> tuple[str | None, str]:
    """Extract (error name, message) from a Resend error body."""
    try:
        body = response.json()
    except ValueError:
        return None, response.text or response.reason_phrase
    if not isinstance(body, dict):
        return None, str(body)
    return body.get("name"), body.get("message") or response.reason_phrase
