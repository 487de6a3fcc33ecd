"""
Email templates - HTML and plain-text bodies for waitlist messages.

User-supplied values are HTML-escaped in the HTML bodies.
"""

from dataclasses import dataclass
from html import escape


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


DASHBOARD_LINK_SUBJECT = "Access your referral dashboard"


def render_welcome(
    subject: str, full_name: str, referral_link: str, magic_link: str
) -> RenderedEmail:
    """Confirmation sent to a new signup."""
    html = f"""
<p>Hi {escape(full_name)},</p>
<p>Thanks for joining the waitlist. We're really glad to have you on board.</p>
<p>Here's your referral link:</p>
<p><a href="{escape(referral_link)}">{escape(referral_link)}</a></p>
<p>Share it with friends to move up the list.</p>
<p>When you're ready to see your referrals, open your dashboard:</p>
<p><a href="{escape(magic_link)}">Open your referral dashboard</a></p>
<p>This sign-in link expires shortly. Request a fresh one any time by signing up again
with the same email.</p>
""".strip()

    text = f"""
Hi {full_name},

Thanks for joining the waitlist. We're really glad to have you on board.

Here's your referral link: {referral_link}
Share it with friends to move up the list.

Open your referral dashboard:
{magic_link}

This sign-in link expires shortly. Request a fresh one any time by signing up again
with the same email.
""".strip()

    return RenderedEmail(subject=subject, html=html, text=text)


def render_dashboard_link(magic_link: str, referral_count: int) -> RenderedEmail:
    """Fresh dashboard link for a returning signup."""
    noun = "referral" if referral_count == 1 else "referrals"
    html = f"""
<h2>Welcome back!</h2>
<p>Click to access your referral dashboard:</p>
<p><a href="{escape(magic_link)}">Open dashboard ({referral_count} {noun})</a></p>
""".strip()

    text = f"""
Welcome back!

Open your referral dashboard ({referral_count} {noun}):
{magic_link}
""".strip()

    return RenderedEmail(subject=DASHBOARD_LINK_SUBJECT, html=html, text=text)
