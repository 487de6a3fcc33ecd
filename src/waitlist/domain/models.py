"""
Domain models - Plain dataclasses shared by services and adapters.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SignupRequest:
    """Validated and normalized signup payload."""

    full_name: str
    email: str
    brand_name: str | None = None
    ref: str | None = None


@dataclass(frozen=True)
class Signup:
    """A row of the waitlist."""

    id: str
    full_name: str
    email: str
    referral_code: str
    created_at: datetime
    brand_name: str | None = None
    referred_by: str | None = None
    referral_count: int = 0


@dataclass(frozen=True)
class LeaderboardEntry:
    """Public leaderboard row."""

    full_name: str
    referral_code: str
    referral_count: int
    rank: int


@dataclass(frozen=True)
class Dashboard:
    """Referral dashboard of an authenticated signup."""

    profile: Signup
    share_link: str
    referrals: list[Signup] = field(default_factory=list)
