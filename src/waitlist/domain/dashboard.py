"""
Referral dashboard - Read-only view of a signup and the people it referred.
"""

from dataclasses import dataclass

from .exceptions import ProfileNotFound, Unauthorized
from .models import Dashboard
from .ports import AuthProvider, SignupRepository
from .signup import build_share_link

RECENT_REFERRALS_LIMIT = 50


@dataclass
class DashboardService:
    """Resolves a bearer token to the caller's referral dashboard."""

    repository: SignupRepository
    auth: AuthProvider
    referral_base_url: str

    def load(self, token: str) -> Dashboard:
        """
        Build the dashboard for the holder of token.

        Raises:
            Unauthorized: Token rejected by the auth provider (reason invalid_token)
            ProfileNotFound: Verified identity has no signup
        """
        email = self.auth.verify_token(token)
        if not email:
            raise Unauthorized(Unauthorized.INVALID_TOKEN)

        profile = self.repository.find_by_email(email.strip().lower())
        if profile is None:
            raise ProfileNotFound(email)

        referrals = self.repository.list_referrals(
            profile.referral_code, limit=RECENT_REFERRALS_LIMIT
        )
        return Dashboard(
            profile=profile,
            share_link=build_share_link(self.referral_base_url, profile.referral_code),
            referrals=referrals,
        )
