"""
API response models.

Pydantic models for FastAPI response serialization and OpenAPI schema generation.
Field aliases keep the camelCase keys the dashboard frontend expects.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from waitlist.domain.models import Dashboard, LeaderboardEntry


class SignupResponse(BaseModel):
    """Response model for a successful signup or dashboard-link resend."""

    message: str


class ProfileSummary(BaseModel):
    """The caller's own waitlist entry."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    brand: str | None
    code: str
    referrals: int
    joined: datetime
    share_link: str = Field(..., alias="shareLink")


class ReferralSummary(BaseModel):
    """A signup the caller referred."""

    name: str
    brand: str | None
    email: str
    joined: datetime


class DashboardResponse(BaseModel):
    """Response model for the referral dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    profile: ProfileSummary
    recent_referrals: list[ReferralSummary] = Field(..., alias="recentReferrals")

    @classmethod
    def from_dashboard(cls, dashboard: Dashboard) -> "DashboardResponse":
        profile = dashboard.profile
        return cls(
            profile=ProfileSummary(
                name=profile.full_name,
                brand=profile.brand_name,
                code=profile.referral_code,
                referrals=profile.referral_count or 0,
                joined=profile.created_at,
                share_link=dashboard.share_link,
            ),
            recent_referrals=[
                ReferralSummary(
                    name=referral.full_name,
                    brand=referral.brand_name,
                    email=referral.email,
                    joined=referral.created_at,
                )
                for referral in dashboard.referrals
            ],
        )


class LeaderboardRow(BaseModel):
    """Response model for one leaderboard position."""

    full_name: str
    referral_code: str
    referral_count: int
    rank: int

    @classmethod
    def from_entry(cls, entry: LeaderboardEntry) -> "LeaderboardRow":
        return cls(
            full_name=entry.full_name,
            referral_code=entry.referral_code,
            referral_count=entry.referral_count,
            rank=entry.rank,
        )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    message: str
    field: str | None = None
