"""
Public referral leaderboard.
"""

import logging
from dataclasses import dataclass

from .exceptions import LeaderboardUnavailable, StorageError
from .models import LeaderboardEntry
from .ports import SignupRepository

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10


@dataclass
class LeaderboardService:
    """Top referrers, ranked by position."""

    repository: SignupRepository

    def top(self, limit: int = LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
        try:
            signups = self.repository.top_by_referrals(limit)
        except StorageError as e:
            logger.error("Leaderboard query failed: %s", e)
            raise LeaderboardUnavailable() from e

        return [
            LeaderboardEntry(
                full_name=signup.full_name,
                referral_code=signup.referral_code,
                referral_count=signup.referral_count,
                rank=position,
            )
            for position, signup in enumerate(signups[:limit], start=1)
        ]
