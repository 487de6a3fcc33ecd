"""
API v1 package.

Contains versioned API routes for the waitlist signup and referral API.
"""

from waitlist.api.v1.routes import cors_policies, router

__all__ = ["cors_policies", "router"]
