"""Waitlist signup service with referral tracking."""
