"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

Process-scoped resources (connection pool, HTTP client, settings) are
created by the application factory and lifespan and read from app.state.
"""

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from waitlist.adapters.auth.supabase import SupabaseAuthProvider
from waitlist.adapters.email.console import ConsoleEmailSender
from waitlist.adapters.email.resend import ResendEmailSender
from waitlist.adapters.repository.postgres import (
    PostgresRateLimitStore,
    PostgresSignupRepository,
)
from waitlist.config.settings import Settings
from waitlist.domain.dashboard import DashboardService
from waitlist.domain.exceptions import Unauthorized
from waitlist.domain.leaderboard import LeaderboardService
from waitlist.domain.ports import EmailSender
from waitlist.domain.rate_limit import RateLimiter
from waitlist.domain.signup import SignupService


def get_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_http_client(request: Request) -> httpx.Client:
    """Shared outbound HTTP client, created during app lifespan startup."""
    return request.app.state.http_client


def get_repository(pool: ConnectionPool = Depends(get_pool)) -> PostgresSignupRepository:
    """Create repository with connection pool from app state."""
    return PostgresSignupRepository(pool)


def get_rate_limiter(
    pool: ConnectionPool = Depends(get_pool),
    settings: Settings = Depends(get_settings),
) -> RateLimiter:
    return RateLimiter(
        store=PostgresRateLimitStore(pool),
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


def get_auth_provider(
    client: httpx.Client = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> SupabaseAuthProvider:
    return SupabaseAuthProvider(
        client=client,
        supabase_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
    )


def get_email_sender(
    client: httpx.Client = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> EmailSender:
    """Resend in production, console logging when EMAIL_BACKEND=console."""
    if settings.email_backend == "console":
        return ConsoleEmailSender()
    return ResendEmailSender(
        client=client,
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        welcome_subject=settings.email_subject,
    )


def get_signup_service(
    repository: PostgresSignupRepository = Depends(get_repository),
    auth: SupabaseAuthProvider = Depends(get_auth_provider),
    email_sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> SignupService:
    """
    Create signup service with injected dependencies.

    Wires together the repository, auth provider and email sender for the domain service.
    """
    return SignupService(
        repository=repository,
        auth=auth,
        email_sender=email_sender,
        referral_base_url=settings.referral_base_url,
        dashboard_url=settings.dashboard_url,
        limits=settings.field_limits,
    )


def get_dashboard_service(
    repository: PostgresSignupRepository = Depends(get_repository),
    auth: SupabaseAuthProvider = Depends(get_auth_provider),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    return DashboardService(
        repository=repository,
        auth=auth,
        referral_base_url=settings.referral_base_url,
    )


def get_leaderboard_service(
    repository: PostgresSignupRepository = Depends(get_repository),
) -> LeaderboardService:
    return LeaderboardService(repository=repository)


# Bearer security scheme for OpenAPI documentation.
# auto_error=False so a missing header maps to our own "unauthorized" error body.
http_bearer = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> str:
    """
    Extract the access token from an Authorization: Bearer header.

    Raises:
        Unauthorized: Header missing, not a Bearer scheme, or empty token
    """
    if credentials is None or not credentials.credentials.strip():
        raise Unauthorized(Unauthorized.MISSING)
    return credentials.credentials.strip()
