"""
API v1 routes.

Defines the three waitlist endpoints:
- POST /v1/join-waitlist  - Join the waitlist (rate limited)
- GET  /v1/ref-dashboard  - Referral dashboard for a bearer token
- GET  /v1/ref-leaderboard - Top referrers

Each path also answers OPTIONS preflight with 204. Any other method is
rejected with 405 by the router (body rewritten in waitlist.api.errors).
"""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from waitlist.api.dependencies import (
    get_bearer_token,
    get_dashboard_service,
    get_leaderboard_service,
    get_rate_limiter,
    get_signup_service,
)
from waitlist.api.gateway import CorsPolicy, client_ip, read_json_body
from waitlist.api.models import (
    DashboardResponse,
    ErrorResponse,
    LeaderboardRow,
    SignupResponse,
)
from waitlist.domain.dashboard import DashboardService
from waitlist.domain.exceptions import RateLimited
from waitlist.domain.leaderboard import LeaderboardService
from waitlist.domain.ports import SignupOutcome
from waitlist.domain.rate_limit import RateLimiter
from waitlist.domain.signup import SignupService

router = APIRouter(tags=["v1"])

SIGNUP_PATH = "/join-waitlist"
DASHBOARD_PATH = "/ref-dashboard"
LEADERBOARD_PATH = "/ref-leaderboard"

# Rate-limit bucket name for signups
SIGNUP_ENDPOINT = "join-waitlist"

ENDPOINT_METHODS = {
    SIGNUP_PATH: "POST, OPTIONS",
    DASHBOARD_PATH: "GET, OPTIONS",
    LEADERBOARD_PATH: "GET, OPTIONS",
}

JOINED_MESSAGE = (
    "Successfully joined the waitlist! Check your email for your referral link "
    "and dashboard link. It might take a few minutes to arrive."
)
RETURNING_MESSAGE = "Dashboard magic link has been sent to your email."


def cors_policies(prefix: str, allow_origin: str, allow_headers: str) -> dict[str, CorsPolicy]:
    """CORS policy for each endpoint, keyed by its mounted path."""
    return {
        f"{prefix}{path}": CorsPolicy(
            allow_origin=allow_origin,
            allow_methods=methods,
            allow_headers=allow_headers,
        )
        for path, methods in ENDPOINT_METHODS.items()
    }


@router.post(
    SIGNUP_PATH,
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": SignupResponse, "description": "Already on the waitlist; dashboard link re-sent"},
        400: {"model": ErrorResponse, "description": "Missing or too-long field, or malformed body"},
        409: {"model": ErrorResponse, "description": "Email inserted by a concurrent request"},
        415: {"model": ErrorResponse, "description": "Content-Type is not application/json"},
        422: {"model": ErrorResponse, "description": "Invalid email address"},
        429: {"model": ErrorResponse, "description": "Too many requests from this client"},
        501: {"model": ErrorResponse, "description": "Joined, but email quota exceeded"},
        502: {"model": ErrorResponse, "description": "Joined, but email delivery failed"},
        503: {"model": ErrorResponse, "description": "Joined, but magic link generation failed"},
    },
    summary="Join the waitlist",
    description="Submit a name and email to join the waitlist. A confirmation email with "
    "a referral link and a dashboard sign-in link is sent to the address.",
)
async def join_waitlist(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    service: SignupService = Depends(get_signup_service),
):
    """
    Join the waitlist, crediting the referrer if a ref code is supplied.

    - **full_name**: Display name (required)
    - **email**: Email address (required)
    - **brand_name**: Optional brand or company
    - **ref**: Optional referral code of the person who shared the link
    """
    allowed = await run_in_threadpool(limiter.allow, client_ip(request), SIGNUP_ENDPOINT)
    if not allowed:
        raise RateLimited(limiter.window_seconds)

    payload = await read_json_body(request)
    outcome = await run_in_threadpool(service.join, payload)

    if outcome == SignupOutcome.RETURNING:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=SignupResponse(message=RETURNING_MESSAGE).model_dump(),
        )
    return SignupResponse(message=JOINED_MESSAGE)


@router.get(
    DASHBOARD_PATH,
    response_model=DashboardResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
        404: {"model": ErrorResponse, "description": "No waitlist entry for this account"},
    },
    summary="Referral dashboard",
    description="Return the caller's waitlist entry and up to 50 most recent referrals.",
)
def ref_dashboard(
    token: str = Depends(get_bearer_token),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    dashboard = service.load(token)
    return DashboardResponse.from_dashboard(dashboard)


@router.get(
    LEADERBOARD_PATH,
    response_model=list[LeaderboardRow],
    responses={
        400: {"model": ErrorResponse, "description": "Leaderboard query failed"},
    },
    summary="Referral leaderboard",
    description="Top 10 signups by referral count. Ties go to the earliest signup.",
)
def ref_leaderboard(
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> list[LeaderboardRow]:
    return [LeaderboardRow.from_entry(entry) for entry in service.top()]


# Registered after the real routes so a 405 reports their methods in Allow
@router.options(SIGNUP_PATH, include_in_schema=False)
@router.options(DASHBOARD_PATH, include_in_schema=False)
@router.options(LEADERBOARD_PATH, include_in_schema=False)
async def preflight() -> Response:
    """CORS preflight. Headers are added by CorsHeadersMiddleware."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
