"""
Request gateway - Per-endpoint CORS headers, body decoding and client identification.

Each endpoint declares its own CORS policy. CorsHeadersMiddleware stamps
the matching headers on every response for that path, error responses
included, so browsers can read failures as well as successes.
"""

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from waitlist.api.errors import INTERNAL_ERROR, UnsupportedMediaType, error_response
from waitlist.domain.exceptions import ValidationErrorKind, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorsPolicy:
    """Fixed CORS headers for one endpoint."""

    allow_origin: str
    allow_methods: str
    allow_headers: str

    def headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": self.allow_methods,
            "Access-Control-Allow-Headers": self.allow_headers,
        }


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Add the endpoint's CORS headers to every response on its path."""

    def __init__(self, app, policies: dict[str, CorsPolicy]) -> None:
        super().__init__(app)
        self.policies = {path.rstrip("/"): policy for path, policy in policies.items()}

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        policy = self.policies.get(request.url.path.rstrip("/"))
        if policy is not None:
            response.headers.update(policy.headers())
            if response.status_code == 405:
                response.headers["Allow"] = policy.allow_methods
        return response


class InternalErrorMiddleware(BaseHTTPMiddleware):
    """
    Turn unhandled exceptions into a generic 500.

    Runs inside CorsHeadersMiddleware so the 500 still carries CORS headers.
    The full traceback is logged; the client only sees a generic message.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return error_response(INTERNAL_ERROR)


def client_ip(request: Request) -> str:
    """
    Best-effort client address for rate limiting.

    Prefers the first X-Forwarded-For hop, then X-Real-IP, then the socket peer.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


async def read_json_body(request: Request) -> Any:
    """
    Decode a JSON request body.

    Raises:
        UnsupportedMediaType: Content-Type does not declare application/json
        ValidationFailed: Body is not valid JSON (kind invalid_body)
    """
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        raise UnsupportedMediaType(content_type)
    try:
        return await request.json()
    except ValueError:
        raise ValidationFailed(ValidationErrorKind.INVALID_BODY) from None
