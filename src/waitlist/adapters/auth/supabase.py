"""
Supabase Auth adapter - Implements AuthProvider protocol.

Talks to the GoTrue REST API with the service-role key:
- POST /auth/v1/admin/generate_link issues magic links
- GET  /auth/v1/user resolves a user's access token to their identity

Provider refusals (4xx) are reported as None per the port contract.
Transport failures and 5xx answers raise AuthProviderError.
"""

import logging

import httpx

from waitlist.domain.exceptions import AuthProviderError

logger = logging.getLogger(__name__)


class SupabaseAuthProvider:
    """
    Implements AuthProvider protocol via the Supabase Auth admin API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, client: httpx.Client, supabase_url: str, service_role_key: str) -> None:
        self._client = client
        self._auth_url = f"{supabase_url.rstrip('/')}/auth/v1"
        self._service_role_key = service_role_key

    def generate_magic_link(self, email: str, redirect_to: str) -> str | None:
        payload = {
            "type": "magiclink",
            "email": email,
            "redirect_to": redirect_to,
        }
        response = self._request(
            "POST",
            "/admin/generate_link",
            bearer=self._service_role_key,
            json=payload,
        )
        if response.is_error:
            logger.error("generate_link rejected with status %d", response.status_code)
            return None

        body = _json_body(response)
        # GoTrue returns the link at the top level; client SDKs nest it under "properties"
        link = body.get("action_link")
        if not link:
            properties = body.get("properties")
            if isinstance(properties, dict):
                link = properties.get("action_link")
        return link or None

    def verify_token(self, token: str) -> str | None:
        response = self._request("GET", "/user", bearer=token)
        if response.is_error:
            logger.info("Access token rejected with status %d", response.status_code)
            return None
        return _json_body(response).get("email") or None

    def _request(self, method: str, path: str, bearer: str, **kwargs) -> httpx.Response:
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {bearer}",
        }
        try:
            response = self._client.request(
                method, f"{self._auth_url}{path}", headers=headers, **kwargs
            )
        except httpx.HTTPError as e:
            raise AuthProviderError(f"{method} {path} failed: {e}") from e

        if response.is_server_error:
            raise AuthProviderError(f"{method} {path} returned {response.status_code}")
        return response


def _json_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError as e:
        raise AuthProviderError("Auth provider returned a non-JSON body") from e
    if not isinstance(body, dict):
        raise AuthProviderError("Auth provider returned an unexpected body")
    return body
