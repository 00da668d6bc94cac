"""
Caller authentication against Supabase Auth (GoTrue).

The bearer token is whatever access token the client got from its own sign-in
flow; this module only asks Supabase who it belongs to.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None


class SupabaseAuth:
    def __init__(self, client: httpx.AsyncClient) -> None:
        # client carries the anon key as apikey; the user token goes per request
        self._client = client

    async def get_user(self, access_token: str | None) -> AuthenticatedUser | None:
        """Resolve an access token to a user; None when missing, rejected or auth unreachable."""
        if not access_token:
            return None
        try:
            resp = await self._client.get(
                "/auth/v1/user",
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            logger.warning("Auth lookup failed: %s", e)
            return None
        if resp.status_code != 200:
            logger.info("Access token rejected (status %s)", resp.status_code)
            return None
        data = resp.json()
        user_id = data.get("id")
        if not user_id:
            return None
        return AuthenticatedUser(id=str(user_id), email=data.get("email"))


def bearer_token(authorization: str | None) -> str | None:
    """'Bearer <token>' -> token; anything else -> None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(request: Request) -> AuthenticatedUser | None:
    """FastAPI dependency: the caller, or None. The route decides what None means."""
    auth: SupabaseAuth = request.app.state.auth
    return await auth.get_user(bearer_token(request.headers.get("authorization")))
