"""Session API client"""

import logging
from typing import TYPE_CHECKING, Optional

from .types import Profile

if TYPE_CHECKING:
    from .client import FinKan

logger = logging.getLogger("finkan_client.auth")


class AuthAPI:
    """Sign-in and session routes"""

    def __init__(self, client: "FinKan"):
        self._client = client

    def login_url(self) -> str:
        """URL that starts the browser Microsoft sign-in."""
        return f"{self._client.base_url}/auth/microsoft"

    async def me(self) -> Profile:
        data = await self._client.request("GET", "/auth/me")
        return Profile.from_dict(data["user"])

    async def exchange_microsoft_token(
        self, access_token: str, id_token: Optional[str] = None
    ) -> Profile:
        """Trade a Microsoft Graph access token for a FinKan session.

        The returned session token is stored on the client.
        """
        payload = {"accessToken": access_token}
        if id_token:
            payload["idToken"] = id_token
        data = await self._client.request("POST", "/auth/microsoft/token", json=payload)
        self._client.set_token(data["token"])
        profile = Profile.from_dict(data["user"])
        logger.info(f"Signed in as {profile.email}")
        return profile

    async def logout(self) -> None:
        await self._client.request("POST", "/auth/logout")
        self._client.set_token(None)
