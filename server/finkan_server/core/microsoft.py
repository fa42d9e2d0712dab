"""Microsoft identity platform (OAuth 2.0 authorization code flow) and Graph profile lookup."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from .exceptions import AuthenticationError
from .identity import ExternalIdentity

logger = logging.getLogger(__name__)

LOGIN_BASE_URL = "https://login.microsoftonline.com"


class MicrosoftOAuthClient:
    """
    Minimal Microsoft OAuth client.

    Example:
        client = MicrosoftOAuthClient(client_id="...", client_secret="...",
                                      redirect_uri="http://localhost:3000/auth/microsoft/callback")
        url = client.authorization_url(state)
        tokens = await client.exchange_code(code)
        identity = await client.fetch_profile(tokens["access_token"])
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        tenant_id: str = "common",
        scopes: str = "openid profile email User.Read offline_access",
        graph_api_url: str = "https://graph.microsoft.com/v1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.tenant_id = tenant_id
        self.scopes = scopes
        self.graph_api_url = graph_api_url.rstrip("/")
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    @property
    def _oauth_base(self) -> str:
        return f"{LOGIN_BASE_URL}/{self.tenant_id}/oauth2/v2.0"

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=15.0)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "response_mode": "query",
            "scope": self.scopes,
            "state": state,
        }
        return f"{self._oauth_base}/authorize?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Returns:
            Token payload (access_token, refresh_token, expires_in, ...)

        Raises:
            AuthenticationError: If the provider rejects the code
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
            "scope": self.scopes,
        }
        async with self._http() as http:
            try:
                response = await http.post(f"{self._oauth_base}/token", data=data)
            except httpx.HTTPError as e:
                logger.error(f"Microsoft token endpoint unreachable: {e}")
                raise AuthenticationError(f"Identity provider unavailable: {str(e)}")

        if response.status_code != 200:
            logger.warning(f"Microsoft token exchange failed: HTTP {response.status_code}")
            raise AuthenticationError(_provider_message(response, "Authorization code was rejected"))

        payload = response.json()
        if not payload.get("access_token"):
            raise AuthenticationError("Identity provider returned no access token")
        return payload

    async def fetch_profile(self, access_token: str) -> ExternalIdentity:
        """
        Load the signed-in user from Graph /me.

        The email is `mail` when set, otherwise `userPrincipalName`.
        """
        async with self._http() as http:
            try:
                response = await http.get(
                    f"{self.graph_api_url}/me",
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.HTTPError as e:
                logger.error(f"Microsoft Graph unreachable: {e}")
                raise AuthenticationError(f"Identity provider unavailable: {str(e)}")

        if response.status_code != 200:
            logger.warning(f"Microsoft Graph /me failed: HTTP {response.status_code}")
            raise AuthenticationError(_provider_message(response, "Access token was rejected"))

        data = response.json()
        if not data.get("id"):
            raise AuthenticationError("Identity provider returned no user id")

        return ExternalIdentity(
            provider_id=data["id"],
            email=data.get("mail") or data.get("userPrincipalName"),
            full_name=data.get("displayName"),
            provider="microsoft",
        )


def _provider_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message") or fallback
        return body.get("error_description") or error or fallback
    return fallback
