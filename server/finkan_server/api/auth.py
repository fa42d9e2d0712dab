"""Login, logout and session routes.

Microsoft sign-in ends by setting an HTTP-only session cookie; the same
session token is also returned from the token-exchange route so non-browser
clients can send it as a bearer token.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine import Engine

from ..auth import AuthContext, get_auth_context
from ..config import Settings, get_engine, get_microsoft_client, get_settings
from ..core.database import get_connection
from ..core.exceptions import AuthenticationError
from ..core.identity import ExternalIdentity, get_profile, resolve_profile, store_provider_tokens
from ..core.microsoft import MicrosoftOAuthClient
from ..core.models import Profile
from ..core.sessions import issue_oauth_state, issue_session_token, verify_oauth_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

OAUTH_STATE_COOKIE = "finkan_oauth_state"


class TokenExchangeRequest(BaseModel):
    """Tokens obtained by a client-side Microsoft login."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    id_token: Optional[str] = Field(None, alias="idToken")


class SessionResponse(BaseModel):
    user: Profile
    token: str


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(settings.session_ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )


def complete_login(
    engine: Engine,
    settings: Settings,
    identity: ExternalIdentity,
    tokens: Optional[dict[str, Any]] = None,
) -> tuple[dict[str, Any], str]:
    """
    Resolve the profile for a verified identity and sign a session for it.

    Profile resolution and provider token storage share one transaction.

    Returns:
        (profile row, session token)
    """
    with get_connection(engine) as conn:
        profile = resolve_profile(conn, identity)
        if tokens:
            store_provider_tokens(
                conn,
                profile["id"],
                access_token=tokens["access_token"],
                refresh_token=tokens.get("refresh_token"),
                expires_in=tokens.get("expires_in"),
            )

    token = issue_session_token(
        profile, settings.jwt_secret, settings.session_ttl, settings.jwt_algorithm
    )
    logger.info(f"Profile {profile['id']} signed in via {identity.provider}")
    return profile, token


def _login_failed(settings: Settings, message: str) -> RedirectResponse:
    query = urlencode({"error": message})
    response = RedirectResponse(f"{settings.client_url.rstrip('/')}/auth?{query}", status_code=302)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/auth")
    return response


@router.get("/me")
async def me(
    auth_ctx: AuthContext = Depends(get_auth_context),
    engine: Engine = Depends(get_engine),
) -> dict[str, Any]:
    """Return the identity bound to the session credential."""
    try:
        with get_connection(engine) as conn:
            profile = get_profile(conn, auth_ctx.profile_id)
    except Exception as e:
        logger.error(f"Failed to load profile: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to load profile: {str(e)}")

    if profile is None:
        # Session is valid but the profile row has not been materialized yet
        return {
            "user": {
                "id": str(auth_ctx.profile_id),
                "email": auth_ctx.email,
                "role": auth_ctx.role,
            }
        }
    return {"user": Profile.model_validate(profile).model_dump(mode="json")}


@router.get("/microsoft")
async def microsoft_login(
    settings: Settings = Depends(get_settings),
    oauth: MicrosoftOAuthClient = Depends(get_microsoft_client),
):
    """Redirect the browser to the Microsoft sign-in page."""
    if not oauth.configured:
        raise HTTPException(status_code=503, detail="Microsoft sign-in is not configured")

    nonce, signed = issue_oauth_state(settings.jwt_secret, settings.jwt_algorithm)
    response = RedirectResponse(oauth.authorization_url(nonce), status_code=302)
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        signed,
        max_age=600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/auth",
    )
    return response


@router.get("/microsoft/callback")
async def microsoft_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    engine: Engine = Depends(get_engine),
    oauth: MicrosoftOAuthClient = Depends(get_microsoft_client),
):
    """
    Finish the Microsoft sign-in.

    On success the session cookie is set and the browser is sent to the
    client app; on failure the browser goes to the client's /auth page with
    an `error` query parameter.
    """
    if error:
        logger.warning(f"Microsoft sign-in returned an error: {error}")
        return _login_failed(settings, error_description or error)
    if not code:
        return _login_failed(settings, "Missing authorization code")

    try:
        verify_oauth_state(
            state,
            request.cookies.get(OAUTH_STATE_COOKIE),
            settings.jwt_secret,
            settings.jwt_algorithm,
        )
        tokens = await oauth.exchange_code(code)
        identity = await oauth.fetch_profile(tokens["access_token"])
        _, token = complete_login(engine, settings, identity, tokens)
    except AuthenticationError as e:
        logger.info(f"Microsoft sign-in rejected: {e}")
        return _login_failed(settings, str(e))
    except Exception as e:
        logger.error(f"Microsoft sign-in failed: {e}", exc_info=True)
        return _login_failed(settings, "Sign-in failed")

    response = RedirectResponse(settings.client_url, status_code=302)
    set_session_cookie(response, token, settings)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/auth")
    return response


@router.post("/microsoft/token", response_model=SessionResponse)
async def microsoft_token(
    request: TokenExchangeRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    engine: Engine = Depends(get_engine),
    oauth: MicrosoftOAuthClient = Depends(get_microsoft_client),
):
    """
    Exchange a Microsoft access token from a client-side login for a session.

    The access token is verified by loading the user from Microsoft Graph.

    **Request Body:**
    - `accessToken`: Microsoft Graph access token
    - `idToken` (optional): accepted for compatibility, not used

    **Errors:**
    - `401`: Microsoft rejected the token
    """
    try:
        identity = await oauth.fetch_profile(request.access_token)
        profile, token = complete_login(engine, settings, identity)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to exchange token: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to exchange token: {str(e)}")

    set_session_cookie(response, token, settings)
    return SessionResponse(user=Profile.model_validate(profile), token=token)


@router.get("/logout")
async def logout_redirect(settings: Settings = Depends(get_settings)):
    """Clear the session cookie and send the browser to the client's login page."""
    response = RedirectResponse(f"{settings.client_url.rstrip('/')}/auth", status_code=302)
    clear_session_cookie(response, settings)
    return response


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_settings)) -> dict[str, bool]:
    clear_session_cookie(response, settings)
    return {"success": True}
