"""FinKan API Client"""

import inspect
import logging
import os
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

logger = logging.getLogger("finkan_client")

UnauthenticatedHandler = Callable[[], Union[None, Awaitable[None]]]


class APIError(Exception):
    """Non-2xx response from the FinKan API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AuthenticationRequired(APIError):
    """The session credential is missing, invalid or expired (HTTP 401)."""


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.reason_phrase


class FinKan:
    """
    FinKan API Client

    Create once, reuse everywhere.

    Example:
        from finkan_client import FinKan

        client = FinKan(token="eyJ...")

        workspaces = await client.workspaces.list()
        project = await client.projects.create(workspaces[0].id, "Month-end close")
        board = await client.columns.list(project.id)

        # Local development
        client = FinKan(base_url="http://localhost:3000")

        # Using environment variables (FINKAN_TOKEN, FINKAN_BASE_URL)
        client = FinKan()

        # Send the user back to sign-in when the session runs out
        client = FinKan(on_unauthenticated=show_login)
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        on_unauthenticated: Optional[UnauthenticatedHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize FinKan client

        Args:
            token: Session token. Defaults to FINKAN_TOKEN environment variable.
            base_url: Base URL of the FinKan API server. Defaults to FINKAN_BASE_URL
                     environment variable, or http://localhost:3000 if not set.
            on_unauthenticated: Called (or awaited) whenever the API answers 401.
            transport: Custom httpx transport (tests use httpx.MockTransport).
        """
        self.token = token or os.getenv("FINKAN_TOKEN")
        self.base_url = (
            base_url or os.getenv("FINKAN_BASE_URL") or "http://localhost:3000"
        ).rstrip("/")
        self.on_unauthenticated = on_unauthenticated

        logger.debug(
            f"Initializing FinKan client: base_url={self.base_url}, "
            f"token={'present' if self.token else 'none'}"
        )

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=30.0,
            transport=transport,
        )

        from .auth import AuthAPI
        from .board import ColumnsAPI, ProjectsAPI, TasksAPI
        from .workspaces import WorkspacesAPI

        self.auth = AuthAPI(self)
        self.workspaces = WorkspacesAPI(self)
        self.projects = ProjectsAPI(self)
        self.columns = ColumnsAPI(self)
        self.tasks = TasksAPI(self)

    def set_token(self, token: str | None) -> None:
        """Replace the session token used for subsequent requests."""
        self.token = token

    async def request(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Send a request with the session credential attached.

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            AuthenticationRequired: On HTTP 401 (after on_unauthenticated runs)
            APIError: On any other non-2xx status
        """
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug(f"{method} {url}")
        response = await self._http.request(method, url, headers=headers, **kwargs)
        logger.debug(f"{method} {url} -> {response.status_code}")

        if response.status_code == 401:
            message = _error_message(response)
            logger.info(f"Session rejected: {message}")
            if self.on_unauthenticated is not None:
                result = self.on_unauthenticated()
                if inspect.isawaitable(result):
                    await result
            raise AuthenticationRequired(401, message)

        if response.is_error:
            raise APIError(response.status_code, _error_message(response))

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def close(self):
        """Close the HTTP client connection"""
        await self._http.aclose()

    async def __aenter__(self) -> "FinKan":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
