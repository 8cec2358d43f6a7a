"""Authentication controller: thin HTTP adapter for AuthResource."""

from __future__ import annotations

from typing import Any

from litestar import Controller, Request, get
from litestar.enums import MediaType
from litestar.params import Dependency, Parameter
from litestar.response import Redirect, Response
from loguru import logger

from tracker_server.clients.google_oauth_client import ExchangeError, ProfileFetchError
from tracker_server.models.user import AnonymousUser, User
from tracker_server.resources.auth import (
    AuthResource,
    StateMismatchError,
    UnverifiedEmailError,
)
from tracker_server.services.user_service import UserResolutionError
from tracker_server.templates import render_error

# Status and user-facing message per rejection class. Upstream error text
# stays in the server log.
_REJECTIONS: dict[type[Exception], tuple[int, str]] = {
    StateMismatchError: (
        400, "This sign-in attempt has expired or was not started here.",
    ),
    UnverifiedEmailError: (
        403, "Your Google account email address has not been verified.",
    ),
    ExchangeError: (502, "We could not complete sign-in with Google."),
    ProfileFetchError: (502, "We could not read your Google profile."),
    UserResolutionError: (500, "We could not load your account."),
}
_REJECTION_TYPES = tuple(_REJECTIONS)


def _error_page(error: Exception) -> Response[str]:
    """Render the generic error page for a rejected login."""
    status_code, message = next(
        _REJECTIONS[cls] for cls in type(error).__mro__ if cls in _REJECTIONS
    )
    return Response(
        content=render_error(message, login_url="/auth/login"),
        status_code=status_code,
        media_type=MediaType.HTML,
    )


class AuthController(Controller):
    """HTTP endpoints for login, provider callback, logout, and current user.

    The session is loaded per request and always written back, so a
    consumed state token is forgotten even when the callback is rejected.
    """

    path = "/auth"

    @get("/login")
    async def login(
        self, request: Request[Any, Any, Any], auth: AuthResource,
    ) -> Redirect:
        """Redirect the browser to Google's consent screen."""
        session = auth.load_session(request)
        response = Redirect(path=auth.begin_login(session), status_code=303)
        auth.save_session(session, response)
        logger.info("Login initiated")
        return response

    @get("/authenticate")
    async def authenticate(
        self,
        request: Request[Any, Any, Any],
        auth: AuthResource,
        returned_state: str = Parameter(query="state", default=""),
        code: str = "",
    ) -> Response[Any]:
        """Handle Google's redirect back: verify state, sign the user in.

        ``state`` is a reserved handler kwarg in Litestar, hence the alias.
        """
        session = auth.load_session(request)
        response: Response[Any]
        try:
            await auth.complete_login(session, returned_state, code)
        except _REJECTION_TYPES as error:
            logger.warning(f"Rejected login callback: {error!r}")
            response = _error_page(error)
        else:
            response = Redirect(path=auth.landing_url, status_code=303)
        auth.save_session(session, response)
        return response

    @get("/logout")
    async def logout(
        self, request: Request[Any, Any, Any], auth: AuthResource,
    ) -> Redirect:
        """Expire the session cookie and send the browser home."""
        session = auth.load_session(request)
        auth.logout(session)
        response = Redirect(path=auth.home_url, status_code=303)
        auth.save_session(session, response)
        return response

    @get("/me")
    async def me(
        self,
        user: User | AnonymousUser = Dependency(skip_validation=True),
    ) -> dict[str, object]:
        """Return the signed-in user, or ``{"authenticated": false}``."""
        return user.to_dict()
