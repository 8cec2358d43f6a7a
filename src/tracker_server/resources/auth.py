"""Auth resource: protocol-agnostic login flow and session user lookup.

Session lifecycle::

    Anonymous --begin_login--> LoginInitiated --complete_login--> Authenticated
                                     |                                 |
                                     +--(any gate fails)--> Rejected   |
    Anonymous <-------------------------logout-------------------------+

The pending state is taken out of the session before it is compared, so a
state token is good for exactly one callback whatever the outcome.
"""

from __future__ import annotations

from typing import Any

from litestar import Request, Response
from loguru import logger

from tracker_server.clients.google_oauth_client import GoogleOAuthClient
from tracker_server.config.settings import SEVEN_DAYS
from tracker_server.models.user import ANONYMOUS, AnonymousUser, User
from tracker_server.services.user_service import UserResolutionError, UserService
from tracker_server.utils.crypto import Crypto
from tracker_server.utils.session import EXPIRE_NOW, Session, SessionStore


class StateMismatchError(Exception):
    """Raised when the callback state does not match the pending login."""


class UnverifiedEmailError(Exception):
    """Raised when the provider has not verified the profile email."""


class AuthResource:
    """Authentication operations.

    Built once at startup with all dependencies pre-wired, and handed to
    request handlers through app state.
    """

    def __init__(
        self,
        *,
        user_service: UserService,
        oauth_client: GoogleOAuthClient,
        session_store: SessionStore,
        base_url: str,
        landing_path: str = "/show",
        session_max_age: int = SEVEN_DAYS,
        require_verified_email: bool = True,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._landing_path = landing_path
        self._user_service = user_service
        self._oauth_client = oauth_client
        self._session_store = session_store
        self._session_max_age = session_max_age
        self._require_verified_email = require_verified_email

    @property
    def home_url(self) -> str:
        """Where the browser goes after logout."""
        return f"{self._base_url}/"

    @property
    def landing_url(self) -> str:
        """Where the browser goes after a successful login."""
        return f"{self._base_url}{self._landing_path}"

    def load_session(self, request: Request[Any, Any, Any]) -> Session:
        """Load the request's session. Never raises."""
        return self._session_store.load(request)

    def save_session(self, session: Session, response: Response[Any]) -> None:
        """Persist the session onto the response."""
        self._session_store.save(session, response)

    def begin_login(self, session: Session) -> str:
        """Issue a fresh state token into the session and return the provider URL."""
        state = Crypto.generate_state()
        session.pending_state = state
        return self._oauth_client.authorization_url(state)

    async def complete_login(self, session: Session, state: str, code: str) -> User:
        """Verify a provider callback and authenticate the session.

        The session only becomes authenticated if every step succeeds.

        Raises:
            StateMismatchError: If no login is pending or the state differs.
            ExchangeError: If the code cannot be exchanged.
            ProfileFetchError: If the profile cannot be fetched.
            UnverifiedEmailError: If verified emails are required and this one is not.
            UserResolutionError: If the user store fails.
        """
        expected = session.pending_state
        session.pending_state = None
        if expected is None:
            raise StateMismatchError("No login pending for this session")
        if not Crypto.tokens_match(expected, state):
            raise StateMismatchError("Retrieved state does not match returned state")

        token = await self._oauth_client.exchange_code(code)
        profile = await self._oauth_client.fetch_profile(token)
        if self._require_verified_email and not profile.email_verified:
            raise UnverifiedEmailError(f"Email {profile.email} is not verified")

        user = await self._user_service.resolve(profile)
        session.user_id = user.email
        session.max_age = self._session_max_age
        logger.info(f"User {user.email} signed in")
        return user

    def logout(self, session: Session) -> None:
        """Clear the session and mark its cookie for immediate expiry."""
        if session.user_id is not None:
            logger.info(f"User {session.user_id} signed out")
        session.clear()
        session.max_age = EXPIRE_NOW

    async def current_user(self, session: Session) -> User | AnonymousUser:
        """Resolve the session's user. Never raises."""
        if not session.user_id:
            return ANONYMOUS
        try:
            user = await self._user_service.find_by_email(session.user_id)
        except UserResolutionError as error:
            logger.error(f"Could not load session user {session.user_id}: {error}")
            return ANONYMOUS
        return ANONYMOUS if user is None else user
