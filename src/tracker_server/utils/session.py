"""Signed cookie session store.

The session payload is a compact HS256 JWT. The browser holds it, the
server only ever trusts what verifies against the signing key, and a cookie
that fails verification is treated as no session at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from litestar import Request, Response
from loguru import logger

from tracker_server.config.settings import SEVEN_DAYS

_STATE_CLAIM = "state"
_USER_CLAIM = "user-id"
_ALGORITHM = "HS256"

# Max-Age that tells the browser to drop the cookie immediately.
EXPIRE_NOW = -1


@dataclass
class Session:
    """Per-request session data.

    ``max_age`` is the cookie lifetime to apply on the next save; ``None``
    means the store default.
    """

    pending_state: str | None = None
    user_id: str | None = None
    max_age: int | None = None

    @property
    def is_authenticated(self) -> bool:
        """True once a login callback has completed for this session."""
        return bool(self.user_id)

    def clear(self) -> None:
        """Drop all session values."""
        self.pending_state = None
        self.user_id = None


class SessionStore:
    """Loads and saves ``Session`` objects as signed cookies.

    Built once at startup. The signing key is never mutated afterwards, so a
    single instance is safe to share between concurrent requests.
    """

    def __init__(
        self,
        *,
        secret_key: str,
        cookie_name: str = "tracker",
        default_max_age: int = SEVEN_DAYS,
        secure: bool = False,
    ) -> None:
        if not secret_key:
            raise ValueError("SessionStore requires a signing key")
        self._secret_key = secret_key
        self._cookie_name = cookie_name
        self._default_max_age = default_max_age
        self._secure = secure

    @property
    def cookie_name(self) -> str:
        """Name of the session cookie."""
        return self._cookie_name

    def encode(self, session: Session, max_age: int) -> str:
        """Serialize and sign a session."""
        claims: dict[str, Any] = {}
        if session.pending_state is not None:
            claims[_STATE_CLAIM] = session.pending_state
        if session.user_id is not None:
            claims[_USER_CLAIM] = session.user_id
        claims["exp"] = datetime.now(timezone.utc) + timedelta(seconds=max_age)
        return jwt.encode(claims, self._secret_key, algorithm=_ALGORITHM)

    def decode(self, value: str) -> Session:
        """Verify and deserialize a cookie value.

        Raises:
            ValueError: If the signature, expiry, or claim types are invalid.
        """
        try:
            claims: dict[str, Any] = jwt.decode(
                value, self._secret_key, algorithms=[_ALGORITHM],
            )
        except JWTError as error:
            raise ValueError(f"Invalid session cookie: {error}") from error
        state = claims.get(_STATE_CLAIM)
        user_id = claims.get(_USER_CLAIM)
        for claim in (state, user_id):
            if claim is not None and not isinstance(claim, str):
                raise ValueError("Invalid session cookie: non-string claim")
        return Session(pending_state=state, user_id=user_id)

    def load(
        self, request: Request[Any, Any, Any], name: str | None = None,
    ) -> Session:
        """Return the request's session, or a fresh empty one.

        Never raises for missing, expired, or tampered cookies.
        """
        value = request.cookies.get(name or self._cookie_name)
        if not value:
            return Session()
        try:
            return self.decode(value)
        except ValueError as error:
            logger.debug(f"Discarding session cookie: {error}")
            return Session()

    def save(self, session: Session, response: Response[Any]) -> None:
        """Write the session cookie onto the outgoing response."""
        max_age = (
            self._default_max_age if session.max_age is None else session.max_age
        )
        value = "" if max_age <= 0 else self.encode(session, max_age)
        response.set_cookie(
            key=self._cookie_name,
            value=value,
            max_age=max_age,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )
