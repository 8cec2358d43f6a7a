"""Google OAuth2 client, constructed once at startup with all config."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

_SCOPES = "openid email profile"


class OAuthClientError(Exception):
    """Base class for failures talking to the identity provider."""


class ExchangeError(OAuthClientError):
    """Raised when an authorization code cannot be exchanged for a token."""


class ProfileFetchError(OAuthClientError):
    """Raised when the userinfo endpoint fails or returns unusable data."""


@dataclass
class OAuthToken:
    """Access token returned by the token endpoint."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None


@dataclass
class GoogleProfile:
    """Claims from Google's userinfo endpoint. Untrusted input."""

    subject: str
    email: str
    email_verified: bool = False
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None


def _decode_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body.

    Raises:
        ValueError: If the body is not valid JSON or not an object.
    """
    body = response.json()
    if not isinstance(body, dict):
        raise ValueError(f"expected a JSON object, got {type(body).__name__}")
    return body


class GoogleOAuthClient:
    """Google OAuth2 client. Built once at startup, reused for every request."""

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        base_url: str,
        auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth",
        token_url: str = "https://oauth2.googleapis.com/token",
        userinfo_url: str = "https://www.googleapis.com/oauth2/v3/userinfo",
        timeout: float = 10.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._base_url = base_url.rstrip("/")
        self._auth_url = auth_url
        self._token_url = token_url
        self._userinfo_url = userinfo_url
        self._timeout = timeout

    @property
    def redirect_uri(self) -> str:
        """The callback URL registered with Google."""
        return f"{self._base_url}/auth/authenticate"

    def authorization_url(self, state: str) -> str:
        """Build the Google OAuth2 authorization URL."""
        params = {
            "client_id": self._client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": _SCOPES,
            "state": state,
            "prompt": "select_account",
        }
        return f"{self._auth_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthToken:
        """Exchange an authorization code for an access token.

        Raises:
            ExchangeError: On transport failure, timeout, provider rejection,
                or a malformed response.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as http_client:
                response = await http_client.post(
                    self._token_url,
                    data={
                        "code": code,
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as error:
            raise ExchangeError(f"Google token request failed: {error!r}") from error

        if response.status_code != 200:
            raise ExchangeError(
                f"Google token exchange failed ({response.status_code}): "
                f"{response.text}"
            )
        try:
            tokens = _decode_object(response)
        except ValueError as error:
            raise ExchangeError(f"Malformed token response: {error}") from error

        access_token = tokens.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise ExchangeError("No access_token in Google response")
        expires_in = tokens.get("expires_in")
        return OAuthToken(
            access_token=access_token,
            token_type=str(tokens.get("token_type") or "Bearer"),
            expires_in=expires_in if isinstance(expires_in, int) else None,
        )

    async def fetch_profile(self, token: OAuthToken) -> GoogleProfile:
        """Fetch the signed-in user's profile with an access token.

        Raises:
            ProfileFetchError: On transport failure, timeout, a non-200
                status, undecodable JSON, or a profile without an email.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as http_client:
                response = await http_client.get(
                    self._userinfo_url,
                    headers={"Authorization": f"Bearer {token.access_token}"},
                )
        except httpx.HTTPError as error:
            raise ProfileFetchError(
                f"Google userinfo request failed: {error!r}"
            ) from error

        if response.status_code != 200:
            raise ProfileFetchError(
                f"Google userinfo request failed ({response.status_code}): "
                f"{response.text}"
            )
        try:
            userinfo = _decode_object(response)
        except ValueError as error:
            raise ProfileFetchError(f"Malformed userinfo response: {error}") from error

        subject = str(userinfo.get("sub") or "").strip()
        email = userinfo.get("email")
        if not isinstance(email, str):
            email = ""
        email = email.strip()
        if not subject or not email:
            raise ProfileFetchError("Google did not return sub or email")

        return GoogleProfile(
            subject=subject,
            email=email,
            email_verified=userinfo.get("email_verified") in (True, "true"),
            name=userinfo.get("name"),
            given_name=userinfo.get("given_name"),
            family_name=userinfo.get("family_name"),
            picture=userinfo.get("picture"),
        )
