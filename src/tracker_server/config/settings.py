"""Settings model: pydantic-settings with env var support."""

from __future__ import annotations

from pydantic_settings import BaseSettings

ENV_PREFIX = "TRACKER_"

SEVEN_DAYS = 86400 * 7


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing."""


class Settings(BaseSettings):
    """Server settings.

    Use ``ConfigLoader.load_settings()`` to build with YAML + env var layering.
    Direct construction (e.g. in tests) skips YAML loading.
    """

    secret_key: str = ""
    database_url: str = "sqlite+aiosqlite:///tracker.db"
    base_url: str = "http://localhost:8080"
    google_client_id: str = ""
    google_client_secret: str = ""
    google_auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth"
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_userinfo_url: str = "https://www.googleapis.com/oauth2/v3/userinfo"
    oauth_timeout_seconds: float = 10.0
    session_cookie_name: str = "tracker"
    session_max_age: int = SEVEN_DAYS
    session_cookie_secure: bool = False
    landing_path: str = "/show"
    require_verified_email: bool = True
    log_level: str = "INFO"

    model_config = {"env_prefix": ENV_PREFIX}

    def require_oauth_credentials(self) -> None:
        """Fail fast when the Google client credentials are not configured.

        Raises:
            ConfigurationError: If the client id or secret is empty.
        """
        if not self.google_client_id:
            raise ConfigurationError("google_client_id is not configured")
        if not self.google_client_secret:
            raise ConfigurationError("google_client_secret is not configured")
