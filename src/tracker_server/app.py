"""Litestar application factory and CLI entry point."""

from __future__ import annotations

import argparse
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from litestar import Litestar, Request
from litestar.datastructures import State
from litestar.di import Provide
from loguru import logger

from tracker_server.clients.google_oauth_client import GoogleOAuthClient
from tracker_server.config import ConfigLoader, Settings
from tracker_server.controllers.auth import AuthController
from tracker_server.dao.user_dao import UserDAO
from tracker_server.models.user import AnonymousUser, User
from tracker_server.resources.auth import AuthResource
from tracker_server.services.user_service import UserService
from tracker_server.utils.crypto import Crypto
from tracker_server.utils.db import Database
from tracker_server.utils.session import SessionStore


class AppFactory:
    """Builds and configures the Litestar application. All methods are static."""

    @staticmethod
    def _build(settings: Settings) -> State:
        """Construct the full object graph once.

        database → user_dao → user_service ─┐
        oauth_client ───────────────────────┼→ AuthResource
        session_store ──────────────────────┘

        Raises:
            ConfigurationError: If the Google client credentials are missing.
        """
        settings.require_oauth_credentials()
        secret_key = settings.secret_key
        if not secret_key:
            logger.warning(
                "No secret_key configured; using a per-process key, "
                "sessions will not survive a restart",
            )
            secret_key = Crypto.generate_signing_key()

        database = Database(settings.database_url)
        user_service = UserService(UserDAO(database.pool))
        oauth_client = GoogleOAuthClient(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            base_url=settings.base_url,
            auth_url=settings.google_auth_url,
            token_url=settings.google_token_url,
            userinfo_url=settings.google_userinfo_url,
            timeout=settings.oauth_timeout_seconds,
        )
        session_store = SessionStore(
            secret_key=secret_key,
            cookie_name=settings.session_cookie_name,
            default_max_age=settings.session_max_age,
            secure=settings.session_cookie_secure,
        )
        auth_resource = AuthResource(
            user_service=user_service,
            oauth_client=oauth_client,
            session_store=session_store,
            base_url=settings.base_url,
            landing_path=settings.landing_path,
            session_max_age=settings.session_max_age,
            require_verified_email=settings.require_verified_email,
        )
        return State({"database": database, "auth": auth_resource})

    @staticmethod
    @asynccontextmanager
    async def _lifespan(app: Litestar) -> AsyncIterator[None]:
        """Create tables on startup, dispose engine on shutdown."""
        database: Database = app.state.database
        await database.create_tables()
        yield
        await database.close()

    @staticmethod
    async def provide_user(
        request: Request[Any, Any, State],
    ) -> User | AnonymousUser:
        """Litestar dependency: the session's user, or the anonymous user."""
        auth_resource: AuthResource = request.app.state.auth
        return await auth_resource.current_user(auth_resource.load_session(request))

    @staticmethod
    def provide_auth(state: State) -> AuthResource:
        """Provide the pre-built AuthResource from app state."""
        auth_resource: AuthResource = state.auth
        return auth_resource

    @staticmethod
    def create_app(settings: Settings | None = None) -> Litestar:
        """Create and configure the Litestar application.

        Raises:
            ConfigurationError: If required settings are missing.
        """
        if settings is None:
            settings = ConfigLoader.load_settings()
        return Litestar(
            route_handlers=[AuthController],
            state=AppFactory._build(settings),
            lifespan=[AppFactory._lifespan],
            dependencies={
                "user": Provide(AppFactory.provide_user),
                "auth": Provide(AppFactory.provide_auth, sync_to_thread=False),
            },
        )


# Public alias so conftest / uvicorn can call create_app() without knowing AppFactory.
create_app = AppFactory.create_app


class CLI:
    """Command-line interface for tracker-server."""

    @staticmethod
    def _build_parser() -> argparse.ArgumentParser:
        """Build the CLI argument parser."""
        parser = argparse.ArgumentParser(
            prog="tracker-server", description="Tracker Server CLI",
        )
        subparsers = parser.add_subparsers(dest="command")

        run_parser = subparsers.add_parser("run", help="Start the server")
        run_parser.add_argument("--host", default="127.0.0.1")
        run_parser.add_argument("--port", type=int, default=8080)
        run_parser.add_argument("--reload", action="store_true", help="Auto-reload on file changes")
        run_parser.add_argument("--log-level", default=None, help="Override settings.log_level")

        return parser

    @staticmethod
    def configure_logging(level: str) -> None:
        """Route loguru output to a single stderr sink at the given level."""
        logger.remove()
        logger.add(sys.stderr, level=level.upper())

    @staticmethod
    def main(argv: list[str] | None = None) -> None:
        """CLI entry point. Catches all exceptions and exits cleanly."""
        parser = CLI._build_parser()
        args = parser.parse_args(argv)

        if args.command is None:
            parser.print_help()
            sys.exit(1)

        try:
            if args.command == "run":
                import uvicorn

                level = args.log_level or ConfigLoader.load_settings().log_level
                CLI.configure_logging(level)
                uvicorn.run(
                    "tracker_server.app:create_app",
                    factory=True,
                    host=args.host,
                    port=args.port,
                    reload=args.reload,
                    log_level=level.lower(),
                )
        except KeyboardInterrupt:
            pass
        except Exception as error:
            logger.error(f"Error: {error}")
            sys.exit(1)


if __name__ == "__main__":
    CLI.main()
