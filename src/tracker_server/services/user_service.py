"""Business logic for resolving provider identities to local users."""

from __future__ import annotations

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tracker_server.clients.google_oauth_client import GoogleProfile
from tracker_server.dao.user_dao import UserDAO
from tracker_server.models.user import User


class UserResolutionError(Exception):
    """Raised when the user store cannot look up or create a user."""


def normalize_email(email: str) -> str:
    """Canonical form used as the user key."""
    return email.strip().lower()


def _user_key(profile: GoogleProfile) -> str:
    """The normalised email of a profile.

    Raises:
        UserResolutionError: If the email is blank.
    """
    email = normalize_email(profile.email)
    if not email:
        raise UserResolutionError("Profile has no usable email")
    return email


class UserService:
    """Built once at startup with its DAO pre-wired.

    Each method wraps its DAO calls in a transaction, one unit of work
    per service call. Storage errors surface as UserResolutionError.
    """

    def __init__(self, user_dao: UserDAO) -> None:
        self._dao = user_dao

    async def find_by_email(self, email: str) -> User | None:
        """Look up a user by email.

        Raises:
            UserResolutionError: If the lookup fails.
        """
        try:
            async with self._dao.transaction():
                return await self._dao.find_by_email(normalize_email(email))
        except SQLAlchemyError as error:
            raise UserResolutionError(f"User lookup failed: {error}") from error

    async def create(self, profile: GoogleProfile) -> User:
        """Create the user for a profile, or return the row that won the race.

        Two concurrent first logins for one email both try the INSERT; the
        loser hits the primary-key constraint, rolls back and reads the
        winner's row, so both callers end up with the same user.

        Raises:
            UserResolutionError: If the insert or the follow-up read fails.
        """
        email = _user_key(profile)
        try:
            async with self._dao.transaction():
                try:
                    user = await self._dao.insert_user(
                        email=email,
                        subject=profile.subject,
                        name=profile.name,
                        given_name=profile.given_name,
                        family_name=profile.family_name,
                        picture=profile.picture,
                    )
                    await self._dao.commit()
                except IntegrityError:
                    await self._dao.rollback()
                    logger.debug(f"User {email} already exists, loading it")
                    existing = await self._dao.find_by_email(email)
                    if existing is None:
                        raise UserResolutionError(
                            f"User {email} conflicted on insert but is missing"
                        ) from None
                    return existing
        except SQLAlchemyError as error:
            raise UserResolutionError(f"User creation failed: {error}") from error
        logger.info(f"Created user {email}")
        return user

    async def resolve(self, profile: GoogleProfile) -> User:
        """Find the user for a profile, creating it on first login.

        Returning users get their display fields refreshed from the profile.

        Raises:
            UserResolutionError: If the store fails.
        """
        email = _user_key(profile)
        try:
            async with self._dao.transaction():
                user = await self._dao.find_by_email(email)
                if user is not None:
                    user.subject = profile.subject
                    user.name = profile.name
                    user.given_name = profile.given_name
                    user.family_name = profile.family_name
                    user.picture = profile.picture
                    await self._dao.commit()
                    return user
        except SQLAlchemyError as error:
            raise UserResolutionError(f"User lookup failed: {error}") from error
        return await self.create(profile)
