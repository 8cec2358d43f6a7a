"""Local user model, keyed by the email the identity provider reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from tracker_server.utils.db import Base


class User(Base):
    """Tracker account. One row per email seen at a successful login."""

    __tablename__ = "users"

    # The primary key doubles as the uniqueness constraint that makes
    # concurrent first logins converge on one row.
    email: Mapped[str] = mapped_column(String(255), primary_key=True)
    subject: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    given_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    family_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    picture: Mapped[str | None] = mapped_column(String(512), nullable=True)
    admin: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_authenticated(self) -> bool:
        """Always True for a stored user."""
        return True

    def to_dict(self) -> dict[str, object]:
        """Public fields for JSON responses."""
        return {
            "authenticated": True,
            "email": self.email,
            "name": self.name,
            "picture": self.picture,
            "admin": bool(self.admin),
        }


@dataclass(frozen=True)
class AnonymousUser:
    """Stand-in for the user on requests without an authenticated session."""

    email: str = ""
    name: str | None = None
    admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        """Always False."""
        return False

    def to_dict(self) -> dict[str, object]:
        """Public fields for JSON responses."""
        return {"authenticated": False}


ANONYMOUS = AnonymousUser()
