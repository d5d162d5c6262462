"""Credential model owned by the identity provider."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from mallconsole.models.base import Base, StringIdMixin, TimestampMixin


class Credential(StringIdMixin, TimestampMixin, Base):
    """Email/password account known to the identity provider.

    ``id`` is the identity uid; the authorization role is not stored here but
    in the ``users`` side record of the document store.
    """

    __tablename__ = "credentials"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True,
        comment="Account email address (unique, lower-cased)"
    )
    hashed_password: Mapped[str] = mapped_column(
        String(256), nullable=False,
        comment="passlib hashed password"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
        comment="Whether the account may sign in"
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
        comment="Last sign-in timestamp"
    )

    def __repr__(self) -> str:
        return f"<Credential(id={self.id}, email='{self.email}')>"
