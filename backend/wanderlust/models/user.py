"""
Wanderlust Backend - User SQLAlchemy Model
============================================

What:  ORM model for the `users` table (the credential store).
Who:   Used by AuthService for signup and login.

Account State Machine:
    A user is in exactly one of two states, derived from `password_hash`:

        NO_PASSWORD ──(signup on an existing email)──▶ HAS_PASSWORD

    NO_PASSWORD accounts are legacy records created before passwords existed
    (e.g. by a third-party identity provider). `upgrade_legacy()` is the only
    transition between the states; `create_local()` builds a brand-new
    identity that starts in HAS_PASSWORD. There is no way back.

Password Hashing:
    The model only ever receives finished digests. AuthService hashes a new
    plaintext exactly once, right before handing the digest to
    `create_local()` or `upgrade_legacy()`; re-saving a user whose password
    did not change never touches `password_hash`.
"""

import enum
import uuid
from typing import Optional

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from wanderlust.database import Base

LOCAL_PROVIDER = "local"


class AccountState(str, enum.Enum):
    NO_PASSWORD = "no_password"
    HAS_PASSWORD = "has_password"


class User(Base):
    """A registered identity, unique by email."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Case-sensitive as stored; the unique index is what arbitrates a signup race.
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    # NULL marks a legacy account (state NO_PASSWORD).
    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )

    provider: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=LOCAL_PROVIDER,
    )

    @property
    def state(self) -> AccountState:
        if self.password_hash:
            return AccountState.HAS_PASSWORD
        return AccountState.NO_PASSWORD

    @property
    def is_legacy(self) -> bool:
        return self.state is AccountState.NO_PASSWORD

    @classmethod
    def create_local(
        cls,
        name: str,
        email: str,
        password_hash: str,
    ) -> "User":
        """Build a new local account that starts with a password."""
        return cls(
            name=name,
            email=email,
            password_hash=password_hash,
            provider=LOCAL_PROVIDER,
        )

    def upgrade_legacy(
        self,
        password_hash: str,
        name: Optional[str] = None,
    ) -> None:
        """
        Move a legacy account from NO_PASSWORD to HAS_PASSWORD.

        Raises:
            ValueError: the account already has a password.
        """
        if self.state is not AccountState.NO_PASSWORD:
            raise ValueError(f"User {self.email} already has a password")
        self.password_hash = password_hash
        if name:
            self.name = name
        self.provider = LOCAL_PROVIDER

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', state='{self.state.value}')>"
