"""
Wanderlust Backend - Auth Service (Signup & Login)
====================================================

What:  Orchestrates signup (including the legacy-account upgrade) and login.
How:   Composes the credential store (User model), PasswordHasher and
       TokenService. Route handlers pass in the request's database session.

Signup Decision Table:
    ┌────────────────────────────┬────────────────────────────────────┐
    │ Existing user for email    │ Outcome                            │
    ├────────────────────────────┼────────────────────────────────────┤
    │ none                       │ create local account  → token      │
    │ NO_PASSWORD (legacy)       │ upgrade_legacy()      → token      │
    │ HAS_PASSWORD               │ DuplicateAccountError, no change   │
    └────────────────────────────┴────────────────────────────────────┘

    Signup is never a plain "create or overwrite": re-running it for an email
    that already has a password must fail.

Login:
    unknown email → InvalidCredentialsError
    legacy user   → LegacyAccountNotUpgradedError
    bad password  → InvalidCredentialsError
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from wanderlust.exceptions import (
    DuplicateAccountError,
    InvalidCredentialsError,
    LegacyAccountNotUpgradedError,
    StorageError,
    ValidationFailedError,
)
from wanderlust.models.user import AccountState, User
from wanderlust.schemas.auth import AuthResponse, PublicUser, TokenClaims
from wanderlust.services.passwords import PasswordHasher
from wanderlust.services.tokens import TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Business logic for account creation and authentication.

    Error Handling Strategy:
        Domain failures raise their own exception types. Any SQLAlchemy error
        is wrapped in StorageError, except a unique-index violation on insert
        (two signups racing on one email), which is reported as
        DuplicateAccountError.
    """

    def __init__(self, hasher: PasswordHasher, tokens: TokenService):
        self._hasher = hasher
        self._tokens = tokens

    async def signup(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> AuthResponse:
        logger.info("[AUTH] Signup attempt: %s", email)

        user = await self._find_by_email(db, email)

        if user is None:
            user = await self._create_account(db, name, email, password)
        elif user.state is AccountState.NO_PASSWORD:
            await self._upgrade_legacy_account(db, user, name, password)
        else:
            logger.warning("[AUTH] Signup failed: user already exists: %s", email)
            raise DuplicateAccountError(email)

        logger.info("[AUTH] Signup successful: %s", email)
        return self._authenticated(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResponse:
        logger.info("[AUTH] Login attempt: %s", email)

        user = await self._find_by_email(db, email)
        if user is None:
            logger.warning("[AUTH] Login failed: user not found: %s", email)
            raise InvalidCredentialsError()

        if user.state is AccountState.NO_PASSWORD:
            logger.warning("[AUTH] Login failed: legacy account must sign up to set a password: %s", email)
            raise LegacyAccountNotUpgradedError(email)

        matches = await run_in_threadpool(self._hasher.verify, password, user.password_hash)
        if not matches:
            logger.warning("[AUTH] Login failed: password mismatch: %s", email)
            raise InvalidCredentialsError()

        logger.info("[AUTH] Login successful: %s", email)
        return self._authenticated(user)

    # ── Signup branches ───────────────────────────────────────────────────

    async def _create_account(
        self,
        db: AsyncSession,
        name: Optional[str],
        email: str,
        password: str,
    ) -> User:
        if not name or not name.strip():
            raise ValidationFailedError(["name"])

        logger.info("[AUTH] Creating new user: %s", email)
        digest = await run_in_threadpool(self._hasher.hash, password)
        user = User.create_local(name=name.strip(), email=email, password_hash=digest)
        try:
            db.add(user)
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same email.
            logger.warning("[AUTH] Unique constraint rejected new user %s: %s", email, e.orig)
            raise DuplicateAccountError(email)
        except SQLAlchemyError as e:
            logger.error("[AUTH] Storage error creating user %s: %s", email, str(e))
            raise StorageError(context={"operation": "create_user", "error_type": type(e).__name__})
        return user

    async def _upgrade_legacy_account(
        self,
        db: AsyncSession,
        user: User,
        name: Optional[str],
        password: str,
    ) -> None:
        logger.info("[AUTH] Upgrading legacy user: %s", user.email)
        digest = await run_in_threadpool(self._hasher.hash, password)
        user.upgrade_legacy(password_hash=digest, name=name.strip() if name else None)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("[AUTH] Storage error upgrading user %s: %s", user.email, str(e))
            raise StorageError(context={"operation": "upgrade_user", "error_type": type(e).__name__})

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("[AUTH] Storage error looking up %s: %s", email, str(e))
            raise StorageError(context={"operation": "find_user", "error_type": type(e).__name__})

    def _authenticated(self, user: User) -> AuthResponse:
        claims = TokenClaims(id=str(user.id), email=user.email)
        return AuthResponse(
            token=self._tokens.issue(claims),
            user=PublicUser(id=str(user.id), name=user.name, email=user.email),
        )
