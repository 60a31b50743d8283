"""
Wanderlust Backend - Token Service
====================================

What:  Issues and verifies signed bearer tokens (JWT, HS256 by default).
How:   PyJWT signs `{id, email, iat, exp}` with the server secret; `exp` is
       `iat + JWT_EXPIRES_DAYS` (7 days). Tokens are stateless: there is no
       revocation list.
Who:   AuthService issues tokens; the Request Gate middleware verifies them.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from wanderlust.config import Settings
from wanderlust.exceptions import ConfigurationError, InvalidTokenError
from wanderlust.schemas.auth import TokenClaims


class TokenService:
    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: timedelta = timedelta(days=7)):
        if not secret:
            raise ConfigurationError("JWT_SECRET is not set")
        self._secret = secret
        self._algorithm = algorithm
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_in=timedelta(days=settings.jwt_expires_days),
        )

    def issue(self, claims: TokenClaims, now: Optional[datetime] = None) -> str:
        """Sign `claims` into a token valid for `expires_in` from `now`."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "id": claims.id,
            "email": claims.email,
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            InvalidTokenError: bad signature, expired, malformed, or missing claims.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError(context={"reason": "expired"})
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(context={"reason": str(e)})

        user_id = payload.get("id")
        email = payload.get("email")
        if not user_id or not email:
            raise InvalidTokenError(context={"reason": "missing identity claims"})
        return TokenClaims(id=str(user_id), email=str(email))
