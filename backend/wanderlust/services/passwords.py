"""
Wanderlust Backend - Password Hasher
======================================

What:  One-way salted hashing and verification of user passwords.
How:   argon2id via argon2-cffi. Each digest embeds its own random salt and
       cost parameters, so a digest produced with older settings still
       verifies after the costs are raised.
"""

import logging

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError

from wanderlust.config import Settings

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Thin wrapper that never raises on a bad password or a corrupt digest."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.password_time_cost,
            memory_cost=settings.password_memory_cost,
            parallelism=settings.password_parallelism,
        )

    def hash(self, plaintext: str) -> str:
        return self._hasher.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """True when `plaintext` matches `digest`; False on mismatch or a malformed digest."""
        try:
            return self._hasher.verify(digest, plaintext)
        except VerificationError:
            return False
        except InvalidHashError:
            logger.warning("Stored password digest is not a valid argon2 hash")
            return False
