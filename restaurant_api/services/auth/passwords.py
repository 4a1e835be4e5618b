"""
Password Hashing

bcrypt digests are self-describing (``$2b$<cost>$<salt><hash>``), so verify
needs nothing but the stored string. Every hash call draws a fresh salt.

A wrong password is ``False``; an unreadable digest is MalformedHashError.
Callers must keep the two apart: the first is a failed login, the second is
corrupted storage.
"""

import logging

import bcrypt

from restaurant_api.core.exceptions import MalformedHashError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    Salted, deliberately slow one-way hashing.

    Attributes:
        rounds: bcrypt work factor; production runs with 14 or more
    """

    def __init__(self, rounds: int = 14):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a password with a fresh random salt.

        Raises:
            ValueError: If the password is empty or longer than 72 bytes
        """
        secret = password.encode("utf-8")
        if not secret:
            raise ValueError("Password must not be empty")
        if len(secret) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, password: str, digest: str) -> bool:
        """
        Constant-time check of ``password`` against a stored digest.

        Returns:
            bool: True on match, False on a wrong password

        Raises:
            MalformedHashError: If ``digest`` is not a readable bcrypt hash
        """
        secret = password.encode("utf-8")
        if not secret or len(secret) > MAX_PASSWORD_BYTES:
            # Such a password can never have been hashed
            return False

        try:
            stored = digest.encode("ascii")
        except (AttributeError, UnicodeEncodeError) as exc:
            raise MalformedHashError("Stored password digest is not ASCII") from exc

        try:
            return bcrypt.checkpw(secret, stored)
        except ValueError as exc:
            logger.error("Unreadable password digest in credential store")
            raise MalformedHashError(f"Invalid bcrypt digest: {exc}") from exc
