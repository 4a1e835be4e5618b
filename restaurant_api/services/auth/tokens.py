"""
Session Token Codec

Issues and validates HS256-signed JWTs (``header.claims.signature``,
base64url segments) carrying the caller's identity:

    {"userId": 7, "email": "a@x.com", "role": "admin", "iat": ..., "exp": ...}

Validation is stateless and offline: signature, algorithm and expiry are
checked against the secret handed to the constructor, never against the
database. A token therefore stays valid until it expires.

Usage:
    codec = TokenCodec(secret=settings.resolve_jwt_secret())
    token = codec.issue(user)
    claims = codec.validate(token)  # raises a TokenError subclass

Version: 1.0.0
"""

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

import jwt

from restaurant_api.core.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
    UnsupportedAlgorithmError,
)
from restaurant_api.models import User, UserRole

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=4)


@dataclass(frozen=True)
class SessionClaims:
    """
    Verified identity reconstructed from a session token.

    Attributes:
        user_id: Identity primary key
        email: Identity email at issuance
        role: Role at issuance
        issued_at: Epoch seconds
        expires_at: Epoch seconds, always issued_at + TTL
    """
    user_id: int
    email: str
    role: UserRole
    issued_at: int
    expires_at: int

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class TokenCodec:
    """
    Signs and verifies session tokens with one symmetric key.

    Issuance and expiry checks both read ``clock``, so a codec built with a
    fixed clock validates its own tokens at that instant.

    Attributes:
        ttl: Token lifetime, fixed at 4 hours
    """

    ttl = TOKEN_TTL

    def __init__(self, secret: str, clock: Callable[[], float] = time.time):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._clock = clock

    def issue(self, user: User) -> str:
        """Encode ``user``'s identity claims into a signed token."""
        issued_at = int(self._clock())
        payload = {
            "userId": user.id,
            "email": user.email,
            "role": UserRole(user.role).value,
            "iat": issued_at,
            "exp": issued_at + int(self.ttl.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def validate(self, token: str) -> SessionClaims:
        """
        Verify ``token`` and return its claims.

        Raises:
            UnsupportedAlgorithmError: Header names anything but HS256 (incl. "none")
            InvalidSignatureError: Signature does not match header + claims
            TokenExpiredError: clock() >= exp
            MalformedTokenError: Not a JWT, or claims missing / mistyped
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                # exp is checked below against the codec clock
                options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidAlgorithmError as exc:
            raise UnsupportedAlgorithmError(str(exc)) from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignatureError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(str(exc)) from exc

        claims = self._claims_from_payload(payload)
        if self._clock() >= claims.expires_at:
            raise TokenExpiredError(f"Token expired at {claims.expires_at}")
        return claims

    @staticmethod
    def _claims_from_payload(payload: dict[str, Any]) -> SessionClaims:
        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise MalformedTokenError("userId claim missing or not an integer")
        if not isinstance(email, str) or not email:
            raise MalformedTokenError("email claim missing")
        try:
            role = UserRole(payload.get("role"))
        except ValueError as exc:
            raise MalformedTokenError("role claim missing or unknown") from exc

        issued_at, expires_at = payload["iat"], payload["exp"]
        for name, value in (("iat", issued_at), ("exp", expires_at)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise MalformedTokenError(f"{name} claim is not an integer")

        return SessionClaims(
            user_id=user_id,
            email=email,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )
