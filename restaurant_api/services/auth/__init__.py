"""
Authentication Services

    - passwords: bcrypt hashing and verification
    - tokens: signed, expiring session tokens (PyJWT, HS256)
    - gate: authenticate / authorize stages and their FastAPI dependencies

Usage:
    from restaurant_api.services.auth import require_admin, SessionClaims

    @router.get("/dashboard")
    async def dashboard(claims: SessionClaims = Depends(require_admin)):
        ...
"""

from restaurant_api.services.auth.passwords import PasswordHasher
from restaurant_api.services.auth.tokens import SessionClaims, TokenCodec
from restaurant_api.services.auth.gate import (
    authenticate,
    authenticate_header,
    authorize,
    get_token_codec,
    require_admin,
    require_role,
)

__all__ = [
    "PasswordHasher",
    "SessionClaims",
    "TokenCodec",
    "authenticate",
    "authenticate_header",
    "authorize",
    "get_token_codec",
    "require_admin",
    "require_role",
]
