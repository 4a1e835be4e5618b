"""
Auth Gate

Two composable stages applied per request:

    Authenticate:  no header        -> 401
                   not "Bearer <t>" -> 401
                   invalid token    -> 401
                   valid token      -> SessionClaims
    Authorize:     no claims        -> 403
                   wrong role       -> 403
                   matching role    -> SessionClaims

Both stages are pure functions of (header, claims). The FastAPI dependencies
below wrap them so every handler receives the verified SessionClaims as an
explicit parameter:

    @router.get("/dashboard")
    async def dashboard(claims: SessionClaims = Depends(require_admin)): ...

``require_role`` depends on ``authenticate``, so authorization never runs
without a successful authentication before it.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, Request

from restaurant_api.core.exceptions import (
    AuthorizationError,
    MalformedAuthHeaderError,
    MissingCredentialsError,
    TokenError,
)
from restaurant_api.models import UserRole
from restaurant_api.services.auth.tokens import SessionClaims, TokenCodec

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
BEARER_SCHEME = "Bearer"


# =============================================================================
# PURE STAGES
# =============================================================================

def authenticate_header(header: Optional[str], codec: TokenCodec) -> SessionClaims:
    """
    Stage Authenticate: turn an Authorization header into verified claims.

    The header must hold exactly two whitespace-separated parts and the
    scheme must be the literal ``Bearer``.

    Raises:
        MissingCredentialsError: No header
        MalformedAuthHeaderError: Wrong shape or scheme
        TokenError: Token rejected by the codec
    """
    if not header:
        raise MissingCredentialsError("Authorization header required")

    parts = header.split()
    if len(parts) != 2 or parts[0] != BEARER_SCHEME:
        raise MalformedAuthHeaderError("Invalid authorization header")

    try:
        return codec.validate(parts[1])
    except TokenError as exc:
        logger.info(f"Rejected session token ({type(exc).__name__}): {exc.reason}")
        raise


def authorize(claims: Optional[SessionClaims], required_role: UserRole) -> SessionClaims:
    """
    Stage Authorize: require ``required_role`` on already verified claims.

    Raises:
        AuthorizationError: No claims, or a different role
    """
    if claims is None:
        raise AuthorizationError("Authorization attempted without authentication")
    if claims.role != required_role:
        logger.info(
            f"User {claims.user_id} ({claims.role.value}) denied: "
            f"{required_role.value} role required"
        )
        raise AuthorizationError(f"{required_role.value} role required")
    return claims


# =============================================================================
# FASTAPI DEPENDENCIES
# =============================================================================

def get_token_codec(request: Request) -> TokenCodec:
    """Dependency returning the application's token codec."""
    return request.app.state.token_codec


async def authenticate(
    authorization: Optional[str] = Header(None, alias=AUTH_HEADER),
    codec: TokenCodec = Depends(get_token_codec),
) -> SessionClaims:
    """Dependency for routes that need any signed-in user."""
    return authenticate_header(authorization, codec)


def require_role(role: UserRole) -> Callable[..., SessionClaims]:
    """Build a dependency that authenticates, then requires ``role``."""

    async def _dependency(claims: SessionClaims = Depends(authenticate)) -> SessionClaims:
        return authorize(claims, role)

    return _dependency


require_admin = require_role(UserRole.ADMIN)
