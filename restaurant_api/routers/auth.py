"""
Auth Routes

Route prefix: /api/auth
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from restaurant_api.schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from restaurant_api.services.accounts import AccountService
from restaurant_api.services.auth import SessionClaims, authenticate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def get_account_service(request: Request) -> AccountService:
    state = request.app.state
    return AccountService(state.session_maker, state.password_hasher, state.token_codec)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Register an account",
)
async def register(
    data: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    """
    Create an account and return its first session token.

    The very first account ever registered is an admin; every later one is
    a customer.
    """
    user, token = await accounts.register(data.email, data.password, data.name)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Log in",
)
async def login(
    data: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    user, token = await accounts.login(data.email, data.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
async def me(
    claims: SessionClaims = Depends(authenticate),
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    """Current account, without its password hash."""
    return UserResponse.model_validate(await accounts.get_user(claims.user_id))
