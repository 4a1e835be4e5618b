"""
Account Service

Registration and login on top of the credential store.

Role bootstrap: the first identity ever registered becomes ``admin``, every
later one ``customer``. The decision and the user insert share one
transaction, and the admin grant additionally claims the single
``role_bootstrap`` row. Two concurrent "first" registrations can both see an
empty table, but only one can insert that row; the other rolls back and is
retried once as a customer.
"""

import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restaurant_api.core.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidRequestError,
    NotFoundError,
)
from restaurant_api.models import RoleBootstrap, User, UserRole
from restaurant_api.services.auth import PasswordHasher, TokenCodec

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class _BootstrapRaceLost(Exception):
    """Another registration claimed the admin bootstrap row first."""


class UserStore:
    """Credential store operations bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def count(self) -> int:
        return await self.session.scalar(select(func.count(User.id))) or 0

    async def create(self, user: User) -> int:
        self.session.add(user)
        await self.session.flush()
        return user.id

    async def bootstrap_claimed(self) -> bool:
        claimed = await self.session.scalar(select(func.count(RoleBootstrap.id)))
        return bool(claimed)

    async def claim_bootstrap(self, email: str) -> None:
        """
        Insert the single admin bootstrap row.

        Raises:
            IntegrityError: If the row already exists
        """
        self.session.add(RoleBootstrap(id=1, email=email))
        await self.session.flush()


class AccountService:
    """
    Registers and authenticates identities.

    Attributes:
        hasher: Password hasher (bcrypt work runs in a worker thread)
        codec: Session token codec
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher,
        codec: TokenCodec,
    ):
        self._session_maker = session_maker
        self.hasher = hasher
        self.codec = codec

    async def register(self, email: str, password: str, name: str) -> tuple[User, str]:
        """
        Create an identity and issue its first session token.

        Raises:
            InvalidRequestError: Missing fields or unusable password
            EmailAlreadyRegisteredError: Email taken
        """
        email = normalize_email(email)
        name = (name or "").strip()
        if not email or not password or not name:
            raise InvalidRequestError("Email, password, and name are required")

        try:
            password_hash = await run_in_threadpool(self.hasher.hash, password)
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from exc

        try:
            user = await self._insert_user(email, password_hash, name, allow_bootstrap=True)
        except _BootstrapRaceLost:
            logger.warning(f"Admin bootstrap already claimed; registering {email} as customer")
            user = await self._insert_user(email, password_hash, name, allow_bootstrap=False)

        logger.info(f"Registered user #{user.id} ({user.role.value})")
        return user, self.codec.issue(user)

    async def _insert_user(
        self,
        email: str,
        password_hash: str,
        name: str,
        allow_bootstrap: bool,
    ) -> User:
        async with self._session_maker() as session:
            async with session.begin():
                store = UserStore(session)
                if await store.get_by_email(email) is not None:
                    raise EmailAlreadyRegisteredError(f"{email} already registered")

                role = UserRole.CUSTOMER
                if allow_bootstrap and not await store.bootstrap_claimed() and await store.count() == 0:
                    try:
                        await store.claim_bootstrap(email)
                    except IntegrityError as exc:
                        raise _BootstrapRaceLost() from exc
                    role = UserRole.ADMIN

                user = User(email=email, password_hash=password_hash, name=name, role=role)
                try:
                    await store.create(user)
                except IntegrityError as exc:
                    raise EmailAlreadyRegisteredError(f"{email} already registered") from exc
            return user

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Check credentials and issue a session token.

        Raises:
            InvalidRequestError: Missing fields
            InvalidCredentialsError: Unknown email or wrong password
            MalformedHashError: Stored digest unreadable
        """
        email = normalize_email(email)
        if not email or not password:
            raise InvalidRequestError("Email and password are required")

        async with self._session_maker() as session:
            user = await UserStore(session).get_by_email(email)

        if user is None:
            logger.warning(f"Failed login attempt: {email}")
            raise InvalidCredentialsError("unknown email")

        if not await run_in_threadpool(self.hasher.verify, password, user.password_hash):
            logger.warning(f"Failed login attempt (invalid password): {email}")
            raise InvalidCredentialsError("password mismatch")

        logger.info(f"Login: user #{user.id}")
        return user, self.codec.issue(user)

    async def get_user(self, user_id: int) -> User:
        async with self._session_maker() as session:
            user = await UserStore(session).get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
