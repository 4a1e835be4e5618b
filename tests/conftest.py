from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from restaurant_api.core.config import Settings
from restaurant_api.database import init_db
from restaurant_api.main import create_app
from restaurant_api.models import Product, ProductCategory, Review, User, UserRole
from restaurant_api.services.auth import PasswordHasher, SessionClaims, TokenCodec
from tests.helpers import register

TEST_SECRET = "test-secret-0123456789-abcdefghijklmnop"
TEST_ROUNDS = 4


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Development settings against a throwaway SQLite file."""
    return Settings(
        _env_file=None,
        env_mode="development",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=TEST_ROUNDS,
        cors_origins="*",
        enforce_catalog_pricing=False,
    )


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=TEST_ROUNDS)


@pytest.fixture()
def codec() -> TokenCodec:
    return TokenCodec(secret=TEST_SECRET)


@pytest_asyncio.fixture()
async def app(settings):
    # ASGITransport does not run the lifespan, so create the tables here
    application = create_app(settings)
    await init_db(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture()
def session_maker(app):
    return app.state.session_maker


@pytest_asyncio.fixture()
async def products(session_maker) -> list[Product]:
    """Three catalog entries: two eastern (one low on stock), one western."""
    items = [
        Product(
            name="Shawarma Plate",
            price=12.5,
            description="Chicken shawarma with rice",
            category=ProductCategory.EASTERN,
            stock_quantity=20,
            low_stock_threshold=5,
            reviews=[],
        ),
        Product(
            name="Falafel Wrap",
            price=8.0,
            category=ProductCategory.EASTERN,
            stock_quantity=3,
            low_stock_threshold=5,
            reviews=[],
        ),
        Product(
            name="Cheeseburger",
            price=10.0,
            category=ProductCategory.WESTERN,
            image_attribution={"photographer": "Sam", "source": "Unsplash", "url": "https://example.com/p"},
            stock_quantity=50,
            low_stock_threshold=5,
            reviews=[Review(user_name="Sam", rating=5, comment="Great", date="2024-01-01")],
        ),
    ]
    async with session_maker() as session:
        async with session.begin():
            session.add_all(items)
    return items


@pytest_asyncio.fixture()
async def customer(session_maker, hasher) -> User:
    user = User(
        email="carol@example.com",
        password_hash=hasher.hash("carol-pw"),
        name="Carol",
        role=UserRole.CUSTOMER,
    )
    async with session_maker() as session:
        async with session.begin():
            session.add(user)
    return user


@pytest.fixture()
def customer_claims(customer) -> SessionClaims:
    return SessionClaims(
        user_id=customer.id,
        email=customer.email,
        role=UserRole.CUSTOMER,
        issued_at=0,
        expires_at=0,
    )


@pytest_asyncio.fixture()
async def admin_auth(client) -> dict:
    """First account ever registered, hence the admin."""
    body = await register(client, "a@x.com", "pw1", "Admin")
    assert body["user"]["role"] == "admin"
    return body


@pytest_asyncio.fixture()
async def customer_auth(client, admin_auth) -> dict:
    body = await register(client, "b@x.com", "pw2", "Bob")
    assert body["user"]["role"] == "customer"
    return body
