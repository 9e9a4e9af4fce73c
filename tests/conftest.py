from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import parkboard.models  # noqa: F401
from parkboard.core.dependencies import get_db
from parkboard.core.rate_limit import login_limiter, signup_limiter
from parkboard.core.security import get_password_hash
from parkboard.database import Base
from parkboard.main import app
from parkboard.models.community import Community
from parkboard.models.user import User
from parkboard.utils.constants import UserRole

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_parkboard.db"

HOME_COMMUNITY = "lmr_x7k9p2"
OTHER_COMMUNITY = "srp_abc123"
PASSWORD = "correct-horse-battery"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    signup_limiter.reset()
    login_limiter.reset()
    yield
    signup_limiter.reset()
    login_limiter.reset()


@pytest_asyncio.fixture
async def communities(db_session: AsyncSession) -> list[str]:
    db_session.add_all(
        [
            Community(code=HOME_COMMUNITY, name="Lumiere Residences"),
            Community(code=OTHER_COMMUNITY, name="Serin Park"),
        ]
    )
    await db_session.commit()
    return [HOME_COMMUNITY, OTHER_COMMUNITY]


async def register_resident(
    client: AsyncClient,
    email: str,
    unit_number: str,
    community_code: str = HOME_COMMUNITY,
) -> dict[str, Any]:
    """Register through the API; returns the user id and ready-made auth headers."""
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "community_code": community_code,
            "email": email,
            "password": PASSWORD,
            "name": email.split("@")[0].title(),
            "phone": "+63 917 555 0101",
            "unit_number": unit_number,
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "id": body["user"]["id"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest_asyncio.fixture
async def renter(client: AsyncClient, communities: list[str]) -> dict[str, Any]:
    return await register_resident(client, "renter@example.com", "12A")


@pytest_asyncio.fixture
async def owner(client: AsyncClient, communities: list[str]) -> dict[str, Any]:
    return await register_resident(client, "owner@example.com", "7C")


@pytest_asyncio.fixture
async def outsider(client: AsyncClient, communities: list[str]) -> dict[str, Any]:
    return await register_resident(client, "outsider@example.com", "3B", OTHER_COMMUNITY)


@pytest_asyncio.fixture
async def admin(
    client: AsyncClient, db_session: AsyncSession, communities: list[str]
) -> dict[str, Any]:
    user = User(
        email="admin@example.com",
        hashed_password=get_password_hash(PASSWORD),
        name="Building Admin",
        community_code=HOME_COMMUNITY,
        role=UserRole.ADMIN,
    )
    db_session.add(user)
    await db_session.commit()
    user_id = str(user.id)

    response = await client.post(
        "/api/v1/auth/login",
        data={"username": "admin@example.com", "password": PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {
        "id": user_id,
        "headers": {"Authorization": f"Bearer {response.json()['access_token']}"},
    }


async def create_slot(
    client: AsyncClient, headers: dict[str, str], slot_number: str, price: str | None = "5.00"
) -> str:
    response = await client.post(
        "/api/v1/slots",
        json={"slot_number": slot_number, "slot_type": "covered", "price_per_hour": price},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


@pytest_asyncio.fixture
async def slot_id(client: AsyncClient, owner: dict[str, Any]) -> str:
    return await create_slot(client, owner["headers"], "B1-042")
