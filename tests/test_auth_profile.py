import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from parkboard.models.community import Community
from parkboard.utils.constants import CommunityStatus
from tests.conftest import PASSWORD, register_resident

REGISTRATION = {
    "community_code": "lmr_x7k9p2",
    "email": "resident@example.com",
    "password": PASSWORD,
    "name": "Resident",
    "phone": "+63 917 555 0199",
    "unit_number": "21D",
}


@pytest.mark.asyncio
async def test_register_returns_user_and_tokens(client: AsyncClient, communities: list[str]):
    response = await client.post("/api/v1/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "resident@example.com"
    assert data["user"]["community_code"] == "lmr_x7k9p2"
    assert data["user"]["role"] == "resident"
    assert data["access_token"]
    assert data["refresh_token"]
    assert "hashed_password" not in data["user"]


@pytest.mark.asyncio
async def test_register_unknown_community(client: AsyncClient, communities: list[str]):
    response = await client.post(
        "/api/v1/auth/register", json={**REGISTRATION, "community_code": "nope_000"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid or inactive community code"}


@pytest.mark.asyncio
async def test_register_disabled_community(
    client: AsyncClient, db_session: AsyncSession, communities: list[str]
):
    db_session.add(
        Community(code="old_tower", name="Old Tower", status=CommunityStatus.DISABLED)
    )
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/register", json={**REGISTRATION, "community_code": "old_tower"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient, communities: list[str]):
    response = await client.post(
        "/api/v1/auth/register", json={**REGISTRATION, "password": "short"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Password must be at least 12 characters long"}


@pytest.mark.asyncio
async def test_register_duplicates(client: AsyncClient, communities: list[str]):
    await client.post("/api/v1/auth/register", json=REGISTRATION)

    same_email = await client.post(
        "/api/v1/auth/register", json={**REGISTRATION, "unit_number": "22D"}
    )
    assert same_email.status_code == 409
    assert same_email.json() == {"error": "Email already registered"}

    same_unit = await client.post(
        "/api/v1/auth/register", json={**REGISTRATION, "email": "other@example.com"}
    )
    assert same_unit.status_code == 409
    assert same_unit.json() == {"error": "Unit already registered in this community"}


@pytest.mark.asyncio
async def test_login_refresh_and_me(client: AsyncClient, renter: dict):
    login = await client.post(
        "/api/v1/auth/login",
        data={"username": "renter@example.com", "password": PASSWORD},
    )
    assert login.status_code == 200
    tokens = login.json()
    assert tokens["token_type"] == "bearer"

    refreshed = await client.post(
        "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
    )
    assert refreshed.status_code == 200

    me = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {refreshed.json()['access_token']}"},
    )
    assert me.status_code == 200
    assert me.json()["id"] == renter["id"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, renter: dict):
    response = await client.post(
        "/api/v1/auth/login",
        data={"username": "renter@example.com", "password": "not-the-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_access_token_is_not_a_refresh_token(client: AsyncClient, renter: dict):
    access_token = renter["headers"]["Authorization"].removeprefix("Bearer ")
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token(client: AsyncClient, communities: list[str]):
    response = await client.get("/api/v1/profile", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_profile(client: AsyncClient, renter: dict):
    response = await client.get("/api/v1/profile", headers=renter["headers"])
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["unit_number"] == "12A"
    assert data["community_code"] == "lmr_x7k9p2"


@pytest.mark.asyncio
async def test_update_profile_name_and_phone(client: AsyncClient, renter: dict):
    response = await client.patch(
        "/api/v1/profile",
        json={"name": "Renamed Renter", "phone": "(02) 8555 1234"},
        headers=renter["headers"],
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Renamed Renter"
    assert data["phone"] == "(02) 8555 1234"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [("email", "x@example.com"), ("unit_number", "99Z"), ("community_code", "srp_abc123")],
)
async def test_update_profile_rejects_protected_fields(
    client: AsyncClient, renter: dict, field: str, value: str
):
    response = await client.patch("/api/v1/profile", json={field: value}, headers=renter["headers"])
    assert response.status_code == 400
    assert response.json() == {"error": f"{field}: Extra inputs are not permitted"}


@pytest.mark.asyncio
async def test_update_profile_rejects_null(client: AsyncClient, renter: dict):
    response = await client.patch("/api/v1/profile", json={"name": None}, headers=renter["headers"])
    assert response.status_code == 400
    assert response.json() == {"error": "Profile fields cannot be null"}


@pytest.mark.asyncio
async def test_deactivated_user_is_locked_out(
    client: AsyncClient, admin: dict, communities: list[str]
):
    resident = await register_resident(client, "leaving@example.com", "5E")
    response = await client.patch(
        f"/api/v1/admin/users/{resident['id']}",
        json={"is_active": False},
        headers=admin["headers"],
    )
    assert response.status_code == 200

    response = await client.get("/api/v1/profile", headers=resident["headers"])
    assert response.status_code == 403
    assert response.json() == {"error": "Inactive user"}
