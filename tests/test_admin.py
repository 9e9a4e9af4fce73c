import pytest
from httpx import AsyncClient

from tests.conftest import create_slot


@pytest.mark.asyncio
async def test_admin_routes_require_admin(client: AsyncClient, renter: dict):
    response = await client.get("/api/v1/admin/users", headers=renter["headers"])
    assert response.status_code == 403
    assert response.json() == {"error": "Admin access required"}


@pytest.mark.asyncio
async def test_create_and_list_communities(client: AsyncClient, admin: dict):
    response = await client.post(
        "/api/v1/admin/communities",
        json={"code": "new_tower", "name": "New Tower"},
        headers=admin["headers"],
    )
    assert response.status_code == 201
    assert response.json()["data"]["status"] == "active"

    duplicate = await client.post(
        "/api/v1/admin/communities",
        json={"code": "new_tower", "name": "Again"},
        headers=admin["headers"],
    )
    assert duplicate.status_code == 409

    listing = await client.get("/api/v1/admin/communities", headers=admin["headers"])
    codes = [c["code"] for c in listing.json()["data"]]
    assert codes == ["lmr_x7k9p2", "new_tower", "srp_abc123"]


@pytest.mark.asyncio
async def test_disable_community(client: AsyncClient, admin: dict):
    response = await client.patch(
        "/api/v1/admin/communities/srp_abc123",
        json={"status": "disabled"},
        headers=admin["headers"],
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "disabled"

    missing = await client.patch(
        "/api/v1/admin/communities/nowhere",
        json={"name": "Nowhere"},
        headers=admin["headers"],
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_invalid_community_code(client: AsyncClient, admin: dict):
    response = await client.post(
        "/api/v1/admin/communities",
        json={"code": "Bad Code!", "name": "Bad"},
        headers=admin["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("code: ")


@pytest.mark.asyncio
async def test_list_users_in_own_community(
    client: AsyncClient, admin: dict, renter: dict, outsider: dict
):
    response = await client.get("/api/v1/admin/users", headers=admin["headers"])
    assert response.status_code == 200
    ids = {u["id"] for u in response.json()["data"]}
    assert renter["id"] in ids
    assert outsider["id"] not in ids

    admins = await client.get(
        "/api/v1/admin/users", params={"role": "admin"}, headers=admin["headers"]
    )
    assert [u["id"] for u in admins.json()["data"]] == [admin["id"]]


@pytest.mark.asyncio
async def test_cannot_manage_foreign_user(client: AsyncClient, admin: dict, outsider: dict):
    response = await client.patch(
        f"/api/v1/admin/users/{outsider['id']}",
        json={"role": "admin"},
        headers=admin["headers"],
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_promote_user(client: AsyncClient, admin: dict, renter: dict):
    response = await client.patch(
        f"/api/v1/admin/users/{renter['id']}", json={"role": "admin"}, headers=admin["headers"]
    )
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"


@pytest.mark.asyncio
async def test_admin_slot_status(client: AsyncClient, admin: dict, owner: dict, slot_id: str):
    response = await client.patch(
        f"/api/v1/admin/slots/{slot_id}", json={"status": "disabled"}, headers=admin["headers"]
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "disabled"

    # Residents only see active slots; admins see every status.
    resident_view = await client.get("/api/v1/slots", headers=owner["headers"])
    assert resident_view.json()["total"] == 0

    admin_view = await client.get("/api/v1/admin/slots", headers=admin["headers"])
    assert admin_view.json()["total"] == 1

    disabled = await client.get(
        "/api/v1/admin/slots", params={"status": "disabled"}, headers=admin["headers"]
    )
    assert disabled.json()["data"][0]["id"] == slot_id


@pytest.mark.asyncio
async def test_admin_cannot_touch_foreign_slot(client: AsyncClient, admin: dict, outsider: dict):
    foreign_slot = await create_slot(client, outsider["headers"], "P2-001")
    response = await client.patch(
        f"/api/v1/admin/slots/{foreign_slot}",
        json={"status": "disabled"},
        headers=admin["headers"],
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_booking_transitions(
    client: AsyncClient, admin: dict, renter: dict, slot_id: str
):
    created = await client.post(
        "/api/v1/bookings",
        json={
            "slot_id": slot_id,
            "start_time": "2026-06-15T10:00:00Z",
            "end_time": "2026-06-15T12:00:00Z",
        },
        headers=renter["headers"],
    )
    booking_id = created.json()["data"]["id"]
    url = f"/api/v1/admin/bookings/{booking_id}"

    skipped = await client.patch(url, json={"status": "completed"}, headers=admin["headers"])
    assert skipped.status_code == 400
    assert skipped.json() == {"error": "Cannot change booking from pending to completed"}

    confirmed = await client.patch(url, json={"status": "confirmed"}, headers=admin["headers"])
    assert confirmed.json()["data"]["status"] == "confirmed"

    listing = await client.get(
        "/api/v1/admin/bookings", params={"status": "confirmed"}, headers=admin["headers"]
    )
    assert listing.json()["total"] == 1

    invalid = await client.patch(url, json={"status": "archived"}, headers=admin["headers"])
    assert invalid.status_code == 400
    assert invalid.json()["error"].startswith("status: ")


@pytest.mark.asyncio
async def test_admin_cannot_delete_slot_with_active_booking(
    client: AsyncClient, admin: dict, renter: dict, slot_id: str
):
    created = await client.post(
        "/api/v1/bookings",
        json={
            "slot_id": slot_id,
            "start_time": "2026-06-15T10:00:00Z",
            "end_time": "2026-06-15T12:00:00Z",
        },
        headers=renter["headers"],
    )
    assert created.status_code == 201
    url = f"/api/v1/admin/slots/{slot_id}"

    blocked = await client.patch(url, json={"status": "deleted"}, headers=admin["headers"])
    assert blocked.status_code == 409
    assert blocked.json() == {"error": "Cannot delete slot with active bookings"}

    await client.patch(
        f"/api/v1/bookings/{created.json()['data']['id']}",
        json={"status": "cancelled"},
        headers=renter["headers"],
    )
    allowed = await client.patch(url, json={"status": "deleted"}, headers=admin["headers"])
    assert allowed.status_code == 200
    assert allowed.json()["data"]["status"] == "deleted"
