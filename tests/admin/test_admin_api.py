"""Admin authentication, user inspection and bans."""

import pytest
import pytest_asyncio
from argon2 import PasswordHasher
from httpx import AsyncClient
from sqlalchemy import select

from conquest.auth.password import hash_password, verify_password
from conquest.db.models import AdminUser

NOW = 1_700_000_000
ADMIN_ID = 9_000
ADMIN_PASSWORD = "correct horse battery staple"
VIEWER_ID = "viewer-0001"


@pytest_asyncio.fixture
async def admin(db_session) -> None:
    db_session.add(AdminUser(
        id=ADMIN_ID,
        password=hash_password(ADMIN_PASSWORD),
        last_activated_at=NOW,
        created_at=NOW,
        updated_at=NOW,
    ))
    await db_session.commit()


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient, make_headers, admin) -> dict:
    response = await client.post(
        "/admin/login",
        json={"userId": ADMIN_ID, "password": ADMIN_PASSWORD},
        headers=make_headers(master_version=None),
    )
    assert response.status_code == 200, response.text
    return make_headers(response.json()["session"]["sessionId"], master_version=None)


@pytest.mark.asyncio
async def test_login(client: AsyncClient, make_headers, admin) -> None:
    response = await client.post(
        "/admin/login",
        json={"userId": ADMIN_ID, "password": ADMIN_PASSWORD},
        headers=make_headers(master_version=None),
    )

    assert response.status_code == 200
    session = response.json()["session"]
    assert session["userId"] == ADMIN_ID
    assert session["expiredAt"] == NOW + 86_400


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, make_headers, admin) -> None:
    response = await client.post(
        "/admin/login",
        json={"userId": ADMIN_ID, "password": "nope"},
        headers=make_headers(master_version=None),
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_admin(client: AsyncClient, make_headers) -> None:
    response = await client.post(
        "/admin/login",
        json={"userId": ADMIN_ID, "password": ADMIN_PASSWORD},
        headers=make_headers(master_version=None),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_user_dump(client: AsyncClient, admin_headers, registered_user) -> None:
    response = await client.get(f"/admin/user/{registered_user['user_id']}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == registered_user["user_id"]
    assert len(data["userDevices"]) == 1
    assert len(data["userCards"]) == 3
    assert len(data["userDecks"]) == 1
    assert data["userItems"] == []
    assert len(data["userLoginBonuses"]) == 1
    assert len(data["userPresents"]) == 1
    assert [h["presentAllId"] for h in data["userPresentAllReceivedHistory"]] == [1]


@pytest.mark.asyncio
async def test_requires_admin_session(client: AsyncClient, make_headers, registered_user) -> None:
    response = await client.get(
        f"/admin/user/{registered_user['user_id']}",
        headers=make_headers(registered_user["session_id"], master_version=None),
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_ban_blocks_gameplay_and_login(
    client: AsyncClient, make_headers, admin_headers, registered_user
) -> None:
    user_id = registered_user["user_id"]

    banned = await client.post(f"/admin/user/{user_id}/ban", headers=admin_headers)
    again = await client.post(f"/admin/user/{user_id}/ban", headers=admin_headers)
    assert banned.status_code == 200
    assert banned.json()["user"]["id"] == user_id
    assert again.status_code == 200

    home = await client.get(f"/user/{user_id}/home", headers=make_headers(registered_user["session_id"]))
    login = await client.post("/login", json={"viewerId": VIEWER_ID, "userId": user_id}, headers=make_headers())
    assert home.status_code == 403
    assert login.status_code == 403


@pytest.mark.asyncio
async def test_ban_unknown_user(client: AsyncClient, admin_headers) -> None:
    response = await client.post("/admin/user/1000000000/ban", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, admin_headers, registered_user) -> None:
    response = await client.delete("/admin/logout", headers=admin_headers)
    assert response.status_code == 204

    after = await client.get(f"/admin/user/{registered_user['user_id']}", headers=admin_headers)
    assert after.status_code == 401


@pytest.mark.asyncio
async def test_login_upgrades_stale_hash(client: AsyncClient, make_headers, db_session) -> None:
    stale = PasswordHasher(time_cost=1, memory_cost=8192).hash(ADMIN_PASSWORD)
    db_session.add(AdminUser(id=ADMIN_ID, password=stale, last_activated_at=NOW, created_at=NOW, updated_at=NOW))
    await db_session.commit()

    response = await client.post(
        "/admin/login",
        json={"userId": ADMIN_ID, "password": ADMIN_PASSWORD},
        headers=make_headers(master_version=None),
    )
    assert response.status_code == 200

    stored = (await db_session.execute(select(AdminUser.password).where(AdminUser.id == ADMIN_ID))).scalar_one()
    assert stored != stale
    assert verify_password(ADMIN_PASSWORD, stored)
