"""Manager provisioning and user profile access."""

from httpx import AsyncClient
from sqlalchemy import select

from rentdesk.infrastructure.database import models
from rentdesk.infrastructure.database.session import AsyncSessionLocal

NEW_MANAGER = {"email": "new.manager@example.com", "password": "long-enough-pw", "name": "Max"}


async def _identity_emails():
    async with AsyncSessionLocal() as session:
        return list((await session.execute(select(models.AuthIdentity.email))).scalars().all())


async def test_owner_provisions_manager_in_own_company(async_client: AsyncClient, seed, headers_for):
    owner = await seed.user("owner")
    await seed.company(7, owner=owner)
    r = await async_client.post("/managers", json=NEW_MANAGER, headers=headers_for(owner))
    assert r.status_code == 201
    manager = r.json()["data"]
    assert manager["company_id"] == 7

    login = await async_client.post(
        "/auth/login", json={"email": NEW_MANAGER["email"], "password": NEW_MANAGER["password"]}
    )
    assert login.status_code == 200
    token = login.json()["data"]["access_token"]
    me = await async_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["scope"] == {"type": "company", "company_id": 7}

    logs = await seed.audit_logs(entity_type="manager")
    assert len(logs) == 1
    assert logs[0].user_id == owner.id


async def test_owner_cannot_provision_into_other_company(async_client: AsyncClient, seed, headers_for):
    owner = await seed.user("owner")
    await seed.company(7, owner=owner)
    await seed.company(9)
    r = await async_client.post("/managers", json={**NEW_MANAGER, "company_id": 9}, headers=headers_for(owner))
    assert r.status_code == 403
    assert NEW_MANAGER["email"] not in await _identity_emails()


async def test_manager_cannot_provision_managers(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    r = await async_client.post("/managers", json=NEW_MANAGER, headers=headers_for(manager))
    assert r.status_code == 403


async def test_failed_profile_step_removes_identity(async_client: AsyncClient, seed, headers_for):
    owner = await seed.user("owner")
    await seed.company(7, owner=owner)
    # profile row exists without credentials, so the second step hits the unique email
    await seed.add(models.User(id="orphan-profile", email=NEW_MANAGER["email"], role="client"))
    r = await async_client.post("/managers", json=NEW_MANAGER, headers=headers_for(owner))
    assert r.status_code == 409
    assert NEW_MANAGER["email"] not in await _identity_emails()
    assert await seed.audit_logs(entity_type="manager") == []


async def test_admin_must_name_company(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    r = await async_client.post("/managers", json=NEW_MANAGER, headers=headers_for(admin))
    assert r.status_code == 400
    r = await async_client.post("/managers", json={**NEW_MANAGER, "company_id": 55}, headers=headers_for(admin))
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "company_id"


async def test_user_reads_and_updates_own_profile(async_client: AsyncClient, seed, headers_for):
    user = await seed.user("client")
    other = await seed.user("client")
    r = await async_client.get(f"/users/{user.id}", headers=headers_for(user))
    assert r.status_code == 200
    r = await async_client.put(f"/users/{user.id}", json={"city": "Tbilisi"}, headers=headers_for(user))
    assert r.status_code == 200
    assert r.json()["data"]["city"] == "Tbilisi"
    r = await async_client.get(f"/users/{other.id}", headers=headers_for(user))
    assert r.status_code == 403


async def test_user_list_is_admin_only(async_client: AsyncClient, seed, headers_for):
    owner = await seed.user("owner")
    await seed.company(7, owner=owner)
    admin = await seed.user("admin")
    r = await async_client.get("/users", headers=headers_for(owner))
    assert r.status_code == 403
    r = await async_client.get("/users", headers=headers_for(admin))
    assert r.json()["totalCount"] == 2
