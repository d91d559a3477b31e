"""Audited CRUD through the HTTP surface: tenant boundaries, impersonation, envelopes."""

import json
from datetime import date

from httpx import AsyncClient

from rentdesk.infrastructure.database import models


async def test_cross_company_update_is_forbidden_and_not_audited(
    async_client: AsyncClient, seed, headers_for
):
    await seed.company(7)
    await seed.company(9)
    manager = await seed.manager(7)
    car = await seed.car(9)
    r = await async_client.put(f"/cars/{car.id}", json={"color": "red"}, headers=headers_for(manager))
    assert r.status_code == 403
    assert "error" in r.json()
    assert (await seed.get(models.CompanyCar, car.id)).color is None
    assert await seed.audit_logs() == []


async def test_same_company_update_is_audited(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    car = await seed.car(7)
    r = await async_client.put(f"/cars/{car.id}", json={"color": "red"}, headers=headers_for(manager))
    assert r.status_code == 200
    assert r.json()["data"]["color"] == "red"
    logs = await seed.audit_logs(entity_type="company_car")
    assert len(logs) == 1
    assert logs[0].action == "update"
    assert logs[0].company_id == 7
    assert logs[0].role == "manager"
    assert logs[0].before_state["color"] is None
    assert logs[0].after_state["color"] == "red"


async def test_admin_impersonation_creates_inside_company(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    await seed.company(12)
    r = await async_client.post(
        "/clients?admin_mode=true&company_id=12",
        json={"name": "Ivy", "surname": "Ng", "phone": "+4400"},
        headers=headers_for(admin),
    )
    assert r.status_code == 201
    client = r.json()["data"]
    assert client["company_id"] == 12
    logs = await seed.audit_logs(entity_type="client")
    assert len(logs) == 1
    assert logs[0].company_id == 12
    assert logs[0].role == "admin"
    assert logs[0].user_id == admin.id


async def test_impersonating_admin_cannot_escape_company(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    await seed.company(12)
    await seed.company(13)
    r = await async_client.post(
        "/clients?admin_mode=true&company_id=12",
        json={"company_id": 13, "name": "Ivy", "surname": "Ng", "phone": "+4400"},
        headers=headers_for(admin),
    )
    assert r.status_code == 403


async def test_admin_mode_ignored_for_non_admin(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    await seed.company(12)
    manager = await seed.manager(7)
    r = await async_client.post(
        "/clients?admin_mode=true&company_id=12",
        json={"name": "Ivy", "surname": "Ng", "phone": "+4400"},
        headers=headers_for(manager),
    )
    assert r.status_code == 201
    assert r.json()["data"]["company_id"] == 7


async def test_system_admin_must_name_company(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    r = await async_client.post(
        "/clients", json={"name": "Ivy", "surname": "Ng", "phone": "+4400"}, headers=headers_for(admin)
    )
    assert r.status_code == 400
    assert r.json()["details"] == [{"field": "company_id", "message": "company_id is required"}]


async def test_delete_twice_is_404_with_single_audit(async_client: AsyncClient, seed, headers_for):
    owner = await seed.user("owner")
    await seed.company(7, owner=owner)
    client = await seed.client(7)
    first = await async_client.delete(f"/clients/{client.id}", headers=headers_for(owner))
    assert first.status_code == 200
    assert first.json()["data"] == {"success": True, "id": client.id}
    second = await async_client.delete(f"/clients/{client.id}", headers=headers_for(owner))
    assert second.status_code == 404
    logs = await seed.audit_logs(action="delete")
    assert len(logs) == 1
    assert logs[0].after_state is None
    assert logs[0].before_state["name"] == "Ann"


async def test_list_is_bounded_to_company(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    await seed.company(9)
    manager = await seed.manager(7)
    await seed.car(7, plate="OWN 1")
    await seed.car(9, plate="OTHER 1")
    r = await async_client.get("/cars", headers=headers_for(manager))
    assert r.status_code == 200
    body = r.json()
    assert body["totalCount"] == 1
    assert [car["license_plate"] for car in body["data"]] == ["OWN 1"]


async def test_list_filters_and_paging(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    await seed.company(7)
    await seed.car(7, plate="AAA 1")
    await seed.car(7, plate="BBB 2", status="maintenance")
    await seed.car(7, plate="AAA 3")
    filters = json.dumps({"q": "aaa"})
    r = await async_client.get(
        "/cars",
        params={"filters": filters, "sortBy": "license_plate", "sortOrder": "asc", "pageSize": 1, "page": 2},
        headers=headers_for(admin),
    )
    assert r.status_code == 200
    assert r.json()["totalCount"] == 2
    assert [c["license_plate"] for c in r.json()["data"]] == ["AAA 3"]

    r = await async_client.get(
        "/cars", params={"filters": json.dumps({"status": "maintenance"})}, headers=headers_for(admin)
    )
    assert r.json()["totalCount"] == 1


async def test_unknown_filter_field_is_400(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    r = await async_client.get(
        "/cars", params={"filters": json.dumps({"nope": 1})}, headers=headers_for(admin)
    )
    assert r.status_code == 400
    r = await async_client.get("/cars", params={"filters": "[1]"}, headers=headers_for(admin))
    assert r.status_code == 400


async def test_duplicate_plate_is_conflict(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    car = await seed.car(7, plate="DUP 1")
    r = await async_client.post(
        "/cars",
        json={"car_template_id": car.car_template_id, "license_plate": "dup  1", "price_per_day": 30},
        headers=headers_for(manager),
    )
    assert r.status_code == 409
    assert r.json()["error"] == "A car with this license plate already exists."
    assert await seed.audit_logs() == []


async def test_reference_must_exist(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    r = await async_client.post(
        "/cars",
        json={"car_template_id": 999, "license_plate": "NEW 1", "price_per_day": 30},
        headers=headers_for(manager),
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "car_template_id"


async def test_contract_cannot_reference_other_company_client(
    async_client: AsyncClient, seed, headers_for
):
    await seed.company(7)
    await seed.company(9)
    manager = await seed.manager(7)
    car = await seed.car(7)
    foreign_client = await seed.client(9)
    r = await async_client.post(
        "/contracts",
        json={
            "client_id": foreign_client.id,
            "company_car_id": car.id,
            "start_date": "2024-06-01T10:00:00",
            "end_date": "2024-06-05T10:00:00",
        },
        headers=headers_for(manager),
    )
    assert r.status_code == 400
    assert "another company" in r.json()["details"][0]["message"]


async def test_body_validation_is_400_with_fields(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    r = await async_client.post("/clients", json={"name": ""}, headers=headers_for(manager))
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation error"
    assert {"name", "surname", "phone"} <= {d["field"] for d in body["details"]}


async def test_global_catalogue_is_public_read_admin_write(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    client_user = await seed.user("client")
    r = await async_client.post("/locations", json={"name": "Batumi"}, headers=headers_for(admin))
    assert r.status_code == 201
    r = await async_client.get("/locations", headers=headers_for(client_user))
    assert r.status_code == 200
    assert r.json()["totalCount"] == 1
    r = await async_client.post("/locations", json={"name": "Tbilisi"}, headers=headers_for(client_user))
    assert r.status_code == 403


async def test_client_sees_only_own_records(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    user = await seed.user("client")
    mine = await seed.client(7, user_id=user.id)
    await seed.client(7)
    r = await async_client.get("/clients", headers=headers_for(user))
    assert r.status_code == 200
    assert [c["id"] for c in r.json()["data"]] == [mine.id]
    r = await async_client.put(f"/clients/{mine.id}", json={"phone": "+999"}, headers=headers_for(user))
    assert r.status_code == 200
    r = await async_client.get("/cars", headers=headers_for(user))
    assert r.status_code == 403


async def test_payment_stamps_creator(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    car = await seed.car(7)
    client = await seed.client(7)
    r = await async_client.post(
        "/contracts",
        json={
            "client_id": client.id,
            "company_car_id": car.id,
            "start_date": "2024-06-01T10:00:00",
            "end_date": "2024-06-05T10:00:00",
            "total_amount": 160,
        },
        headers=headers_for(manager),
    )
    assert r.status_code == 201
    contract_id = r.json()["data"]["id"]
    r = await async_client.post(
        "/payments",
        json={"contract_id": contract_id, "amount": 160, "payment_method": "card"},
        headers=headers_for(manager),
    )
    assert r.status_code == 201
    assert r.json()["data"]["created_by"] == manager.id


async def test_client_cannot_reassign_own_record(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    user = await seed.user("client")
    other = await seed.user("client")
    mine = await seed.client(7, user_id=user.id)
    theirs = await seed.client(7, user_id=other.id)
    r = await async_client.put(
        f"/clients/{mine.id}", json={"user_id": other.id, "phone": "+555"}, headers=headers_for(user)
    )
    assert r.status_code == 200
    assert r.json()["data"]["user_id"] == user.id
    assert r.json()["data"]["phone"] == "+555"
    assert (await seed.get(models.Client, mine.id)).user_id == user.id

    r = await async_client.put(f"/clients/{theirs.id}", json={"user_id": user.id}, headers=headers_for(user))
    assert r.status_code == 403


async def test_manager_links_client_to_identity(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    user = await seed.user("client")
    client = await seed.client(7)
    r = await async_client.put(f"/clients/{client.id}", json={"user_id": user.id}, headers=headers_for(manager))
    assert r.status_code == 200
    assert r.json()["data"]["user_id"] == user.id


async def test_filter_values_are_checked_against_columns(async_client: AsyncClient, seed, headers_for):
    await seed.company(7)
    manager = await seed.manager(7)
    await seed.client(7)
    for bad in ({"name": ["Ann"]}, {"name": {"eq": "Ann"}}, {"company_id": "seven"}, {"q": ["Ann"]}):
        r = await async_client.get("/clients", params={"filters": json.dumps(bad)}, headers=headers_for(manager))
        assert r.status_code == 400, bad
        assert r.json()["error"] == "Validation error"
        assert r.json()["details"][0]["field"] in bad

    r = await async_client.get(
        "/clients", params={"filters": json.dumps({"company_id": "7"})}, headers=headers_for(manager)
    )
    assert r.status_code == 200
    assert r.json()["totalCount"] == 1


async def test_boolean_and_date_filters(async_client: AsyncClient, seed, headers_for):
    admin = await seed.user("admin")
    await seed.company(7)
    await seed.company(9)
    await seed.add(models.Task(company_id=7, title="Wash", due_date=date(2024, 6, 1)))
    await seed.add(models.Task(company_id=7, title="Tyres", due_date=date(2024, 6, 2)))
    r = await async_client.get(
        "/tasks", params={"filters": json.dumps({"due_date": "2024-06-02"})}, headers=headers_for(admin)
    )
    assert [t["title"] for t in r.json()["data"]] == ["Tyres"]
    r = await async_client.get(
        "/tasks", params={"filters": json.dumps({"due_date": "June"})}, headers=headers_for(admin)
    )
    assert r.status_code == 400
    r = await async_client.get(
        "/companies", params={"filters": json.dumps({"is_active": "true"})}, headers=headers_for(admin)
    )
    assert r.json()["totalCount"] == 2
