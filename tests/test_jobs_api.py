"""Job API tests — staff-managed jobs, customer-scoped reads."""

import pytest

from conftest import job_body


async def _create_job(client, staff_headers, customer_id, **overrides) -> dict:
    r = await client.post("/jobs", json=job_body(customer_id, **overrides), headers=staff_headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.mark.asyncio
async def test_staff_creates_scheduled_job(client, employee, customer):
    _, staff = employee
    user, _ = customer

    job = await _create_job(client, staff, user.id, status="completed", estimated_cost=199.5)
    assert job["status"] == "scheduled"
    assert job["customer_id"] == user.id
    assert job["estimated_cost"] == 199.5


@pytest.mark.asyncio
async def test_customer_cannot_create_job(client, customer):
    user, headers = customer
    r = await client.post("/jobs", json=job_body(user.id), headers=headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_job_needs_a_real_customer(client, employee):
    staff_user, staff = employee

    r = await client.post("/jobs", json=job_body(9999), headers=staff)
    assert r.status_code == 400
    assert r.json() == {"error": "Customer not found"}

    r = await client.post("/jobs", json=job_body(staff_user.id), headers=staff)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_job_required_fields(client, employee, customer):
    _, staff = employee
    user, _ = customer
    r = await client.post("/jobs", json=job_body(user.id, title=None), headers=staff)
    assert r.status_code == 400
    assert r.json() == {"error": "Field 'title' is required"}


@pytest.mark.asyncio
async def test_customer_sees_only_own_jobs(client, employee, customer, other_customer):
    _, staff = employee
    alice, alice_headers = customer
    bob, bob_headers = other_customer

    j1 = await _create_job(client, staff, alice.id)
    j2 = await _create_job(client, staff, bob.id)
    j3 = await _create_job(client, staff, alice.id)

    r = await client.get("/jobs", headers=alice_headers)
    assert {j["id"] for j in r.json()["data"]} == {j1["id"], j3["id"]}

    r = await client.get("/jobs", headers=bob_headers)
    assert {j["id"] for j in r.json()["data"]} == {j2["id"]}

    r = await client.get("/jobs", headers=staff)
    assert len(r.json()["data"]) == 3

    r = await client.get(f"/jobs/{j2['id']}", headers=alice_headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_customer_cannot_filter_by_another_customer(client, customer, other_customer):
    _, headers = customer
    other, _ = other_customer
    r = await client.get("/jobs", params={"customer_id": other.id}, headers=headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_filter_by_assignee_and_status(client, manager, employee, customer):
    _, staff = manager
    worker, _ = employee
    user, _ = customer

    assigned = await _create_job(client, staff, user.id, assigned_employee_id=worker.id)
    await _create_job(client, staff, user.id)

    r = await client.get("/jobs", params={"assigned_employee_id": worker.id}, headers=staff)
    assert [j["id"] for j in r.json()["data"]] == [assigned["id"]]

    await client.patch(f"/jobs/{assigned['id']}/status", json={"status": "in_progress"}, headers=staff)
    r = await client.get("/jobs", params={"status": "in_progress"}, headers=staff)
    assert [j["id"] for j in r.json()["data"]] == [assigned["id"]]


@pytest.mark.asyncio
async def test_invalid_status_leaves_job_unchanged(client, employee, customer):
    _, staff = employee
    user, _ = customer
    job = await _create_job(client, staff, user.id)

    r = await client.patch(f"/jobs/{job['id']}/status", json={"status": "done"}, headers=staff)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid status"}

    r = await client.get(f"/jobs/{job['id']}", headers=staff)
    assert r.json()["data"]["status"] == "scheduled"


@pytest.mark.asyncio
async def test_status_walkthrough(client, employee, customer):
    _, staff = employee
    user, _ = customer
    job = await _create_job(client, staff, user.id)

    for status in ("in_progress", "completed", "scheduled", "cancelled"):
        r = await client.patch(f"/jobs/{job['id']}/status", json={"status": status}, headers=staff)
        assert r.status_code == 200
        assert r.json()["data"]["status"] == status


@pytest.mark.asyncio
async def test_customer_cannot_change_job_status(client, employee, customer):
    _, staff = employee
    user, headers = customer
    job = await _create_job(client, staff, user.id)

    r = await client.patch(f"/jobs/{job['id']}/status", json={"status": "cancelled"}, headers=headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_update_ignores_non_whitelisted_fields(client, employee, customer, other_customer):
    _, staff = employee
    user, _ = customer
    other, _ = other_customer
    job = await _create_job(client, staff, user.id)

    r = await client.put(
        f"/jobs/{job['id']}",
        json={"notes": "Bring boxes", "customer_id": other.id, "status": "completed"},
        headers=staff,
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["notes"] == "Bring boxes"
    assert data["customer_id"] == user.id
    assert data["status"] == "scheduled"


@pytest.mark.asyncio
async def test_delete_job(client, employee, customer):
    _, staff = employee
    user, headers = customer
    job = await _create_job(client, staff, user.id)

    r = await client.delete(f"/jobs/{job['id']}", headers=headers)
    assert r.status_code == 403

    r = await client.delete(f"/jobs/{job['id']}", headers=staff)
    assert r.json() == {"success": True, "message": "Job deleted"}

    r = await client.get(f"/jobs/{job['id']}", headers=staff)
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Referenced rows
# ═══════════════════════════════════════════════════════════

PROPERTY = {"address": "22 Oak Ave", "city": "Springfield", "state": "IL", "zip_code": "62704"}


@pytest.mark.asyncio
async def test_property_must_belong_to_the_jobs_customer(client, employee, customer, other_customer):
    _, staff = employee
    alice, alice_headers = customer
    bob, bob_headers = other_customer
    alices = (await client.post("/properties", json=PROPERTY, headers=alice_headers)).json()["data"]
    bobs = (await client.post("/properties", json=PROPERTY, headers=bob_headers)).json()["data"]

    r = await client.post("/jobs", json=job_body(alice.id, property_id=bobs["id"]), headers=staff)
    assert r.status_code == 400
    assert r.json() == {"error": "Property not found for this customer"}

    job = await _create_job(client, staff, alice.id, property_id=alices["id"])
    assert job["property_id"] == alices["id"]

    r = await client.put(f"/jobs/{job['id']}", json={"property_id": bobs["id"]}, headers=staff)
    assert r.status_code == 400

    r = await client.put(f"/jobs/{job['id']}", json={"property_id": 9999}, headers=staff)
    assert r.status_code == 400

    r = await client.get(f"/jobs/{job['id']}", headers=staff)
    assert r.json()["data"]["property_id"] == alices["id"]


@pytest.mark.asyncio
async def test_assignee_must_be_staff(client, manager, employee, customer, other_customer):
    _, staff = manager
    worker, _ = employee
    user, _ = customer
    other, _ = other_customer

    r = await client.post("/jobs", json=job_body(user.id, assigned_employee_id=other.id), headers=staff)
    assert r.status_code == 400
    assert r.json() == {"error": "Assigned employee not found"}

    job = await _create_job(client, staff, user.id)
    for bad in (user.id, 9999):
        r = await client.put(f"/jobs/{job['id']}", json={"assigned_employee_id": bad}, headers=staff)
        assert r.status_code == 400, bad

    r = await client.put(f"/jobs/{job['id']}", json={"assigned_employee_id": worker.id}, headers=staff)
    assert r.status_code == 200
    assert r.json()["data"]["assigned_employee_id"] == worker.id
