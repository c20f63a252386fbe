"""Vendor, contract and work order tests."""
from sqlalchemy import select

from hoa_portal.models.audit import AuditLog
from hoa_portal.models.enums import AuditAction


async def _create_vendor(client, **overrides) -> dict:
    payload = {"name": "Green Thumb Landscaping", "service_type": "landscaping"}
    payload.update(overrides)
    response = await client.post("/v1/vendors", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _create_contract(client, seed, vendor, **overrides) -> dict:
    payload = {
        "association_id": str(seed.association.id),
        "title": "Grounds maintenance 2026",
        "start_date": "2026-01-01",
        "end_date": "2026-12-31",
        "value_cents": 1200000,
        "status": "active",
    }
    payload.update(overrides)
    response = await client.post(f"/v1/vendors/{vendor['id']}/contracts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_vendor_list_puts_preferred_first_and_delete_deactivates(client, seed):
    plain = await _create_vendor(client, name="Acme Pools", service_type="pools")
    preferred = await _create_vendor(client, name="Zephyr Roofing", is_preferred=True)

    listed = (await client.get("/v1/vendors")).json()
    assert [v["id"] for v in listed] == [preferred["id"], plain["id"]]

    assert (await client.delete(f"/v1/vendors/{plain['id']}")).status_code == 204
    active = (await client.get("/v1/vendors", params={"is_active": True})).json()
    assert [v["id"] for v in active] == [preferred["id"]]


async def test_amendments_adjust_current_value(client, seed):
    vendor = await _create_vendor(client)
    contract = await _create_contract(client, seed, vendor)
    assert contract["original_value_cents"] == contract["current_value_cents"] == 1200000
    assert contract["amendments"] == []

    raised = await client.post(
        f"/v1/vendors/contracts/{contract['id']}/amendments",
        json={"effective_date": "2026-04-01", "description": "Add irrigation checks", "value_change_cents": 150000},
    )
    assert raised.status_code == 201, raised.text
    lowered = await client.post(
        f"/v1/vendors/contracts/{contract['id']}/amendments",
        json={"effective_date": "2026-07-01", "description": "Drop winter visits", "value_change_cents": -50000},
    )

    body = lowered.json()
    assert body["original_value_cents"] == 1200000
    assert body["current_value_cents"] == 1300000
    assert [a["value_change_cents"] for a in body["amendments"]] == [150000, -50000]


async def test_amendment_cannot_go_negative(client, seed):
    vendor = await _create_vendor(client)
    contract = await _create_contract(client, seed, vendor, value_cents=10000)

    response = await client.post(
        f"/v1/vendors/contracts/{contract['id']}/amendments",
        json={"effective_date": "2026-02-01", "description": "Refund", "value_change_cents": -20000},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Amendment would make the contract value negative"}


async def test_expired_and_terminated_contracts_cannot_be_amended(client, seed):
    vendor = await _create_vendor(client)
    expired = await _create_contract(client, seed, vendor, status="expired")
    terminated = await _create_contract(client, seed, vendor)
    await client.patch(f"/v1/vendors/contracts/{terminated['id']}", json={"status": "terminated"})

    amendment = {"effective_date": "2026-03-01", "description": "Extra mowing", "value_change_cents": 1000}
    first = await client.post(f"/v1/vendors/contracts/{expired['id']}/amendments", json=amendment)
    second = await client.post(f"/v1/vendors/contracts/{terminated['id']}/amendments", json=amendment)

    assert first.status_code == 400
    assert first.json() == {"error": "Contract is expired and cannot be amended"}
    assert second.json() == {"error": "Contract is terminated and cannot be amended"}


async def test_contract_dates_are_validated(client, seed):
    vendor = await _create_vendor(client)

    response = await client.post(
        f"/v1/vendors/{vendor['id']}/contracts",
        json={
            "association_id": str(seed.association.id),
            "title": "Backwards contract",
            "start_date": "2026-06-01",
            "end_date": "2026-01-01",
        },
    )
    assert response.status_code == 400

    contract = await _create_contract(client, seed, vendor)
    patched = await client.patch(f"/v1/vendors/contracts/{contract['id']}", json={"end_date": "2025-12-01"})
    assert patched.status_code == 400
    assert patched.json() == {"error": "end_date must be on or after start_date"}


async def test_association_contracts_span_vendors(client, seed):
    landscaper = await _create_vendor(client)
    pools = await _create_vendor(client, name="Acme Pools")
    await _create_contract(client, seed, landscaper, start_date="2026-01-01")
    await _create_contract(client, seed, pools, title="Pool service", start_date="2026-03-01")

    response = await client.get(f"/v1/vendors/associations/{seed.association.id}/contracts")

    assert [c["title"] for c in response.json()] == ["Pool service", "Grounds maintenance 2026"]


async def test_work_order_created_with_vendor_starts_assigned(client, seed):
    vendor = await _create_vendor(client)

    response = await client.post(
        "/v1/work-orders",
        json={
            "association_id": str(seed.association.id),
            "property_id": str(seed.property.id),
            "vendor_id": vendor["id"],
            "title": "Replace dead shrubs",
        },
    )

    assert response.status_code == 201
    assert response.json()["status"] == "assigned"
    assert response.json()["priority"] == "medium"


async def test_work_order_lifecycle(client, seed, session_factory):
    vendor = await _create_vendor(client)
    work_order = (await client.post(
        "/v1/work-orders",
        json={"association_id": str(seed.association.id), "title": "Fix pool gate", "priority": "high"},
    )).json()
    url = f"/v1/work-orders/{work_order['id']}"
    assert work_order["status"] == "open"

    early = await client.post(f"{url}/status", json={"status": "assigned"})
    assert early.status_code == 400
    assert early.json() == {"error": "Assign a vendor before marking the work order assigned"}

    assigned = await client.post(f"{url}/assign", json={"vendor_id": vendor["id"]})
    assert assigned.json()["status"] == "assigned"
    assert assigned.json()["vendor_id"] == vendor["id"]

    skipped = await client.post(f"{url}/status", json={"status": "open"})
    assert skipped.json() == {"error": "Cannot change work order from assigned to open"}

    await client.post(f"{url}/status", json={"status": "in_progress"})
    done = await client.post(f"{url}/status", json={"status": "completed", "actual_cost_cents": 18500})
    assert done.json()["status"] == "completed"
    assert done.json()["actual_cost_cents"] == 18500
    assert done.json()["completed_at"] is not None

    edit = await client.patch(url, json={"title": "Fix pool gate latch"})
    assert edit.status_code == 400
    assert edit.json() == {"error": "Cannot edit a completed work order"}
    reassign = await client.post(f"{url}/assign", json={"vendor_id": vendor["id"]})
    assert reassign.json() == {"error": "Cannot assign a completed work order"}

    async with session_factory() as session:
        actions = (await session.execute(select(AuditLog.action))).scalars().all()
    assert actions.count(AuditAction.VENDOR_ASSIGNED) == 1


async def test_inactive_vendor_cannot_be_assigned(client, seed):
    vendor = await _create_vendor(client)
    await client.delete(f"/v1/vendors/{vendor['id']}")
    work_order = (await client.post(
        "/v1/work-orders",
        json={"association_id": str(seed.association.id), "title": "Paint fence"},
    )).json()

    response = await client.post(f"/v1/work-orders/{work_order['id']}/assign", json={"vendor_id": vendor["id"]})

    assert response.status_code == 400
    assert response.json() == {"error": "Vendor is inactive"}


async def test_work_order_filters(client, seed):
    vendor = await _create_vendor(client)
    for title, priority in (("Trim trees", "low"), ("Burst pipe", "urgent")):
        await client.post(
            "/v1/work-orders",
            json={"association_id": str(seed.association.id), "title": title, "priority": priority},
        )
    await client.post(
        "/v1/work-orders",
        json={"association_id": str(seed.association.id), "title": "Mow common area", "vendor_id": vendor["id"]},
    )

    urgent = (await client.get("/v1/work-orders", params={"priority": "urgent"})).json()
    by_vendor = (await client.get("/v1/work-orders", params={"vendor_id": vendor["id"]})).json()
    open_orders = (await client.get("/v1/work-orders", params={"work_order_status": "open"})).json()

    assert [w["title"] for w in urgent] == ["Burst pipe"]
    assert [w["title"] for w in by_vendor] == ["Mow common area"]
    assert sorted(w["title"] for w in open_orders) == ["Burst pipe", "Trim trees"]
