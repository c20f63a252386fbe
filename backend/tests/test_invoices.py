"""Invoice and dashboard tests."""
from datetime import date, datetime, timedelta

from hoa_portal.models.enums import LeadStatus
from hoa_portal.models.lead import Lead

LINE_ITEMS = [
    {"description": "Monthly mowing", "amount_cents": 30000, "gl_account_code": "6300"},
    {"description": "Shrub trimming", "amount_cents": 15000, "gl_account_code": "6300", "category": "Landscaping"},
]


async def _create_invoice(client, seed, **overrides) -> dict:
    payload = {
        "association_id": str(seed.association.id),
        "vendor_name": "Green Thumb Landscaping",
        "invoice_number": "GT-1042",
        "amount_cents": 45000,
        "line_items": LINE_ITEMS,
    }
    payload.update(overrides)
    response = await client.post("/v1/invoices", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_create_invoice_keeps_line_item_order(client, seed):
    invoice = await _create_invoice(client, seed)

    assert invoice["status"] == "draft"
    assert [(i["position"], i["description"]) for i in invoice["line_items"]] == [
        (0, "Monthly mowing"),
        (1, "Shrub trimming"),
    ]


async def test_vendor_name_defaults_to_the_vendor(client, seed):
    vendor = (await client.post("/v1/vendors", json={"name": "Acme Pools"})).json()

    invoice = await _create_invoice(client, seed, vendor_id=vendor["id"], vendor_name=None)

    assert invoice["vendor_name"] == "Acme Pools"
    listed = (await client.get("/v1/invoices", params={"vendor_id": vendor["id"]})).json()
    assert [i["id"] for i in listed] == [invoice["id"]]


async def test_replace_line_items(client, seed):
    invoice = await _create_invoice(client, seed)

    response = await client.put(
        f"/v1/invoices/{invoice['id']}/line-items",
        json=[{"description": "Spring cleanup", "quantity": 1, "amount_cents": 45000}],
    )

    assert response.status_code == 200, response.text
    items = response.json()["line_items"]
    assert [(i["position"], i["description"], i["amount_cents"]) for i in items] == [(0, "Spring cleanup", 45000)]
    fetched = (await client.get(f"/v1/invoices/{invoice['id']}")).json()
    assert len(fetched["line_items"]) == 1


async def test_paid_invoice_is_locked(client, seed):
    invoice = await _create_invoice(client, seed)
    url = f"/v1/invoices/{invoice['id']}"

    paid = await client.patch(url, json={"status": "paid"})
    assert paid.json()["payment_date"] == date.today().isoformat()

    items = await client.put(f"{url}/line-items", json=LINE_ITEMS)
    assert items.status_code == 400
    assert items.json() == {"error": "Line items of a paid invoice cannot be changed"}

    void = await client.delete(url)
    assert void.json() == {"error": "Paid invoices cannot be voided"}


async def test_void_invoice_cannot_be_edited(client, seed):
    invoice = await _create_invoice(client, seed)
    url = f"/v1/invoices/{invoice['id']}"

    assert (await client.delete(url)).status_code == 204

    edit = await client.patch(url, json={"amount_cents": 1})
    assert edit.status_code == 400
    assert edit.json() == {"error": "Void invoices cannot be edited"}
    assert (await client.get(url)).json()["status"] == "void"


async def test_invoice_filters(client, seed):
    today = date.today()
    soon = await _create_invoice(client, seed, due_date=(today + timedelta(days=5)).isoformat())
    await _create_invoice(client, seed, invoice_number="GT-1043", due_date=(today + timedelta(days=40)).isoformat())
    approved = await _create_invoice(client, seed, invoice_number="GT-1044")
    await client.patch(f"/v1/invoices/{approved['id']}", json={"status": "approved"})

    due = (await client.get("/v1/invoices", params={"due_before": (today + timedelta(days=10)).isoformat()})).json()
    by_status = (await client.get("/v1/invoices", params={"invoice_status": "approved"})).json()

    assert [i["id"] for i in due] == [soon["id"]]
    assert [i["id"] for i in by_status] == [approved["id"]]


async def test_dashboard_stats(client, seed, db):
    today = date.today()
    overdue = await _create_invoice(client, seed, amount_cents=10000, due_date=(today - timedelta(days=1)).isoformat())
    approved = await _create_invoice(client, seed, amount_cents=5000, due_date=(today + timedelta(days=30)).isoformat())
    pending = await _create_invoice(client, seed, amount_cents=2500)
    paid = await _create_invoice(client, seed, amount_cents=7000)
    void = await _create_invoice(client, seed, amount_cents=3000)
    await client.patch(f"/v1/invoices/{approved['id']}", json={"status": "approved"})
    await client.patch(f"/v1/invoices/{pending['id']}", json={"status": "pending_approval"})
    await client.patch(f"/v1/invoices/{paid['id']}", json={"status": "paid"})
    await client.delete(f"/v1/invoices/{void['id']}")

    await client.post(f"/v1/associations/{seed.association.id}/properties", json={"address": "14 Maple Ridge Dr", "status": "vacant"})
    await client.post("/v1/work-orders", json={"association_id": str(seed.association.id), "title": "Fix pool gate"})
    db.add_all([
        Lead(org_id=seed.org.id, email="new@lead.test"),
        Lead(org_id=seed.org.id, email="won@lead.test", status=LeadStatus.WON),
    ])
    await db.commit()

    amenity = (await client.post(
        "/v1/amenities",
        json={"association_id": str(seed.association.id), "name": "Clubhouse", "capacity": 40},
    )).json()
    start = (datetime.utcnow() + timedelta(days=2)).replace(hour=10, minute=0, second=0, microsecond=0)
    await client.post(
        f"/v1/amenities/{amenity['id']}/bookings",
        json={"start_time": start.isoformat(), "end_time": (start + timedelta(hours=2)).isoformat()},
    )

    stats = (await client.get("/v1/dashboard/stats")).json()

    assert stats["associations"] == 1
    assert stats["properties"] == {"total": 2, "occupied": 1, "vacant": 1}
    assert stats["residents"] == 1
    assert stats["invoices"] == {"unpaid": 3, "unpaid_total_cents": 17500, "overdue": 1}
    assert stats["work_orders"] == {"open": 1, "assigned": 0, "in_progress": 0}
    assert stats["leads"] == {"active": 1}
    assert stats["bookings"] == {"upcoming": 1}
    assert stats["compliance"] == {"open": 0, "in_progress": 0, "escalated": 0, "overdue": 0}

    due = (await client.get("/v1/dashboard/invoices/due", params={"days": 14})).json()
    assert due["total"] == 1
    assert due["invoices"][0]["id"] == overdue["id"]
    assert due["invoices"][0]["days_until_due"] == -1
    assert due["invoices"][0]["association"]["name"] == "Maple Ridge HOA"


async def test_dashboard_stats_for_one_association(client, seed):
    other = (await client.post("/v1/associations", json={"name": "Birch Hollow"})).json()
    await _create_invoice(client, seed, association_id=other["id"], amount_cents=9900)
    await _create_invoice(client, seed, amount_cents=100)

    stats = (await client.get("/v1/dashboard/stats", params={"association_id": other["id"]})).json()

    assert stats["associations"] == 1
    assert stats["properties"]["total"] == 0
    assert stats["invoices"]["unpaid_total_cents"] == 9900
