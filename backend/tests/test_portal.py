"""Homeowner portal tests."""
from datetime import date, datetime, timedelta

from hoa_portal.models.compliance import ComplianceIssue
from hoa_portal.models.enums import ComplianceStatus
from hoa_portal.models.poll import CommunityPoll


async def test_portal_shows_only_linked_homes(client, seed, db):
    seed.owner.user_id = seed.user.id
    db.add_all([
        ComplianceIssue(
            association_id=seed.association.id,
            property_id=seed.property.id,
            violation_type="Trash bins visible",
            due_date=date.today() + timedelta(days=10),
        ),
        ComplianceIssue(
            association_id=seed.association.id,
            property_id=seed.property.id,
            violation_type="Lawn height",
            status=ComplianceStatus.RESOLVED,
        ),
        CommunityPoll(
            association_id=seed.association.id,
            title="Repaint the clubhouse?",
            options=["Yes", "No"],
            created_by=seed.user.id,
        ),
        CommunityPoll(
            association_id=seed.association.id,
            title="Pool hours",
            options=["Early", "Late"],
            created_by=seed.user.id,
            closes_at=datetime.utcnow() - timedelta(days=1),
        ),
    ])
    await db.commit()

    amenity = (await client.post(
        "/v1/amenities",
        json={"association_id": str(seed.association.id), "name": "Clubhouse", "capacity": 40},
    )).json()
    start = (datetime.utcnow() + timedelta(days=3)).replace(hour=9, minute=0, second=0, microsecond=0)
    booking = (await client.post(
        f"/v1/amenities/{amenity['id']}/bookings",
        json={"start_time": start.isoformat(), "end_time": (start + timedelta(hours=1)).isoformat()},
    )).json()

    response = await client.get("/v1/portal/me")

    assert response.status_code == 200, response.text
    body = response.json()
    assert [r["id"] for r in body["residents"]] == [str(seed.owner.id)]
    assert [p["address"] for p in body["properties"]] == ["12 Maple Ridge Dr"]
    assert body["properties"][0]["association_name"] == "Maple Ridge HOA"
    assert [i["violation_type"] for i in body["compliance_issues"]] == ["Trash bins visible"]
    assert [p["title"] for p in body["open_polls"]] == ["Repaint the clubhouse?"]
    assert [b["id"] for b in body["upcoming_bookings"]] == [booking["id"]]


async def test_portal_without_resident_records(client, seed):
    body = (await client.get("/v1/portal/me")).json()

    assert body == {
        "residents": [],
        "properties": [],
        "compliance_issues": [],
        "open_polls": [],
        "upcoming_bookings": [],
    }


async def test_portal_needs_a_user_account(client, seed, current_user):
    current_user.db_user_id = None

    response = await client.get("/v1/portal/me")

    assert response.status_code == 403
    assert response.json() == {"error": "User account required"}
