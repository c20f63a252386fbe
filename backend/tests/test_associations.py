"""Association, property and resident tests."""
import uuid

from sqlalchemy import select

from hoa_portal.models.audit import AuditLog
from hoa_portal.models.enums import AuditAction, OrgRole


async def test_create_association_seeds_system_groups(client, seed, session_factory):
    response = await client.post(
        "/v1/associations",
        json={"name": "Cedar Point Condominiums", "code": "CPC", "city": "Austin", "fiscal_year_start_month": 7},
    )

    assert response.status_code == 201, response.text
    association = response.json()
    assert association["fiscal_year_start_month"] == 7
    assert association["is_archived"] is False

    groups = (await client.get("/v1/communications/groups", params={"association_id": association["id"]})).json()
    assert sorted(g["name"] for g in groups) == ["All Owners", "All Residents"]
    assert {g["group_type"] for g in groups} == {"system"}

    async with session_factory() as session:
        actions = (await session.execute(select(AuditLog.action))).scalars().all()
    assert actions == [AuditAction.ASSOCIATION_CREATED]


async def test_archived_associations_are_hidden_by_default(client, seed):
    other = (await client.post("/v1/associations", json={"name": "Birch Hollow"})).json()

    assert (await client.delete(f"/v1/associations/{other['id']}")).status_code == 204

    names = [a["name"] for a in (await client.get("/v1/associations")).json()]
    all_names = [a["name"] for a in (await client.get("/v1/associations", params={"include_archived": True})).json()]
    assert names == ["Maple Ridge HOA"]
    assert all_names == ["Birch Hollow", "Maple Ridge HOA"]


async def test_archiving_an_association_needs_an_admin(client, seed, current_user):
    current_user.org_role = OrgRole.MANAGER.value

    response = await client.delete(f"/v1/associations/{seed.association.id}")

    assert response.status_code == 403
    assert response.json() == {"error": "Admin privileges required"}


async def test_other_organizations_cannot_see_the_association(client, seed, current_user):
    other = (await client.post("/v1/associations", json={"name": "Birch Hollow"})).json()
    current_user.org_id = uuid.uuid4()

    response = await client.get(f"/v1/associations/{other['id']}")

    assert response.status_code == 404


async def test_update_association(client, seed):
    response = await client.patch(f"/v1/associations/{seed.association.id}", json={"total_units": 84})

    assert response.json()["total_units"] == 84
    assert response.json()["name"] == "Maple Ridge HOA"


async def test_property_lifecycle(client, seed):
    url = f"/v1/associations/{seed.association.id}/properties"
    condo = await client.post(url, json={"address": "40 Birch Ln", "unit_number": "2B", "property_type": "condo", "status": "vacant"})
    assert condo.status_code == 201, condo.text
    condo_id = condo.json()["id"]

    vacant = (await client.get(url, params={"property_status": "vacant"})).json()
    assert [p["id"] for p in vacant] == [condo_id]

    updated = await client.patch(f"/v1/properties/{condo_id}", json={"status": "occupied", "bedrooms": 2})
    assert updated.json()["status"] == "occupied"
    assert updated.json()["bedrooms"] == 2

    assert (await client.delete(f"/v1/properties/{condo_id}")).status_code == 204
    remaining = [p["address"] for p in (await client.get(url)).json()]
    assert remaining == ["12 Maple Ridge Dr"]
    assert (await client.get(f"/v1/properties/{condo_id}")).json()["is_archived"] is True


async def test_residents_list_primary_first(client, seed):
    url = f"/v1/properties/{seed.property.id}/residents"
    created = await client.post(
        url,
        json={"first_name": "Abe", "last_name": "Adams", "resident_type": "tenant", "email": "abe@example.com"},
    )
    assert created.status_code == 201, created.text
    assert created.json()["full_name"] == "Abe Adams"

    listed = (await client.get(url)).json()
    assert [r["first_name"] for r in listed] == ["Olivia", "Abe"]


async def test_resident_dates_and_user_link_are_checked(client, seed):
    url = f"/v1/properties/{seed.property.id}/residents"
    backwards = await client.post(
        url,
        json={"first_name": "Abe", "last_name": "Adams", "move_in_date": "2026-05-01", "move_out_date": "2026-01-01"},
    )
    assert backwards.status_code == 400
    assert "move_out_date must be on or after move_in_date" in backwards.json()["error"]

    resident_url = f"/v1/properties/residents/{seed.owner.id}"
    await client.patch(resident_url, json={"move_in_date": "2020-06-01"})
    moved_out = await client.patch(resident_url, json={"move_out_date": "2019-01-01"})
    assert moved_out.json() == {"error": "move_out_date must be on or after move_in_date"}

    ghost = await client.patch(resident_url, json={"user_id": str(uuid.uuid4())})
    assert ghost.json() == {"error": "Linked user not found"}

    linked = await client.patch(resident_url, json={"user_id": str(seed.user.id)})
    assert linked.json()["user_id"] == str(seed.user.id)


async def test_delete_resident(client, seed):
    response = await client.delete(f"/v1/properties/residents/{seed.owner.id}")

    assert response.status_code == 204
    assert (await client.get(f"/v1/properties/residents/{seed.owner.id}")).status_code == 404
