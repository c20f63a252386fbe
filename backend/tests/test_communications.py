"""Recipient groups, selection, merge tags and message delivery tests."""
import uuid
from datetime import date
from types import SimpleNamespace

from sqlalchemy import select

from hoa_portal.models import Association, Property, Resident
from hoa_portal.models.communication import CommunicationLog, RecipientGroup
from hoa_portal.models.enums import JobStatus, MessageStatus, RecipientGroupType, ResidentType
from hoa_portal.models.jobs import JobsOutbox
from hoa_portal.schemas.communication import SelectionAction
from hoa_portal.services import merge_tags
from hoa_portal.services.recipients import RecipientSelection


def _groups():
    association_id = uuid.uuid4()
    groups = [
        SimpleNamespace(id=uuid.uuid4(), name=name, association_id=association_id, group_type=RecipientGroupType.SYSTEM)
        for name in ("All Owners", "All Residents", "Board Members")
    ]
    return association_id, groups


def test_selection_actions_keep_order_and_ignore_unknown_ids():
    association_id, groups = _groups()
    owners, residents, board = groups
    selection = RecipientSelection(groups, {association_id: "Maple Ridge HOA"}, [board.id, uuid.uuid4()])

    assert selection.selected == [board.id]

    selection.apply(SelectionAction(action="toggle_group", group_id=owners.id))
    assert selection.selected == [board.id, owners.id]

    selection.apply(SelectionAction(action="toggle_group", group_id=board.id))
    assert selection.selected == [owners.id]

    selection.apply(SelectionAction(action="select_association", association_id=association_id))
    assert selection.selected == [owners.id, residents.id, board.id]

    selection.apply(SelectionAction(action="remove_group", group_id=residents.id))
    assert selection.selected == [owners.id, board.id]

    selection.apply(SelectionAction(action="clear"))
    assert selection.selected == []


def test_common_type_toggle_selects_then_drops_matching_groups():
    association_id, groups = _groups()
    owners = groups[0]
    selection = RecipientSelection(groups, {association_id: "Maple Ridge HOA"})

    selection.toggle_common_type("Owners")
    assert selection.selected == [owners.id]
    common = {c.common_type: c for c in selection.common_groups()}
    assert common["owners"].all_selected is True
    assert common["residents"].all_selected is False

    selection.toggle_common_type("owners")
    assert selection.selected == []


def test_merge_tags_render_known_tags_and_report_unknown_ones():
    resident = SimpleNamespace(first_name="Olivia", last_name="Owner", full_name="Olivia Owner", email=None)
    context = merge_tags.build_context(resident=resident, today=date(2026, 3, 1))

    rendered = merge_tags.render("Hi {resident.first_name}, {resident.nickname} ({date.current_year})", context)

    assert rendered == "Hi Olivia, {resident.nickname} (2026)"
    assert context["resident.email"] == ""
    assert merge_tags.unknown_tags("{resident.nickname} {resident.nickname} {association.name}") == [
        "resident.nickname"
    ]


async def _group_ids(client, seed) -> dict[str, str]:
    response = await client.get(
        "/v1/communications/groups", params={"association_id": str(seed.association.id)}
    )
    return {g["name"]: g["id"] for g in response.json()}


async def _add_residents(db, seed) -> None:
    second = Property(association_id=seed.association.id, address="14 Maple Ridge Dr", city="Austin")
    db.add(second)
    await db.flush()
    db.add_all([
        Resident(
            property_id=seed.property.id,
            first_name="Tom",
            last_name="Tenant",
            email="tom@example.com",
            resident_type=ResidentType.TENANT,
        ),
        Resident(
            property_id=second.id,
            first_name="Oscar",
            last_name="Zimmer",
            email="OLIVIA@example.com",
            resident_type=ResidentType.OWNER,
        ),
        Resident(
            property_id=second.id,
            first_name="Nora",
            last_name="Noemail",
            resident_type=ResidentType.OWNER,
        ),
    ])
    await db.commit()


async def test_selection_endpoint_reports_common_groups(client, seed):
    groups = await _group_ids(client, seed)

    response = await client.post(
        "/v1/communications/selection",
        json={"actions": [{"action": "toggle_common_type", "common_type": "owners"}]},
    )

    body = response.json()
    assert body["selected_group_ids"] == [groups["All Owners"]]
    assert body["selected_groups"][0]["association_name"] == "Maple Ridge HOA"
    assert body["selected_groups"][0]["group_type"] == "system"
    common = {c["common_type"]: c for c in body["common_groups"]}
    assert common["owners"]["all_selected"] is True
    assert [g["name"] for g in common["residents"]["groups"]] == ["All Residents"]


async def test_resolve_filters_by_criteria_and_dedupes_email(client, seed, db):
    await _add_residents(db, seed)
    groups = await _group_ids(client, seed)

    owners = (await client.post(
        "/v1/communications/resolve", json={"group_ids": [groups["All Owners"]]}
    )).json()
    assert owners["count"] == 1
    assert owners["recipients"][0]["name"] == "Olivia Owner"

    everyone = (await client.post(
        "/v1/communications/resolve",
        json={"group_ids": [groups["All Owners"], groups["All Residents"]]},
    )).json()
    assert sorted(r["email"] for r in everyone["recipients"]) == ["olivia@example.com", "tom@example.com"]


async def test_preview_renders_for_one_resident(client, seed):
    response = await client.post(
        "/v1/communications/preview",
        json={
            "association_id": str(seed.association.id),
            "resident_id": str(seed.owner.id),
            "subject": "{association.name} pool opening",
            "body": "Dear {resident.first_name}, see you at {property.address}. {resident.nickname}",
        },
    )

    body = response.json()
    assert body["subject"] == "Maple Ridge HOA pool opening"
    assert body["body"] == "Dear Olivia, see you at 12 Maple Ridge Dr. {resident.nickname}"
    assert body["unknown_tags"] == ["resident.nickname"]


async def test_send_message_queues_logs_and_delivers_through_jobs(client, seed, db, session_factory):
    await _add_residents(db, seed)
    groups = await _group_ids(client, seed)

    response = await client.post(
        "/v1/communications/messages",
        json={
            "association_id": str(seed.association.id),
            "subject": "Hello {resident.first_name}",
            "body": "Annual meeting for {association.name}",
            "group_ids": [groups["All Residents"]],
        },
    )

    assert response.status_code == 201, response.text
    message = response.json()
    assert message["status"] == "queued"
    assert message["recipient_count"] == 2

    async with session_factory() as session:
        logs = (await session.execute(
            select(CommunicationLog).where(CommunicationLog.message_id == uuid.UUID(message["id"]))
        )).scalars().all()
        jobs = (await session.execute(select(JobsOutbox))).scalars().all()
    assert sorted(log.subject for log in logs) == ["Hello Olivia", "Hello Tom"]
    assert all(log.status == MessageStatus.QUEUED for log in logs)
    assert [j.type for j in jobs] == ["send_message", "send_message"]

    processed = await client.post("/v1/ai/jobs/process")
    assert processed.json() == {"completed": 2, "failed": 0}

    messages = (await client.get(
        "/v1/communications/messages", params={"association_id": str(seed.association.id)}
    )).json()
    assert messages[0]["status"] == "sent"

    async with session_factory() as session:
        jobs = (await session.execute(select(JobsOutbox))).scalars().all()
        logs = (await session.execute(select(CommunicationLog))).scalars().all()
    assert {j.status for j in jobs} == {JobStatus.COMPLETED}
    assert all(log.sent_at is not None for log in logs)


async def test_send_rejects_groups_of_another_association(client, seed, db):
    other = Association(org_id=seed.org.id, name="Birch Hollow HOA")
    db.add(other)
    await db.flush()
    foreign = RecipientGroup(association_id=other.id, name="Everyone", group_type=RecipientGroupType.CUSTOM, criteria={})
    db.add(foreign)
    await db.commit()

    response = await client.post(
        "/v1/communications/messages",
        json={
            "association_id": str(seed.association.id),
            "subject": "Hi",
            "body": "Hello",
            "group_ids": [str(foreign.id)],
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Recipient group not found for this association"


async def test_send_to_empty_group(client, seed):
    created = await client.post(
        "/v1/communications/groups",
        json={
            "association_id": str(seed.association.id),
            "name": "Tenants",
            "criteria": {"resident_type": "tenant"},
        },
    )
    assert created.json()["group_type"] == "custom"

    response = await client.post(
        "/v1/communications/messages",
        json={
            "association_id": str(seed.association.id),
            "subject": "Hi",
            "body": "Hello",
            "group_ids": [created.json()["id"]],
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Selected groups have no recipients"


async def test_system_groups_are_read_only(client, seed):
    groups = await _group_ids(client, seed)

    edit = await client.patch(f"/v1/communications/groups/{groups['All Owners']}", json={"name": "Owners"})
    delete = await client.delete(f"/v1/communications/groups/{groups['All Owners']}")

    assert edit.status_code == 400
    assert edit.json() == {"error": "System groups cannot be edited"}
    assert delete.status_code == 400
