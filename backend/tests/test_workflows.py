"""Workflow and workflow template tests."""
from hoa_portal.models.enums import WorkflowStatus
from hoa_portal.routers.workflows import can_transition

STEPS = [
    {"name": "Collect disclosure packet", "assignee": "manager"},
    {"name": "Board review"},
    {"name": "Send approval letter"},
]


async def _create_template(client, **overrides) -> dict:
    payload = {"name": "Resale certificate", "workflow_type": "resale", "steps": STEPS, "is_template": True}
    payload.update(overrides)
    response = await client.post("/v1/workflows", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_transitions():
    assert can_transition(WorkflowStatus.DRAFT, WorkflowStatus.ACTIVE)
    assert can_transition(WorkflowStatus.PAUSED, WorkflowStatus.ACTIVE)
    assert not can_transition(WorkflowStatus.DRAFT, WorkflowStatus.COMPLETED)
    assert not can_transition(WorkflowStatus.COMPLETED, WorkflowStatus.ACTIVE)
    assert can_transition(WorkflowStatus.COMPLETED, WorkflowStatus.ARCHIVED)
    assert not can_transition(WorkflowStatus.ARCHIVED, WorkflowStatus.ARCHIVED)


async def test_template_and_association_rules(client, seed):
    tied = await client.post(
        "/v1/workflows",
        json={"name": "Move-in", "workflow_type": "onboarding", "is_template": True, "association_id": str(seed.association.id)},
    )
    assert tied.json() == {"error": "Templates cannot belong to an association"}

    loose = await client.post("/v1/workflows", json={"name": "Move-in", "workflow_type": "onboarding"})
    assert loose.json() == {"error": "association_id is required for a workflow"}

    unnamed = await client.post(
        "/v1/workflows",
        json={"name": "Move-in", "workflow_type": "onboarding", "is_template": True, "steps": [{"name": " "}]},
    )
    assert unnamed.status_code == 400
    assert "Step 1 needs a name" in unnamed.json()["error"]


async def test_instantiate_copies_template_into_association(client, seed):
    template = await _create_template(client)

    response = await client.post(
        f"/v1/workflows/{template['id']}/instantiate",
        json={"association_id": str(seed.association.id)},
    )

    assert response.status_code == 201, response.text
    workflow = response.json()
    assert workflow["template_id"] == template["id"]
    assert workflow["association_id"] == str(seed.association.id)
    assert workflow["name"] == "Resale certificate"
    assert workflow["steps"] == STEPS
    assert workflow["status"] == "draft"
    assert workflow["is_template"] is False

    templates = (await client.get("/v1/workflows/templates")).json()
    workflows = (await client.get("/v1/workflows")).json()
    assert [t["id"] for t in templates] == [template["id"]]
    assert [w["id"] for w in workflows] == [workflow["id"]]


async def test_only_templates_can_be_instantiated(client, seed):
    template = await _create_template(client)
    copy = (await client.post(
        f"/v1/workflows/{template['id']}/instantiate",
        json={"association_id": str(seed.association.id), "name": "Resale for 12 Maple"},
    )).json()
    assert copy["name"] == "Resale for 12 Maple"

    response = await client.post(
        f"/v1/workflows/{copy['id']}/instantiate",
        json={"association_id": str(seed.association.id)},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Workflow is not a template"}


async def test_status_changes_follow_the_lifecycle(client, seed):
    template = await _create_template(client)
    workflow = (await client.post(
        f"/v1/workflows/{template['id']}/instantiate",
        json={"association_id": str(seed.association.id)},
    )).json()
    url = f"/v1/workflows/{workflow['id']}"

    jump = await client.post(f"{url}/status", json={"status": "completed"})
    assert jump.status_code == 400
    assert jump.json() == {"error": "Cannot change workflow from draft to completed"}

    for new_status in ("active", "paused", "active", "completed"):
        response = await client.post(f"{url}/status", json={"status": new_status})
        assert response.json()["status"] == new_status

    edit = await client.patch(url, json={"name": "Renamed"})
    assert edit.json() == {"error": "Cannot edit a completed workflow"}


async def test_delete_archives(client, seed):
    template = await _create_template(client)
    workflow = (await client.post(
        f"/v1/workflows/{template['id']}/instantiate",
        json={"association_id": str(seed.association.id)},
    )).json()

    assert (await client.delete(f"/v1/workflows/{workflow['id']}")).status_code == 204

    archived = (await client.get(f"/v1/workflows/{workflow['id']}")).json()
    assert archived["status"] == "archived"
    listed = (await client.get("/v1/workflows", params={"workflow_status": "archived"})).json()
    assert [w["id"] for w in listed] == [workflow["id"]]
