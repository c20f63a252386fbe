"""Community poll tests."""
import uuid
from datetime import datetime, timedelta

from hoa_portal.models.poll import CommunityPoll, PollResponse
from hoa_portal.services.polls import tally


async def _create_poll(client, seed, options=None) -> dict:
    response = await client.post(
        "/v1/polls",
        json={
            "association_id": str(seed.association.id),
            "title": "Repaint the clubhouse?",
            "options": options or ["Yes", "No", "Abstain"],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_vote_and_change_vote(client, seed):
    poll = await _create_poll(client, seed)

    first = await client.post(f"/v1/polls/{poll['id']}/vote", json={"selected_option": "Yes"})
    assert first.json() == {"poll_id": poll["id"], "selected_option": "Yes", "changed": True}

    second = await client.post(f"/v1/polls/{poll['id']}/vote", json={"selected_option": "No"})
    assert second.json()["changed"] is True

    same = await client.post(f"/v1/polls/{poll['id']}/vote", json={"selected_option": "No"})
    assert same.json()["changed"] is False

    results = (await client.get(f"/v1/polls/{poll['id']}/results")).json()
    assert results["total_votes"] == 1
    assert results["user_vote"] == "No"
    assert [(r["option"], r["votes"]) for r in results["results"]] == [("Yes", 0), ("No", 1), ("Abstain", 0)]


async def test_vote_for_unknown_option(client, seed):
    poll = await _create_poll(client, seed)

    response = await client.post(f"/v1/polls/{poll['id']}/vote", json={"selected_option": "Maybe"})

    assert response.status_code == 400
    assert response.json()["error"] == "Selected option is not one of the poll's options"


async def test_closed_poll_rejects_votes(client, seed):
    poll = await _create_poll(client, seed)

    closed = await client.post(f"/v1/polls/{poll['id']}/close")
    assert closed.json()["is_closed"] is True

    vote = await client.post(f"/v1/polls/{poll['id']}/vote", json={"selected_option": "Yes"})
    assert vote.status_code == 400
    assert vote.json()["error"] == "This poll is closed"

    again = await client.post(f"/v1/polls/{poll['id']}/close")
    assert again.status_code == 400


async def test_poll_needs_two_distinct_options(client, seed):
    single = await client.post(
        "/v1/polls",
        json={"association_id": str(seed.association.id), "title": "One", "options": ["Yes"]},
    )
    assert single.status_code == 400

    duplicate = await client.post(
        "/v1/polls",
        json={"association_id": str(seed.association.id), "title": "Dup", "options": ["Yes", "yes"]},
    )
    assert duplicate.status_code == 400


async def test_open_only_filter(client, seed, db):
    open_poll = await _create_poll(client, seed)
    expired = CommunityPoll(
        association_id=seed.association.id,
        title="Last year's budget",
        options=["Approve", "Reject"],
        closes_at=datetime.utcnow() - timedelta(days=1),
        created_by=seed.user.id,
    )
    db.add(expired)
    await db.commit()

    response = await client.get(
        "/v1/polls", params={"association_id": str(seed.association.id), "open_only": True}
    )

    assert [p["id"] for p in response.json()] == [open_poll["id"]]


async def test_outsider_cannot_see_poll(client, seed, current_user):
    poll = await _create_poll(client, seed)
    current_user.org_id = uuid.uuid4()

    response = await client.get(f"/v1/polls/{poll['id']}")

    assert response.status_code == 404


def test_tally_ignores_votes_for_removed_options():
    poll = CommunityPoll(id=uuid.uuid4(), options=["A", "B"], is_closed=False, closes_at=None)
    voter = uuid.uuid4()
    votes = [
        PollResponse(user_id=voter, selected_option="A"),
        PollResponse(user_id=uuid.uuid4(), selected_option="A"),
        PollResponse(user_id=uuid.uuid4(), selected_option="B"),
        PollResponse(user_id=uuid.uuid4(), selected_option="C"),
    ]

    results = tally(poll, votes, voter)

    assert results.total_votes == 3
    assert [r.percentage for r in results.results] == [66.7, 33.3]
    assert results.user_vote == "A"
    assert results.is_open is True
