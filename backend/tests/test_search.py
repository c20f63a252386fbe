"""Global search tests."""
import uuid

import pytest

from hoa_portal.core.errors import ServiceError
from hoa_portal.models import Association, Lead, Vendor
from hoa_portal.schemas.search import SearchResult
from hoa_portal.services.search import normalize_query, rank_results, typo_suggestions


def _result(title: str, result_type: str = "association") -> SearchResult:
    return SearchResult(
        id=uuid.uuid4(),
        title=title,
        subtitle="",
        type=result_type,
        path="/",
        matched_field="name",
    )


def test_ranking_prefers_exact_then_prefix_and_keeps_type_order():
    results = [
        _result("Old Maple Lane", "association"),
        _result("Maple Ridge HOA", "association"),
        _result("maple", "vendor"),
        _result("Maple Tree Care", "vendor"),
    ]

    ranked = rank_results(results, "maple", limit=10)

    assert [r.title for r in ranked] == ["maple", "Maple Ridge HOA", "Maple Tree Care", "Old Maple Lane"]
    assert len(rank_results(results, "maple", limit=2)) == 2


def test_typo_suggestions():
    assert typo_suggestions("propety tax") == ["property tax"]
    assert typo_suggestions("vender invocie") == ["vendor invoice", "vendor invocie", "vender invoice"]
    assert typo_suggestions("pool") == []


@pytest.mark.parametrize("query", ["", " a ", "x" * 101])
def test_query_length_bounds(query):
    with pytest.raises(ServiceError) as exc:
        normalize_query(query)
    assert exc.value.status_code == 400


async def test_search_is_scoped_to_the_organization(client, seed, db):
    other_org = uuid.uuid4()
    db.add_all([
        Vendor(org_id=seed.org.id, name="Maple Landscaping", service_type="landscaping"),
        Lead(org_id=seed.org.id, first_name="Mark", last_name="Maple", company="Maple Court Condos"),
        Association(org_id=other_org, name="Maple Heights HOA"),
    ])
    await db.commit()

    response = await client.get("/v1/search", params={"q": "maple"})

    assert response.status_code == 200
    body = response.json()
    titles = [r["title"] for r in body["results"]]
    assert "Maple Heights HOA" not in titles
    assert {"Maple Ridge HOA", "12 Maple Ridge Dr", "Maple Landscaping", "Mark Maple"} <= set(titles)
    assert body["total"] == len(body["results"])
    assert body["suggestions"] == []


async def test_search_rejects_short_query(client, seed):
    response = await client.get("/v1/search", params={"q": "m"})

    assert response.status_code == 400
    assert response.json()["error"] == "Search query must be between 2 and 100 characters"
