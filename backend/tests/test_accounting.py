"""General ledger and financial statement tests."""
from hoa_portal.models.enums import GLAccountType
from hoa_portal.services.ledger import balance_delta


async def _account(client, seed, code, name, account_type, category=None) -> dict:
    response = await client.post(
        "/v1/accounting/gl-accounts",
        json={
            "association_id": str(seed.association.id),
            "code": code,
            "name": name,
            "account_type": account_type,
            "category": category,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _entry(client, seed, entry_date, debit_account, credit_account, cents, post=True) -> dict:
    response = await client.post(
        "/v1/accounting/journal-entries",
        json={
            "association_id": str(seed.association.id),
            "entry_date": entry_date,
            "description": "Test entry",
            "lines": [
                {"gl_account_id": debit_account["id"], "debit_cents": cents},
                {"gl_account_id": credit_account["id"], "credit_cents": cents},
            ],
        },
    )
    assert response.status_code == 201, response.text
    entry = response.json()
    if post:
        entry = (await client.post(f"/v1/accounting/journal-entries/{entry['id']}/post")).json()
    return entry


async def _chart(client, seed) -> dict:
    return {
        "cash": await _account(client, seed, "1000", "Operating Cash", "asset"),
        "dues": await _account(client, seed, "4000", "Assessment Income", "revenue"),
        "landscaping": await _account(client, seed, "6300", "Landscaping", "expense"),
    }


def test_balance_delta_follows_normal_side():
    assert balance_delta(GLAccountType.ASSET, 500, 0) == 500
    assert balance_delta(GLAccountType.EXPENSE, 0, 200) == -200
    assert balance_delta(GLAccountType.REVENUE, 0, 500) == 500
    assert balance_delta(GLAccountType.LIABILITY, 300, 0) == -300


async def test_duplicate_account_code(client, seed):
    await _account(client, seed, "1000", "Operating Cash", "asset")

    response = await client.post(
        "/v1/accounting/gl-accounts",
        json={
            "association_id": str(seed.association.id),
            "code": "1000",
            "name": "Other Cash",
            "account_type": "asset",
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "GL account code 1000 already exists"


async def test_unbalanced_entry_is_rejected(client, seed):
    chart = await _chart(client, seed)

    response = await client.post(
        "/v1/accounting/journal-entries",
        json={
            "association_id": str(seed.association.id),
            "entry_date": "2026-01-15",
            "description": "Lopsided",
            "lines": [
                {"gl_account_id": chart["cash"]["id"], "debit_cents": 1000},
                {"gl_account_id": chart["dues"]["id"], "credit_cents": 900},
            ],
        },
    )

    assert response.status_code == 400
    assert "out of balance" in response.json()["error"]


async def test_posting_and_voiding_move_balances(client, seed):
    chart = await _chart(client, seed)

    draft = await _entry(client, seed, "2026-01-15", chart["cash"], chart["dues"], 120000, post=False)
    assert draft["status"] == "draft"
    assert draft["entry_number"] == "JE-2026-0001"
    cash = (await client.get(f"/v1/accounting/gl-accounts/{chart['cash']['id']}")).json()
    assert cash["balance_cents"] == 0

    posted = (await client.post(f"/v1/accounting/journal-entries/{draft['id']}/post")).json()
    assert posted["status"] == "posted"
    cash = (await client.get(f"/v1/accounting/gl-accounts/{chart['cash']['id']}")).json()
    dues = (await client.get(f"/v1/accounting/gl-accounts/{chart['dues']['id']}")).json()
    assert cash["balance_cents"] == 120000
    assert dues["balance_cents"] == 120000

    repost = await client.post(f"/v1/accounting/journal-entries/{draft['id']}/post")
    assert repost.status_code == 400

    voided = (await client.post(f"/v1/accounting/journal-entries/{draft['id']}/void")).json()
    assert voided["status"] == "void"
    cash = (await client.get(f"/v1/accounting/gl-accounts/{chart['cash']['id']}")).json()
    assert cash["balance_cents"] == 0


async def test_inactive_account_cannot_be_used(client, seed):
    chart = await _chart(client, seed)
    await client.patch(f"/v1/accounting/gl-accounts/{chart['dues']['id']}", json={"is_active": False})

    response = await client.post(
        "/v1/accounting/journal-entries",
        json={
            "association_id": str(seed.association.id),
            "entry_date": "2026-01-15",
            "description": "Dues",
            "lines": [
                {"gl_account_id": chart["cash"]["id"], "debit_cents": 100},
                {"gl_account_id": chart["dues"]["id"], "credit_cents": 100},
            ],
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "GL account is inactive: 4000"


async def test_income_statement_covers_only_the_period(client, seed):
    chart = await _chart(client, seed)
    await _entry(client, seed, "2025-12-20", chart["cash"], chart["dues"], 50000)
    await _entry(client, seed, "2026-01-10", chart["cash"], chart["dues"], 120000)
    await _entry(client, seed, "2026-01-20", chart["landscaping"], chart["cash"], 30000)
    await _entry(client, seed, "2026-01-25", chart["cash"], chart["dues"], 99999, post=False)

    response = await client.post(
        "/v1/accounting/statements",
        json={
            "association_id": str(seed.association.id),
            "statement_type": "income",
            "period_start": "2026-01-01",
            "period_end": "2026-01-31",
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["revenue"]["total_cents"] == 120000
    assert data["expenses"]["total_cents"] == 30000
    assert data["net_income_cents"] == 90000
    assert data["statement_name"] == "Income Statement"


async def test_balance_sheet_is_cumulative(client, seed):
    chart = await _chart(client, seed)
    await _entry(client, seed, "2025-12-20", chart["cash"], chart["dues"], 50000)
    await _entry(client, seed, "2026-01-10", chart["cash"], chart["dues"], 120000)

    response = await client.post(
        "/v1/accounting/statements",
        json={
            "association_id": str(seed.association.id),
            "statement_type": "balance_sheet",
            "period_start": "2026-01-01",
            "period_end": "2026-01-31",
        },
    )

    data = response.json()["data"]
    assert data["assets"]["total_cents"] == 170000
    assert data["retained_earnings_cents"] == 170000
    assert data["total_liabilities_and_equity_cents"] == data["assets"]["total_cents"]


async def test_unknown_statement_type(client, seed):
    response = await client.post(
        "/v1/accounting/statements",
        json={
            "association_id": str(seed.association.id),
            "statement_type": "trial_balance",
            "period_start": "2026-01-01",
            "period_end": "2026-01-31",
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid statement type"


async def test_statement_pdf_download(client, seed):
    await _chart(client, seed)
    statement = (await client.post(
        "/v1/accounting/statements",
        json={
            "association_id": str(seed.association.id),
            "statement_type": "income",
            "period_start": "2026-01-01",
            "period_end": "2026-01-31",
        },
    )).json()

    response = await client.get(f"/v1/accounting/statements/{statement['id']}/pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


async def test_staff_cannot_touch_the_books(client, seed, current_user):
    current_user.org_role = "STAFF"

    response = await client.get(
        "/v1/accounting/gl-accounts", params={"association_id": str(seed.association.id)}
    )

    assert response.status_code == 403
    assert response.json() == {"error": "Accounting privileges required"}


async def test_entry_numbers_restart_each_year(client, seed):
    chart = await _chart(client, seed)
    await _entry(client, seed, "2026-11-02", chart["cash"], chart["dues"], 100, post=False)
    await _entry(client, seed, "2026-12-15", chart["cash"], chart["dues"], 100, post=False)

    next_year = await _entry(client, seed, "2027-01-04", chart["cash"], chart["dues"], 100, post=False)
    same_year = await _entry(client, seed, "2026-12-30", chart["cash"], chart["dues"], 100, post=False)

    assert next_year["entry_number"] == "JE-2027-0001"
    assert same_year["entry_number"] == "JE-2026-0003"


async def test_cash_flow_statement(client, seed):
    chart = await _chart(client, seed)
    reserve = await _account(client, seed, "1500", "Reserve CD", "asset", category="investing")
    loan = await _account(client, seed, "2500", "Roof Loan", "liability", category="financing")
    await _entry(client, seed, "2026-01-10", chart["cash"], chart["dues"], 120000)
    await _entry(client, seed, "2026-01-20", chart["landscaping"], chart["cash"], 30000)
    await _entry(client, seed, "2026-01-22", reserve, chart["cash"], 20000)
    await _entry(client, seed, "2026-01-28", chart["cash"], loan, 50000)

    response = await client.post(
        "/v1/accounting/statements",
        json={
            "association_id": str(seed.association.id),
            "statement_type": "cash_flow",
            "period_start": "2026-01-01",
            "period_end": "2026-01-31",
        },
    )

    data = response.json()["data"]
    assert data["operating"]["total_cents"] == 90000
    assert data["investing"]["total_cents"] == -20000
    assert data["financing"]["total_cents"] == 50000
    assert data["net_cash_flow_cents"] == 120000
