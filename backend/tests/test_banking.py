"""Bank account, statement upload and reconciliation tests."""
from datetime import date
from types import SimpleNamespace

from hoa_portal.services.reconciliation import compute_balances


async def _bank_account(client, seed, balance=0) -> dict:
    response = await client.post(
        "/v1/banking/accounts",
        json={
            "association_id": str(seed.association.id),
            "name": "Operating Account",
            "institution": "First Community Bank",
            "account_number_last4": "4821",
            "current_balance_cents": balance,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _transaction(client, account, day, cents, description="Deposit") -> dict:
    response = await client.post(
        f"/v1/banking/accounts/{account['id']}/transactions",
        json={"transaction_date": day, "description": description, "amount_cents": cents},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_compute_balances_counts_cleared_items_up_to_statement_date():
    transactions = [
        SimpleNamespace(amount_cents=50000, is_cleared=True, transaction_date=date(2026, 1, 5)),
        SimpleNamespace(amount_cents=-12000, is_cleared=True, transaction_date=date(2026, 1, 20)),
        SimpleNamespace(amount_cents=-3000, is_cleared=False, transaction_date=date(2026, 1, 22)),
        SimpleNamespace(amount_cents=8000, is_cleared=True, transaction_date=date(2026, 2, 2)),
    ]

    reconciled, difference = compute_balances(100000, 140000, date(2026, 1, 31), transactions)

    assert reconciled == 138000
    assert difference == 2000


async def test_transactions_move_the_running_balance(client, seed):
    account = await _bank_account(client, seed, balance=10000)
    await _transaction(client, account, "2026-01-05", 50000)
    await _transaction(client, account, "2026-01-06", -2500, "Pool service")

    refreshed = (await client.get(f"/v1/banking/accounts/{account['id']}")).json()

    assert refreshed["current_balance_cents"] == 57500


async def test_statement_upload_requires_statement_date(client, seed):
    account = await _bank_account(client, seed)

    response = await client.post(
        f"/v1/banking/accounts/{account['id']}/statements/upload",
        json={"file_name": "jan.pdf", "mime_type": "application/pdf", "file_size_bytes": 2048},
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("statement_date")


async def test_statement_upload_rejects_unsupported_type(client, seed):
    account = await _bank_account(client, seed)

    response = await client.post(
        f"/v1/banking/accounts/{account['id']}/statements/upload",
        json={
            "statement_date": "2026-01-31",
            "file_name": "jan.exe",
            "mime_type": "application/x-msdownload",
            "file_size_bytes": 2048,
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Unsupported mime type: application/x-msdownload"


async def test_statement_upload_and_confirm(client, seed, storage_provider):
    account = await _bank_account(client, seed)

    upload = await client.post(
        f"/v1/banking/accounts/{account['id']}/statements/upload",
        json={
            "statement_date": "2026-01-31",
            "file_name": "jan.pdf",
            "mime_type": "application/pdf",
            "file_size_bytes": 2048,
        },
    )
    assert upload.status_code == 201
    body = upload.json()
    assert body["object_path"].startswith(f"associations/{seed.association.id}/bank-statements/")
    assert body["object_path"].endswith(".pdf")

    missing = await client.post(f"/v1/banking/statements/{body['statement_id']}/confirm")
    assert missing.status_code == 400
    assert missing.json()["error"] == "Upload not found in storage"

    storage_provider.uploaded.add(body["object_path"])
    confirmed = await client.post(f"/v1/banking/statements/{body['statement_id']}/confirm")
    assert confirmed.json()["status"] == "uploaded"
    assert confirmed.json()["uploaded_at"] is not None

    statements = (await client.get(f"/v1/banking/accounts/{account['id']}/statements")).json()
    assert [s["status"] for s in statements] == ["uploaded"]


async def test_reconciliation_completes_only_at_zero_difference(client, seed):
    account = await _bank_account(client, seed)
    deposit = await _transaction(client, account, "2026-01-05", 50000)
    check = await _transaction(client, account, "2026-01-18", -12000, "Landscaper")
    await _transaction(client, account, "2026-02-03", 7000, "February dues")

    created = await client.post(
        "/v1/banking/reconciliations",
        json={
            "bank_account_id": account["id"],
            "statement_date": "2026-01-31",
            "beginning_balance_cents": 100000,
            "statement_balance_cents": 138000,
        },
    )
    assert created.status_code == 201
    reconciliation = created.json()
    assert reconciliation["reconciled_balance_cents"] == 100000
    assert reconciliation["difference_cents"] == 38000

    early = await client.post(f"/v1/banking/reconciliations/{reconciliation['id']}/complete")
    assert early.status_code == 400
    assert early.json()["details"] == {"difference_cents": 38000}

    url = f"/v1/banking/reconciliations/{reconciliation['id']}/clear"
    await client.post(url, json={"transaction_id": deposit["id"]})
    balanced = (await client.post(url, json={"transaction_id": check["id"]})).json()
    assert balanced["reconciled_balance_cents"] == 138000
    assert balanced["difference_cents"] == 0

    completed = await client.post(f"/v1/banking/reconciliations/{reconciliation['id']}/complete")
    assert completed.json()["status"] == "completed"

    locked = await client.post(url, json={"transaction_id": check["id"]})
    assert locked.status_code == 400


async def test_toggling_twice_unclears_the_transaction(client, seed):
    account = await _bank_account(client, seed)
    deposit = await _transaction(client, account, "2026-01-05", 50000)
    reconciliation = (await client.post(
        "/v1/banking/reconciliations",
        json={
            "bank_account_id": account["id"],
            "statement_date": "2026-01-31",
            "statement_balance_cents": 50000,
        },
    )).json()

    url = f"/v1/banking/reconciliations/{reconciliation['id']}/clear"
    assert (await client.post(url, json={"transaction_id": deposit["id"]})).json()["difference_cents"] == 0
    assert (await client.post(url, json={"transaction_id": deposit["id"]})).json()["difference_cents"] == 50000

    transactions = (await client.get(f"/v1/banking/accounts/{account['id']}/transactions")).json()
    assert transactions[0]["is_cleared"] is False
    assert transactions[0]["reconciliation_id"] is None


async def test_later_transactions_stay_available_for_the_next_period(client, seed):
    account = await _bank_account(client, seed)
    january = await _transaction(client, account, "2026-01-10", 50000)
    february = await _transaction(client, account, "2026-02-05", 7000, "February dues")

    first = (await client.post(
        "/v1/banking/reconciliations",
        json={
            "bank_account_id": account["id"],
            "statement_date": "2026-01-31",
            "statement_balance_cents": 50000,
        },
    )).json()
    url = f"/v1/banking/reconciliations/{first['id']}/clear"
    await client.post(url, json={"transaction_id": january["id"]})

    too_late = await client.post(url, json={"transaction_id": february["id"]})
    assert too_late.status_code == 400
    assert too_late.json()["error"] == "Transaction is dated after the statement date"

    completed = await client.post(f"/v1/banking/reconciliations/{first['id']}/complete")
    assert completed.json()["status"] == "completed"

    second = (await client.post(
        "/v1/banking/reconciliations",
        json={
            "bank_account_id": account["id"],
            "statement_date": "2026-02-28",
            "beginning_balance_cents": 50000,
            "statement_balance_cents": 57000,
        },
    )).json()
    assert second["difference_cents"] == 7000

    cleared = await client.post(
        f"/v1/banking/reconciliations/{second['id']}/clear", json={"transaction_id": february["id"]}
    )
    assert cleared.status_code == 200
    assert cleared.json()["difference_cents"] == 0
    assert (await client.post(f"/v1/banking/reconciliations/{second['id']}/complete")).status_code == 200
