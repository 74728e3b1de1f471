from decimal import Decimal

import pytest

from fleetdesk.config import settings
from fleetdesk.models import Bank, Transaction, TransactionTypeEnum
from fleetdesk.services import ledger


def _balance(client, bank_id):
    return client.get(f"/api/banks/{bank_id}").json()["balance"]


def test_opening_balance_is_recorded_as_bank_update(client, db_session, bank):
    assert bank["balance"] == 50000
    assert bank["openingBalance"] == 50000

    transactions = client.get(f"/api/transactions?bankId={bank['id']}").json()["data"]
    assert len(transactions) == 1
    assert transactions[0]["type"] == "BANK_UPDATE"
    assert transactions[0]["category"] == "Initial Balance"
    assert transactions[0]["balanceAfter"] == 50000
    assert ledger.replay_balance(db_session, bank["id"]) == Decimal("50000.00")


def test_duplicate_account_number_rejected(client, app_user, bank):
    response = client.post(
        "/api/banks",
        json={
            "bankName": "Other",
            "accountNumber": bank["accountNumber"],
            "appUserId": app_user["id"],
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_KEY"


def test_budget_allocation_debits_bank_and_logs_transaction(
    client, app_user, make_bank, driver
):
    bank = make_bank(balance=1000)

    response = client.post(
        "/api/driver-budgets",
        json={
            "appUserId": app_user["id"],
            "bankId": bank["id"],
            "driverId": driver["id"],
            "dailyBudgetAmount": 300,
            "date": "2026-03-01T09:00:00",
        },
    )

    assert response.status_code == 201, response.text
    assert _balance(client, bank["id"]) == 700
    budget_txns = client.get(
        f"/api/transactions?bankId={bank['id']}&type=DRIVER_BUDGET"
    ).json()["data"]
    assert len(budget_txns) == 1
    assert budget_txns[0]["amount"] == 300
    assert budget_txns[0]["balanceAfter"] == 700

    expenses = client.get(f"/api/expenses?bankId={bank['id']}").json()
    assert expenses["total"] == 1
    assert expenses["totalAmount"] == 300


def test_transfer_moves_money_between_banks(client, db_session, make_bank):
    source = make_bank(balance=1000, name="Source")
    target = make_bank(balance=0, name="Target")

    response = client.post(
        "/api/bank-transfers",
        json={"fromBankId": source["id"], "toBankId": target["id"], "amount": 400},
    )

    assert response.status_code == 201, response.text
    assert response.json()["status"] == "COMPLETED"
    assert _balance(client, source["id"]) == 600
    assert _balance(client, target["id"]) == 400
    assert ledger.replay_balance(db_session, source["id"]) == Decimal("600.00")
    assert ledger.replay_balance(db_session, target["id"]) == Decimal("400.00")


@pytest.mark.parametrize(
    "amount, same_bank, code",
    [
        (5000, False, "INSUFFICIENT_BALANCE"),
        (0, False, "VALIDATION_ERROR"),
        (100, True, "VALIDATION_ERROR"),
    ],
)
def test_transfer_rejections_leave_balances(client, make_bank, amount, same_bank, code):
    source = make_bank(balance=1000, name="Source")
    target = source if same_bank else make_bank(balance=0, name="Target")

    response = client.post(
        "/api/bank-transfers",
        json={"fromBankId": source["id"], "toBankId": target["id"], "amount": amount},
    )

    assert response.status_code == 400
    assert response.json()["code"] == code
    assert _balance(client, source["id"]) == 1000
    assert client.get("/api/bank-transfers").json()["total"] == 0


def test_expense_beyond_balance_writes_nothing(client, db_session, app_user, make_bank):
    bank = make_bank(balance=100)

    response = client.post(
        "/api/expenses",
        json={
            "appUserId": app_user["id"],
            "bankId": bank["id"],
            "category": "Office",
            "amount": 250,
            "date": "2026-03-01T10:00:00",
        },
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "INSUFFICIENT_BALANCE"
    assert body["bankId"] == bank["id"]
    assert _balance(client, bank["id"]) == 100
    assert client.get("/api/expenses").json()["total"] == 0
    assert db_session.query(Transaction).count() == 1


def test_income_update_and_delete_keep_replay_in_step(client, db_session, app_user, bank):
    created = client.post(
        "/api/income",
        json={
            "appUserId": app_user["id"],
            "bankId": bank["id"],
            "category": "Consulting",
            "amount": 1200,
            "date": "2026-03-04T10:00:00",
        },
    ).json()
    assert _balance(client, bank["id"]) == 51200

    response = client.put(f"/api/income/{created['id']}", json={"amount": 800})
    assert response.status_code == 200, response.text
    assert _balance(client, bank["id"]) == 50800
    db_session.expire_all()
    assert ledger.replay_balance(db_session, bank["id"]) == Decimal("50800.00")

    response = client.delete(f"/api/income/{created['id']}")
    assert response.status_code == 200
    assert _balance(client, bank["id"]) == 50000
    db_session.expire_all()
    assert ledger.replay_balance(db_session, bank["id"]) == Decimal("50000.00")
    income_txns = db_session.query(Transaction).filter(
        Transaction.type == TransactionTypeEnum.INCOME
    )
    assert income_txns.count() == 0


def test_deactivated_bank_rejects_transfers(client, make_bank):
    source = make_bank(balance=1000, name="Source")
    target = make_bank(balance=0, name="Target")
    assert client.delete(f"/api/banks/{target['id']}").status_code == 200

    response = client.post(
        "/api/bank-transfers",
        json={"fromBankId": source["id"], "toBankId": target["id"], "amount": 10},
    )

    assert response.status_code == 400
    assert client.get("/api/banks?activeOnly=true").json()["total"] == 1


def test_integrity_report_is_clean_after_mixed_activity(
    client, monkeypatch, app_user, make_bank, driver
):
    monkeypatch.setattr(settings, "debug", True)
    source = make_bank(balance=5000, name="Source")
    target = make_bank(balance=100, name="Target")
    client.post(
        "/api/bank-transfers",
        json={"fromBankId": source["id"], "toBankId": target["id"], "amount": 700},
    )
    client.post(
        "/api/driver-budgets",
        json={
            "appUserId": app_user["id"],
            "bankId": target["id"],
            "driverId": driver["id"],
            "dailyBudgetAmount": 500,
            "date": "2026-03-01T09:00:00",
        },
    )

    report = client.get("/api/debug/integrity").json()

    assert report == {"balanceDrift": [], "negativeFuel": [], "fuelMismatch": []}


def test_integrity_report_hidden_outside_debug(client, monkeypatch):
    monkeypatch.setattr(settings, "debug", False)
    assert client.get("/api/debug/integrity").status_code == 404


def test_integrity_report_flags_drift(client, db_session, monkeypatch, bank):
    monkeypatch.setattr(settings, "debug", True)
    row = db_session.get(Bank, bank["id"])
    row.balance = Decimal("49999.00")
    db_session.commit()

    drift = client.get("/api/debug/integrity").json()["balanceDrift"]

    assert drift == [{"bankId": bank["id"], "balance": "49999.00", "replayed": "50000.00"}]


def test_balances_replay_across_fuel_maintenance_and_trip_income(
    client, db_session, monkeypatch, app_user, bank, make_bank, vehicle, fill_up, trip_payload
):
    monkeypatch.setattr(settings, "debug", True)
    freight = make_bank(balance=2000, name="Freight Account")
    assert fill_up().status_code == 201
    client.post(
        "/api/maintenance",
        json={
            "appUserId": app_user["id"],
            "bankId": bank["id"],
            "vehicleId": vehicle["id"],
            "category": "Oil Change",
            "categoryAmount": 1500,
            "startKm": 1000,
            "targetKm": 150,
        },
    )
    trip = client.post(
        "/api/trips",
        json=trip_payload(status="Completed", advance=1000, bankId=freight["id"]),
    )
    assert trip.status_code == 201, trip.text
    alert = client.get("/api/maintenance/notifications").json()[0]
    assert client.post(f"/api/maintenance/{alert['id']}/accept").status_code == 200
    client.post(
        "/api/bank-transfers",
        json={"fromBankId": freight["id"], "toBankId": bank["id"], "amount": 2500},
    )

    assert _balance(client, bank["id"]) == 50000 - 9000 - 1500 + 2500
    assert _balance(client, freight["id"]) == 2000 + 1000 - 2500
    for bank_id in (bank["id"], freight["id"]):
        stored = db_session.get(Bank, bank_id).balance
        assert ledger.replay_balance(db_session, bank_id) == Decimal(stored)
    mirrors = db_session.query(Transaction).filter(Transaction.mirror.is_(True)).count()
    assert mirrors == 1

    report = client.get("/api/debug/integrity").json()
    assert report == {"balanceDrift": [], "negativeFuel": [], "fuelMismatch": []}
