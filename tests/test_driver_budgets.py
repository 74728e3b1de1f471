import pytest


@pytest.fixture()
def allocate(client, app_user, bank, driver):
    def _allocate(amount, date="2026-03-01T09:00:00"):
        return client.post(
            "/api/driver-budgets",
            json={
                "appUserId": app_user["id"],
                "bankId": bank["id"],
                "driverId": driver["id"],
                "dailyBudgetAmount": amount,
                "date": date,
            },
        )

    return _allocate


def test_new_allocation_carries_remaining_forward(client, bank, driver, allocate):
    first = allocate(1000).json()

    response = allocate(500, date="2026-03-02T09:00:00")

    assert response.status_code == 201, response.text
    second = response.json()
    assert second["previousId"] == first["id"]
    assert second["allocatedAmount"] == 500
    assert second["carriedForward"] == 1000
    assert second["dailyBudgetAmount"] == 1500
    assert second["remainingBudgetAmount"] == 1500
    assert client.get(f"/api/driver-budgets/{first['id']}").json()["remainingBudgetAmount"] == 0
    # Only the new portion leaves the bank.
    assert client.get(f"/api/banks/{bank['id']}").json()["balance"] == 48500
    assert client.get(f"/api/driver-budgets/latest/{driver['id']}").json()["id"] == second["id"]


def test_allocation_beyond_balance_is_rejected(client, bank, allocate):
    response = allocate(60000)

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_BALANCE"
    assert client.get("/api/driver-budgets").json()["total"] == 0


def test_budget_expense_cannot_be_edited_directly(client, allocate):
    budget = allocate(300).json()

    response = client.delete(f"/api/expenses/{budget['expenseId']}")

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_delete_latest_restores_previous(client, bank, driver, allocate):
    first = allocate(1000).json()
    second = allocate(500, date="2026-03-02T09:00:00").json()

    assert client.delete(f"/api/driver-budgets/{first['id']}").status_code == 400

    response = client.delete(f"/api/driver-budgets/{second['id']}")

    assert response.status_code == 200
    assert client.get(f"/api/driver-budgets/{first['id']}").json()["remainingBudgetAmount"] == 1000
    assert client.get(f"/api/banks/{bank['id']}").json()["balance"] == 49000
    expenses = client.get("/api/expenses").json()
    assert expenses["total"] == 1
    assert expenses["totalAmount"] == 1000


def test_latest_without_budget_is_not_found(client, driver):
    assert client.get(f"/api/driver-budgets/latest/{driver['id']}").status_code == 404
