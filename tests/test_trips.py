from decimal import Decimal

import pytest

from fleetdesk.config import settings
from fleetdesk.models import Transaction, TransactionTypeEnum
from fleetdesk.services import ledger


@pytest.fixture()
def fuelled(fill_up):
    """One fill-up: 100 L at 90, truck average 10 km/L."""
    response = fill_up()
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def budget(client, app_user, bank, driver):
    response = client.post(
        "/api/driver-budgets",
        json={
            "appUserId": app_user["id"],
            "bankId": bank["id"],
            "driverId": driver["id"],
            "dailyBudgetAmount": 2000,
            "date": "2026-03-01T09:00:00",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _balance(client, bank_id):
    return client.get(f"/api/banks/{bank_id}").json()["balance"]


def _trip_invoices(client, trip):
    invoices = client.get("/api/invoices?limit=100").json()["data"]
    return [invoice for invoice in invoices if invoice["tripId"] == trip["id"]]


def test_draft_trip_prices_fuel_and_charges_budget(
    client, bank, fuelled, budget, trip_payload
):
    response = client.post("/api/trips", json=trip_payload())

    assert response.status_code == 201, response.text
    trip = response.json()
    assert trip["tripNo"].startswith("TRIP")
    assert trip["date"] == ["2026-03-02", "2026-03-03"]
    assert trip["totalKm"] == 200
    assert trip["fuelNeeded"] == 20
    assert trip["tripRouteCost"] == 5000
    assert trip["tripExpenses"] == 300
    assert trip["tripDieselCost"] == 1800
    assert trip["remainingAmount"] == 2900
    assert trip["fuelTrackingId"] == fuelled["id"]
    assert trip["fuelConsumed"] is True
    assert trip["driverBudgetId"] == budget["id"]
    assert trip["budgetDeducted"] == 300

    route = trip["routeWiseExpenseBreakdown"][0]
    assert route["routeAmount"] == 5000
    assert route["totalExpense"] == 300
    assert route["routeStatus"] == "Pending"

    fuel = client.get(f"/api/fuel-tracking/{fuelled['id']}").json()
    assert fuel["remainingFuelQuantity"] == 80
    remaining_budget = client.get(f"/api/driver-budgets/{budget['id']}").json()
    assert remaining_budget["remainingBudgetAmount"] == 1700

    invoices = _trip_invoices(client, trip)
    assert len(invoices) == 1
    assert invoices[0]["lrNo"] == f"LR{trip['tripNo']}1"
    assert invoices[0]["status"] == "Pending"
    assert invoices[0]["total"] == 5000
    assert invoices[0]["rows"][0]["truckNo"] == "MH12AB1234"

    # Nothing is credited until a route completes.
    assert client.get("/api/income").json()["total"] == 0
    assert _balance(client, bank["id"]) == 50000 - 9000 - 2000


def test_completing_a_trip_credits_income_with_mirror(
    client, db_session, bank, driver, fuelled, trip_payload
):
    trip = client.post("/api/trips", json=trip_payload()).json()
    before = _balance(client, bank["id"])

    response = client.put(f"/api/trips/{trip['id']}", json={"status": "Completed"})

    assert response.status_code == 200, response.text
    completed = response.json()
    assert completed["status"] == "Completed"
    assert completed["routeWiseExpenseBreakdown"][0]["routeStatus"] == "Completed"
    assert _balance(client, bank["id"]) == before + 5000

    incomes = client.get("/api/income").json()
    assert incomes["total"] == 1
    income = incomes["data"][0]
    assert income["tripId"] == trip["id"]
    assert income["category"] == "Trip Income"
    assert income["amount"] == 5000

    mirror = db_session.query(Transaction).filter(Transaction.mirror.is_(True)).one()
    assert mirror.type == TransactionTypeEnum.BANK_UPDATE
    assert mirror.mirror_of_id == income["transactionId"]
    assert ledger.replay_balance(db_session, bank["id"]) == Decimal(str(before + 5000))

    invoice = _trip_invoices(client, trip)[0]
    assert invoice["status"] == "Paid"

    attendance = client.get(f"/api/attendance?driverId={driver['id']}").json()["data"]
    assert sorted(record["date"] for record in attendance) == ["2026-03-02", "2026-03-03"]
    assert {record["status"] for record in attendance} == {"On Trip"}

    # Fuel was drawn once, at creation.
    fuel = client.get(f"/api/fuel-tracking/{fuelled['id']}").json()
    assert fuel["remainingFuelQuantity"] == 80


def test_advance_is_credited_and_invoice_left_unpaid(client, bank, fuelled, trip_payload):
    response = client.post(
        "/api/trips", json=trip_payload(status="Completed", advance=1000)
    )

    assert response.status_code == 201, response.text
    trip = response.json()
    incomes = client.get("/api/income").json()["data"]
    assert [income["amount"] for income in incomes] == [1000]
    assert "Advance income" in incomes[0]["description"]

    invoice = _trip_invoices(client, trip)[0]
    assert invoice["status"] == "Unpaid"
    assert invoice["advanceAmount"] == 1000
    assert invoice["remainingAmount"] == 4000


def test_reopening_a_completed_trip_unwinds_the_cascade(
    client, db_session, bank, driver, fuelled, trip_payload
):
    trip = client.post("/api/trips", json=trip_payload(status="Completed")).json()
    assert client.get("/api/income").json()["total"] == 1
    before_completion = 50000 - 9000

    response = client.put(f"/api/trips/{trip['id']}", json={"status": "Draft"})

    assert response.status_code == 200, response.text
    reopened = response.json()
    assert reopened["fuelConsumed"] is False
    assert reopened["routeWiseExpenseBreakdown"][0]["routeStatus"] == "Pending"
    assert client.get("/api/income").json()["total"] == 0
    assert _balance(client, bank["id"]) == before_completion
    assert db_session.query(Transaction).filter(Transaction.mirror.is_(True)).count() == 0
    assert client.get(f"/api/attendance?driverId={driver['id']}").json()["total"] == 0
    assert client.get(f"/api/fuel-tracking/{fuelled['id']}").json()["remainingFuelQuantity"] == 100

    invoices = _trip_invoices(client, trip)
    assert len(invoices) == 1
    assert invoices[0]["status"] == "Pending"

    # Completing again draws the fuel again.
    again = client.put(f"/api/trips/{trip['id']}", json={"status": "Completed"}).json()
    assert again["fuelConsumed"] is True
    assert client.get(f"/api/fuel-tracking/{fuelled['id']}").json()["remainingFuelQuantity"] == 80


def test_changing_routes_rebalances_budget_and_invoices(
    client, fuelled, budget, trip_payload
):
    trip = client.post("/api/trips", json=trip_payload()).json()
    payload = trip_payload()
    second_route = dict(
        payload["routeWiseExpenseBreakdown"][0],
        routeNumber=2,
        startLocation="Nashik",
        endLocation="Surat",
        expenses=[{"category": "Food", "amount": 200}],
    )

    response = client.put(
        f"/api/trips/{trip['id']}",
        json={"routeWiseExpenseBreakdown": payload["routeWiseExpenseBreakdown"] + [second_route]},
    )

    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["tripRouteCost"] == 10000
    assert updated["tripExpenses"] == 500
    assert updated["budgetDeducted"] == 500
    assert client.get(f"/api/driver-budgets/{budget['id']}").json()["remainingBudgetAmount"] == 1500
    lr_numbers = sorted(invoice["lrNo"] for invoice in _trip_invoices(client, trip))
    assert lr_numbers == [f"LR{trip['tripNo']}1", f"LR{trip['tripNo']}2"]


def test_delete_trip_restores_fuel_budget_and_bank(
    client, bank, driver, fuelled, budget, trip_payload, monkeypatch
):
    monkeypatch.setattr(settings, "debug", True)
    trip = client.post("/api/trips", json=trip_payload(status="Completed")).json()

    response = client.delete(f"/api/trips/{trip['id']}")

    assert response.status_code == 200, response.text
    assert client.get(f"/api/trips/{trip['id']}").status_code == 404
    assert client.get(f"/api/fuel-tracking/{fuelled['id']}").json()["remainingFuelQuantity"] == 100
    assert client.get(f"/api/driver-budgets/{budget['id']}").json()["remainingBudgetAmount"] == 2000
    assert _balance(client, bank["id"]) == 50000 - 9000 - 2000
    assert _trip_invoices(client, trip) == []
    assert client.get("/api/income").json()["total"] == 0
    assert client.get(f"/api/attendance?driverId={driver['id']}").json()["total"] == 0

    report = client.get("/api/debug/integrity").json()
    assert report == {"balanceDrift": [], "negativeFuel": [], "fuelMismatch": []}


def test_trip_requires_fuel_record(client, trip_payload):
    response = client.post("/api/trips", json=trip_payload())

    assert response.status_code == 400
    assert response.json()["code"] == "NO_FUEL_RECORD"


def test_trip_requires_created_by(client, fuelled, trip_payload):
    payload = trip_payload()
    del payload["createdBy"]

    response = client.post("/api/trips", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "createdBy field is required"


def test_route_missing_fields_are_listed(client, fuelled, trip_payload):
    payload = trip_payload(customerId=None, productName="")

    response = client.post("/api/trips", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Route 1 missing: customerId, productName"
    assert body["field"] == "routeWiseExpenseBreakdown"


def test_latest_trip_for_vehicle(client, vehicle, fuelled, trip_payload):
    assert client.get(f"/api/trips/latest/{vehicle['id']}").status_code == 404
    client.post("/api/trips", json=trip_payload())
    second = client.post("/api/trips", json=trip_payload(start_km=1200, end_km=1300)).json()

    latest = client.get(f"/api/trips/latest/{vehicle['id']}").json()

    assert latest["id"] == second["id"]
    listed = client.get(f"/api/trips?vehicleId={vehicle['id']}&status=Draft").json()
    assert listed["total"] == 2


def test_driver_with_trips_cannot_be_deleted(client, driver, fuelled, trip_payload):
    client.post("/api/trips", json=trip_payload())

    response = client.delete(f"/api/drivers/{driver['id']}")

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete: in use by trips."


def _attendance(client, driver_id):
    records = client.get(f"/api/attendance?driverId={driver_id}").json()["data"]
    return sorted((record["date"], record["status"], record["tripId"]) for record in records)


def test_completed_trip_leaves_existing_attendance_alone(
    client, driver, fuelled, trip_payload
):
    absent = client.post(
        "/api/attendance",
        json={"driverId": driver["id"], "date": "2026-03-02", "status": "Absent"},
    )
    assert absent.status_code == 201, absent.text

    trip = client.post("/api/trips", json=trip_payload(status="Completed")).json()

    assert _attendance(client, driver["id"]) == [
        ("2026-03-02", "Absent", None),
        ("2026-03-03", "On Trip", trip["id"]),
    ]

    client.put(f"/api/trips/{trip['id']}", json={"status": "Draft"})
    assert _attendance(client, driver["id"]) == [("2026-03-02", "Absent", None)]

    client.put(f"/api/trips/{trip['id']}", json={"status": "Completed"})
    client.delete(f"/api/trips/{trip['id']}")
    assert _attendance(client, driver["id"]) == [("2026-03-02", "Absent", None)]


def test_reassigning_driver_moves_attendance(client, driver, fuelled, trip_payload):
    relief = client.post(
        "/api/drivers", json={"name": "Sanjay Patil", "mobileNo": "9800000002"}
    ).json()
    trip = client.post("/api/trips", json=trip_payload(status="Completed")).json()

    response = client.put(f"/api/trips/{trip['id']}", json={"driverId": relief["id"]})

    assert response.status_code == 200, response.text
    assert _attendance(client, driver["id"]) == []
    assert _attendance(client, relief["id"]) == [
        ("2026-03-02", "On Trip", trip["id"]),
        ("2026-03-03", "On Trip", trip["id"]),
    ]


def test_changing_dates_moves_attendance(client, driver, fuelled, trip_payload):
    trip = client.post("/api/trips", json=trip_payload(status="Completed")).json()

    response = client.put(
        f"/api/trips/{trip['id']}", json={"date": ["2026-03-03", "2026-03-04"]}
    )

    assert response.status_code == 200, response.text
    assert _attendance(client, driver["id"]) == [
        ("2026-03-03", "On Trip", trip["id"]),
        ("2026-03-04", "On Trip", trip["id"]),
    ]


def test_completed_route_on_open_trip_is_credited(
    client, bank, driver, fuelled, trip_payload
):
    response = client.post("/api/trips", json=trip_payload(routeStatus="Completed"))

    assert response.status_code == 201, response.text
    trip = response.json()
    assert trip["status"] == "Draft"
    assert trip["routeWiseExpenseBreakdown"][0]["routeStatus"] == "Completed"

    incomes = client.get("/api/income").json()["data"]
    assert [(income["amount"], income["routeNumber"]) for income in incomes] == [(5000, 1)]
    assert _balance(client, bank["id"]) == 50000 - 9000 + 5000
    assert _trip_invoices(client, trip)[0]["status"] == "Paid"
    assert {status for _, status, _ in _attendance(client, driver["id"])} == {"On Trip"}
    # Route expenses are charged to the driver budget, not booked as expenses.
    assert client.get("/api/expenses").json()["total"] == 0
