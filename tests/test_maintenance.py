from decimal import Decimal

import pytest

from fleetdesk.models import Expense, MaintenanceStatusEnum, Transaction
from fleetdesk.services.maintenance import status_for


@pytest.mark.parametrize(
    "total_km, expected",
    [
        ("499", MaintenanceStatusEnum.PENDING),
        ("500", MaintenanceStatusEnum.DUE),
        ("550", MaintenanceStatusEnum.DUE),
        ("551", MaintenanceStatusEnum.OVERDUE),
    ],
)
def test_status_thresholds(total_km, expected):
    assert status_for(Decimal(total_km), Decimal("500")) == expected


@pytest.fixture()
def schedule(client, app_user, bank, vehicle):
    response = client.post(
        "/api/maintenance",
        json={
            "appUserId": app_user["id"],
            "bankId": bank["id"],
            "vehicleId": vehicle["id"],
            "category": "Oil Change",
            "categoryAmount": 1500,
            "startKm": 1000,
            "targetKm": 500,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def complete_trip(client, fill_up, trip_payload):
    fill_up()

    def _complete(start_km, end_km):
        response = client.post(
            "/api/trips",
            json=trip_payload(start_km=start_km, end_km=end_km, status="Completed"),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _complete


def test_new_schedule_starts_pending(schedule):
    assert schedule["status"] == "Pending"
    assert schedule["totalKm"] == 0
    assert schedule["isAlert"] is False


def test_completed_trip_makes_schedule_due_and_raises_alert(client, schedule, complete_trip):
    complete_trip(1000, 1500)

    refreshed = client.get(f"/api/maintenance/{schedule['id']}").json()
    assert refreshed["status"] == "Due"
    assert refreshed["totalKm"] == 500
    assert refreshed["isNotificationSent"] is True

    alerts = client.get("/api/maintenance/notifications").json()
    assert len(alerts) == 1
    assert alerts[0]["scheduleId"] == schedule["id"]
    assert alerts[0]["isAlert"] is True
    assert alerts[0]["status"] == "Due"


def test_schedule_escalates_to_overdue(client, schedule, complete_trip):
    complete_trip(1000, 1500)
    complete_trip(1500, 1560)

    refreshed = client.get(f"/api/maintenance/{schedule['id']}").json()
    assert refreshed["status"] == "Overdue"
    assert refreshed["totalKm"] == 560

    alerts = client.get("/api/maintenance/notifications").json()
    assert len(alerts) == 1
    assert alerts[0]["status"] == "Overdue"
    assert alerts[0]["endKm"] == 1560


def test_accept_pays_service_and_restarts_schedule(client, bank, schedule, complete_trip):
    complete_trip(1000, 1500)
    complete_trip(1500, 1560)
    alert = client.get("/api/maintenance/notifications").json()[0]
    balance_before = client.get(f"/api/banks/{bank['id']}").json()["balance"]

    response = client.post(f"/api/maintenance/{alert['id']}/accept")

    assert response.status_code == 200, response.text
    accepted = response.json()
    assert accepted["status"] == "Completed"
    assert accepted["notificationStatus"] == "Accepted"
    assert accepted["expenseId"] is not None
    assert client.get(f"/api/banks/{bank['id']}").json()["balance"] == balance_before - 1500

    restarted = client.get(f"/api/maintenance/{schedule['id']}").json()
    assert restarted["status"] == "Pending"
    assert restarted["startKm"] == 1560
    assert restarted["totalKm"] == 0
    assert restarted["isNotificationSent"] is False
    assert client.get("/api/maintenance/notifications").json() == []

    again = client.post(f"/api/maintenance/{alert['id']}/accept")
    assert again.status_code == 400
    assert again.json()["code"] == "INVALID_STATE"


def test_decline_lets_the_next_sweep_alert_again(client, schedule, complete_trip):
    complete_trip(1000, 1500)
    alert = client.get("/api/maintenance/notifications").json()[0]

    response = client.post(f"/api/maintenance/{alert['id']}/decline")

    assert response.status_code == 200, response.text
    declined = response.json()
    assert declined["notificationStatus"] == "Declined"
    assert declined["status"] == "Pending"
    assert client.get("/api/maintenance/notifications").json() == []

    sweep = client.get("/api/maintenance/monitor").json()
    assert sweep["totalChecked"] == 1
    assert sweep["pollSeconds"] == 30
    fresh = client.get("/api/maintenance/notifications").json()
    assert len(fresh) == 1
    assert fresh[0]["id"] != alert["id"]


def test_completed_schedule_cannot_be_edited(client, schedule, complete_trip):
    complete_trip(1000, 1500)
    alert = client.get("/api/maintenance/notifications").json()[0]
    client.post(f"/api/maintenance/{alert['id']}/accept")

    response = client.put(f"/api/maintenance/{alert['id']}", json={"categoryAmount": 10})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATE"


@pytest.fixture()
def due_schedule(client, app_user, vehicle):
    """Schedule entered with a reading already past its target."""

    def _create(bank_id, amount=1500):
        response = client.post(
            "/api/maintenance",
            json={
                "appUserId": app_user["id"],
                "bankId": bank_id,
                "vehicleId": vehicle["id"],
                "category": "Brake Pads",
                "categoryAmount": amount,
                "startKm": 1000,
                "endKm": 1520,
                "targetKm": 500,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


def test_schedule_entered_due_alerts_without_trips(client, bank, due_schedule):
    schedule = due_schedule(bank["id"])
    assert schedule["status"] == "Due"

    sweep = client.get("/api/maintenance/monitor").json()

    assert [record["scheduleId"] for record in sweep["updatedRecords"]] == [schedule["id"]]
    alerts = client.get("/api/maintenance/notifications").json()
    assert len(alerts) == 1
    assert alerts[0]["status"] == "Due"
    assert alerts[0]["totalKm"] == 520

    # A second sweep does not raise a duplicate.
    client.get("/api/maintenance/monitor")
    assert len(client.get("/api/maintenance/notifications").json()) == 1


def test_accept_beyond_balance_writes_nothing(client, db_session, make_bank, due_schedule):
    petty = make_bank(balance=100, name="Petty Cash")
    due_schedule(petty["id"])
    client.get("/api/maintenance/monitor")
    alert = client.get("/api/maintenance/notifications").json()[0]
    transactions_before = db_session.query(Transaction).count()

    response = client.post(f"/api/maintenance/{alert['id']}/accept")

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_BALANCE"
    assert client.get(f"/api/banks/{petty['id']}").json()["balance"] == 100
    assert db_session.query(Transaction).count() == transactions_before
    assert db_session.query(Expense).count() == 0
    unchanged = client.get(f"/api/maintenance/{alert['id']}").json()
    assert unchanged["status"] == "Due"
    assert unchanged["notificationStatus"] is None
    assert unchanged["expenseId"] is None
