from decimal import Decimal

from fleetdesk.models import FuelTracking, Transaction


def test_first_fill_up_sets_average_and_debits_bank(client, bank, vehicle, fill_up):
    response = fill_up(start_km=0, end_km=100, quantity=10, rate=90)

    assert response.status_code == 201, response.text
    record = response.json()
    assert record["truckAverage"] == 10
    assert record["totalAmount"] == 900
    assert record["carriedForward"] == 0
    assert record["remainingFuelQuantity"] == 10
    assert record["previousId"] is None
    assert client.get(f"/api/banks/{bank['id']}").json()["balance"] == 49100

    fuel_txns = client.get("/api/transactions?type=FUEL").json()["data"]
    assert [txn["amount"] for txn in fuel_txns] == [900]


def test_second_fill_up_carries_remaining_forward(client, vehicle, fill_up):
    first = fill_up(start_km=0, end_km=100, quantity=10, rate=90).json()

    response = fill_up(start_km=100, end_km=250, quantity=12, rate=100)

    assert response.status_code == 201, response.text
    second = response.json()
    assert second["previousId"] == first["id"]
    assert second["carriedForward"] == 10
    assert second["remainingFuelQuantity"] == 22
    # 150 km over 22 litres
    assert second["truckAverage"] == 6.8182
    assert client.get(f"/api/fuel-tracking/{first['id']}").json()["remainingFuelQuantity"] == 0

    latest = client.get(f"/api/fuel-tracking/latest/{vehicle['id']}").json()
    assert latest["id"] == second["id"]
    assert latest["mileage"] == 6.8182


def test_fill_up_beyond_balance_writes_nothing(client, db_session, make_bank, vehicle, fill_up):
    poor_bank = make_bank(balance=100, name="Petty Cash")

    response = fill_up(quantity=10, rate=90, bank_id=poor_bank["id"])

    assert response.status_code == 400
    assert response.json()["code"] == "INSUFFICIENT_BALANCE"
    assert db_session.query(FuelTracking).count() == 0
    assert client.get(f"/api/banks/{poor_bank['id']}").json()["balance"] == 100
    assert db_session.query(Transaction).filter(Transaction.from_bank_id == poor_bank["id"]).count() == 0


def test_fill_up_rejects_bad_readings(fill_up):
    response = fill_up(start_km=500, end_km=400)

    assert response.status_code == 400
    assert response.json()["field"] == "endKm"


def test_latest_without_records_is_not_found(client, vehicle):
    response = client.get(f"/api/fuel-tracking/latest/{vehicle['id']}")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_update_amount_adjusts_bank_by_difference(client, bank, fill_up):
    record = fill_up(start_km=0, end_km=100, quantity=10, rate=90).json()

    response = client.put(f"/api/fuel-tracking/{record['id']}", json={"fuelRate": 100})

    assert response.status_code == 200, response.text
    assert response.json()["totalAmount"] == 1000
    assert client.get(f"/api/banks/{bank['id']}").json()["balance"] == 49000
    txn = client.get(f"/api/transactions/{record['transactionId']}").json()
    assert txn["amount"] == 1000


def test_moving_head_to_another_vehicle_returns_carry_forward(
    client, db_session, vehicle, make_vehicle, fill_up
):
    other = make_vehicle("MH14ZZ9999")
    first = fill_up(start_km=0, end_km=100, quantity=10, rate=90).json()
    second = fill_up(start_km=100, end_km=250, quantity=12, rate=100).json()

    response = client.put(
        f"/api/fuel-tracking/{second['id']}", json={"vehicleId": other["id"]}
    )

    assert response.status_code == 200, response.text
    moved = response.json()
    assert moved["vehicleId"] == other["id"]
    assert moved["previousId"] is None
    assert moved["carriedForward"] == 0
    assert moved["remainingFuelQuantity"] == 12
    assert moved["truckAverage"] == 12.5
    assert client.get(f"/api/fuel-tracking/{first['id']}").json()["remainingFuelQuantity"] == 10
    assert client.get(f"/api/fuel-tracking/latest/{vehicle['id']}").json()["id"] == first["id"]
    assert client.get(f"/api/fuel-tracking/latest/{other['id']}").json()["id"] == second["id"]


def test_only_head_changes_quantity(client, fill_up):
    first = fill_up(start_km=0, end_km=100, quantity=10, rate=90).json()
    fill_up(start_km=100, end_km=250, quantity=12, rate=100)

    response = client.put(f"/api/fuel-tracking/{first['id']}", json={"fuelQuantity": 20})

    assert response.status_code == 400
    assert response.json()["field"] == "fuelQuantity"


def test_delete_head_restores_previous_and_refunds(client, db_session, bank, fill_up):
    first = fill_up(start_km=0, end_km=100, quantity=10, rate=90).json()
    second = fill_up(start_km=100, end_km=250, quantity=12, rate=100).json()

    assert client.delete(f"/api/fuel-tracking/{first['id']}").status_code == 400

    response = client.delete(f"/api/fuel-tracking/{second['id']}")

    assert response.status_code == 200
    assert client.get(f"/api/fuel-tracking/{first['id']}").json()["remainingFuelQuantity"] == 10
    assert client.get(f"/api/banks/{bank['id']}").json()["balance"] == 49100
    assert db_session.get(Transaction, second["transactionId"]) is None
    remaining = db_session.get(FuelTracking, first["id"]).remaining_fuel_quantity
    assert Decimal(remaining) == Decimal("10")
