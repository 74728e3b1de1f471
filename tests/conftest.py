import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fleetdesk.db import get_db
from fleetdesk.main import app
from fleetdesk.models import Base


@pytest.fixture()
def engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite+pysqlite:///{db_path}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def SessionLocal(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(SessionLocal):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(SessionLocal):
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _created(response):
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def app_user(client):
    return _created(
        client.post("/api/app-users", json={"name": "Depot Office", "mobileNo": "9000000001"})
    )


@pytest.fixture()
def make_bank(client, app_user):
    counter = {"n": 0}

    def _make(balance=50000, name="Main Account"):
        counter["n"] += 1
        return _created(
            client.post(
                "/api/banks",
                json={
                    "bankName": name,
                    "accountNumber": f"ACC-{counter['n']:04d}",
                    "balance": balance,
                    "appUserId": app_user["id"],
                },
            )
        )

    return _make


@pytest.fixture()
def bank(make_bank):
    return make_bank()


@pytest.fixture()
def make_vehicle(client):
    def _make(registration="MH12AB1234"):
        return _created(
            client.post(
                "/api/vehicles",
                json={
                    "registrationNumber": registration,
                    "vehicleType": "truck",
                    "vehicleWeight": 12000,
                },
            )
        )

    return _make


@pytest.fixture()
def vehicle(make_vehicle):
    return make_vehicle()


@pytest.fixture()
def driver(client):
    return _created(
        client.post("/api/drivers", json={"name": "Ravi Kumar", "mobileNo": "9800000001"})
    )


@pytest.fixture()
def customer(client):
    return _created(
        client.post(
            "/api/customers",
            json={
                "customerName": "Shree Traders",
                "companyName": "Shree Traders Pvt Ltd",
                "mobileNo": "9700000001",
            },
        )
    )


@pytest.fixture()
def fill_up(client, app_user, bank, vehicle):
    """Record a fill-up; defaults give a truck average of 10 km/L at 90 per litre."""

    def _fill(
        start_km=0,
        end_km=1000,
        quantity=100,
        rate=90,
        vehicle_id=None,
        bank_id=None,
        date="2026-03-01T08:00:00",
    ):
        return client.post(
            "/api/fuel-tracking",
            json={
                "appUserId": app_user["id"],
                "bankId": bank_id or bank["id"],
                "vehicleId": vehicle_id or vehicle["id"],
                "startKm": start_km,
                "endKm": end_km,
                "fuelQuantity": quantity,
                "fuelRate": rate,
                "date": date,
                "paymentType": "Cash",
            },
        )

    return _fill


@pytest.fixture()
def trip_payload(app_user, bank, vehicle, driver, customer):
    def _payload(start_km=1000, end_km=1200, status="Draft", advance=0, **route_overrides):
        route = {
            "routeNumber": 1,
            "startLocation": "Pune",
            "endLocation": "Nashik",
            "productName": "Cement",
            "weight": 10,
            "rate": 500,
            "advanceAmount": advance,
            "userId": app_user["id"],
            "customerId": customer["id"],
            "bankId": bank["id"],
            "paymentType": "Cash",
            "expenses": [{"category": "Toll", "amount": 150, "quantity": 2}],
        }
        route.update(route_overrides)
        return {
            "vehicleId": vehicle["id"],
            "driverId": driver["id"],
            "startKm": start_km,
            "endKm": end_km,
            "date": ["2026-03-02", "2026-03-03"],
            "status": status,
            "routeWiseExpenseBreakdown": [route],
            "createdBy": app_user["id"],
        }

    return _payload
