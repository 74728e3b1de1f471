def test_vehicle_registration_is_normalised_and_unique(client, vehicle):
    assert vehicle["registrationNumber"] == "MH12AB1234"
    assert vehicle["vehicleStatus"] == "available"

    response = client.post(
        "/api/vehicles",
        json={"registrationNumber": " mh12ab1234 ", "vehicleType": "truck", "vehicleWeight": 9000},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "DUPLICATE_KEY"
    assert body["field"] == "registrationNumber"


def test_vehicle_list_filters_by_status(client, make_vehicle):
    parked = make_vehicle("MH01AA0001")
    make_vehicle("MH01AA0002")
    client.put(f"/api/vehicles/{parked['id']}", json={"vehicleStatus": "maintenance"})

    listed = client.get("/api/vehicles?status=maintenance").json()

    assert listed["total"] == 1
    assert listed["data"][0]["id"] == parked["id"]


def test_vehicle_with_fuel_records_cannot_be_deleted(client, vehicle, fill_up):
    fill_up()

    response = client.delete(f"/api/vehicles/{vehicle['id']}")

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete: in use by fuel records."


def test_unused_vehicle_can_be_deleted(client, vehicle):
    assert client.delete(f"/api/vehicles/{vehicle['id']}").status_code == 200
    response = client.get(f"/api/vehicles/{vehicle['id']}")
    assert response.status_code == 404
    assert response.json()["entity"] == "Vehicle"


def test_location_names_are_collapsed_and_unique(client):
    created = client.post("/api/locations", json={"locationName": "  Navi   Mumbai "})
    assert created.status_code == 201
    assert created.json()["locationName"] == "Navi Mumbai"

    response = client.post("/api/locations", json={"locationName": "navi mumbai"})

    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_KEY"


def test_customer_products_and_categories(client):
    response = client.post(
        "/api/customers",
        json={
            "customerName": "Metro Steel",
            "companyName": "Metro Steel Ltd",
            "mobileNo": "9700000002",
            "products": [
                {
                    "productName": "TMT Bars",
                    "productRate": 650,
                    "categories": [
                        {"categoryName": "8mm", "categoryRate": 600},
                        {"categoryName": "12mm", "categoryRate": 700},
                    ],
                },
                {"productName": "Sheets", "productRate": 800},
            ],
        },
    )

    assert response.status_code == 201, response.text
    customer = response.json()
    products = client.get(f"/api/customers/{customer['id']}/products").json()
    assert [p["productName"] for p in products] == ["TMT Bars", "Sheets"]
    assert [c["categoryRate"] for c in products[0]["categories"]] == [600, 700]

    updated = client.put(
        f"/api/customers/{customer['id']}",
        json={"products": [{"productName": "Coils", "productRate": 900}]},
    )

    assert updated.status_code == 200, updated.text
    assert [p["productName"] for p in updated.json()["products"]] == ["Coils"]
    assert updated.json()["customerName"] == "Metro Steel"


def test_app_user_lists_active_banks(client, app_user, make_bank):
    kept = make_bank(name="Current Account")
    closed = make_bank(name="Old Account")
    client.delete(f"/api/banks/{closed['id']}")

    banks = client.get(f"/api/app-users/{app_user['id']}/banks").json()

    assert [b["id"] for b in banks] == [kept["id"]]


def test_app_user_with_banks_cannot_be_deleted(client, app_user, bank):
    response = client.delete(f"/api/app-users/{app_user['id']}")

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete: in use by banks."


def test_mechanic_certifications_are_trimmed(client):
    response = client.post(
        "/api/mechanics",
        json={"name": "Suresh", "phone": "9600000001", "certifications": [" Diesel ", "", "Brakes"]},
    )

    assert response.status_code == 201, response.text
    mechanic = response.json()
    assert mechanic["certifications"] == ["Diesel", "Brakes"]

    updated = client.put(
        f"/api/mechanics/{mechanic['id']}", json={"certifications": ["Electrical"]}
    ).json()
    assert updated["certifications"] == ["Electrical"]
    assert updated["phone"] == "9600000001"


def test_driver_mobile_is_unique(client, driver):
    response = client.post("/api/drivers", json={"name": "Another", "mobileNo": "9800000001"})

    assert response.status_code == 400
    assert response.json()["field"] == "mobileNo"


def test_request_validation_errors_use_error_shape(client):
    response = client.post("/api/vehicles", json={"registrationNumber": "MH01"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "error" in body


def test_pagination_and_search(client):
    for index in range(12):
        client.post(
            "/api/drivers", json={"name": f"Driver {index:02d}", "mobileNo": f"98{index:08d}"}
        )

    first = client.get("/api/drivers").json()
    assert first["total"] == 12
    assert len(first["data"]) == 10
    assert first["page"] == 1

    second = client.get("/api/drivers?page=2").json()
    assert len(second["data"]) == 2

    found = client.get("/api/drivers?q=driver 07").json()
    assert [d["name"] for d in found["data"]] == ["Driver 07"]
