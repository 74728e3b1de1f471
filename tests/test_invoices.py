import pytest


@pytest.fixture()
def invoice_payload():
    def _payload(**overrides):
        payload = {
            "from": "Pune",
            "to": "Mumbai",
            "customerName": "Shree Traders",
            "taxPercent": 5,
            "advanceAmount": 200,
            "rows": [
                {"product": "Cement", "truckNo": "MH12AB1234", "weight": 10, "rate": 100}
            ],
        }
        payload.update(overrides)
        return payload

    return _payload


def test_invoice_totals_follow_rows_tax_and_advance(client, invoice_payload):
    response = client.post("/api/invoices", json=invoice_payload())

    assert response.status_code == 201, response.text
    invoice = response.json()
    assert invoice["lrNo"].startswith("LR")
    assert invoice["from"] == "Pune"
    assert invoice["rows"][0]["total"] == 1000
    assert invoice["taxAmount"] == 50
    assert invoice["total"] == 1050
    assert invoice["remainingAmount"] == 850
    assert invoice["status"] == "Pending"


def test_advance_above_total_leaves_nothing_remaining(client, invoice_payload):
    invoice = client.post("/api/invoices", json=invoice_payload(advanceAmount=5000)).json()

    assert invoice["remainingAmount"] == 0


def test_generated_lr_numbers_are_sequential(client, invoice_payload):
    first = client.post("/api/invoices", json=invoice_payload()).json()
    second = client.post("/api/invoices", json=invoice_payload()).json()

    assert first["lrNo"] != second["lrNo"]
    assert int(second["lrNo"][-3:]) == int(first["lrNo"][-3:]) + 1


def test_duplicate_lr_number_rejected(client, invoice_payload):
    client.post("/api/invoices", json=invoice_payload(lrNo="LR-100"))

    response = client.post("/api/invoices", json=invoice_payload(lrNo="LR-100"))

    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_KEY"


def test_update_rows_recomputes_totals(client, invoice_payload):
    invoice = client.post("/api/invoices", json=invoice_payload()).json()

    response = client.put(
        f"/api/invoices/{invoice['id']}",
        json={
            "taxPercent": 0,
            "rows": [
                {"product": "Steel", "truckNo": "MH12AB1234", "weight": 2, "rate": 250},
                {"product": "Sand", "truckNo": "MH12AB1234", "total": 300},
            ],
        },
    )

    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["total"] == 800
    assert updated["taxAmount"] == 0
    assert updated["remainingAmount"] == 600


def test_bulk_paid_credits_remaining_amount(client, app_user, bank, invoice_payload):
    first = client.post("/api/invoices", json=invoice_payload()).json()
    second = client.post("/api/invoices", json=invoice_payload(advanceAmount=0)).json()

    response = client.post(
        "/api/invoices/bulk-status",
        json={
            "invoiceIds": [first["id"], second["id"]],
            "status": "Paid",
            "bankId": bank["id"],
            "appUserId": app_user["id"],
        },
    )

    assert response.status_code == 200, response.text
    result = response.json()
    assert result["updated"] == 2
    assert result["totalCredited"] == 850 + 1050
    assert client.get(f"/api/banks/{bank['id']}").json()["balance"] == 50000 + 1900

    paid = client.get(f"/api/invoices/{first['id']}").json()
    assert paid["status"] == "Paid"
    assert paid["remainingAmount"] == 0
    assert paid["advanceAmount"] == paid["total"]

    # Already paid invoices are skipped.
    repeat = client.post(
        "/api/invoices/bulk-status",
        json={
            "invoiceIds": [first["id"]],
            "status": "Paid",
            "bankId": bank["id"],
            "appUserId": app_user["id"],
        },
    ).json()
    assert repeat["updated"] == 0
    assert client.get("/api/income").json()["total"] == 2


@pytest.mark.parametrize(
    "body",
    [
        {"status": "Paid"},
        {"status": "Pending"},
    ],
)
def test_bulk_status_validation(client, invoice_payload, body):
    invoice = client.post("/api/invoices", json=invoice_payload()).json()

    response = client.post(
        "/api/invoices/bulk-status", json={"invoiceIds": [invoice["id"]], **body}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_filter_by_status_and_search(client, invoice_payload):
    client.post("/api/invoices", json=invoice_payload(customerName="Alpha Cement"))
    client.post(
        "/api/invoices", json=invoice_payload(customerName="Beta Steel", status="Unpaid")
    )

    assert client.get("/api/invoices?status=Unpaid").json()["total"] == 1
    found = client.get("/api/invoices?q=alpha").json()["data"]
    assert [invoice["customerName"] for invoice in found] == ["Alpha Cement"]


def test_invoice_needs_rows(client, invoice_payload):
    response = client.post("/api/invoices", json=invoice_payload(rows=[]))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
