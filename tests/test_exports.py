import io

from openpyxl import load_workbook
import pytest


def test_trips_export_as_excel(client, fill_up, trip_payload):
    fill_up()
    client.post("/api/trips", json=trip_payload())

    response = client.get("/api/download/trips?format=excel")

    assert response.status_code == 200
    assert response.content.startswith(b"PK")
    assert "trips_" in response.headers["content-disposition"]
    wb = load_workbook(io.BytesIO(response.content))
    ws = wb["Trips"]
    assert ws.cell(1, 1).value == "Trip No"
    assert ws.max_row == 2
    assert ws.cell(2, 2).value == "MH12AB1234"


def test_banks_export_as_pdf(client, bank):
    response = client.get("/api/download/banks?format=pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_empty_module_still_renders(client):
    response = client.get("/api/download/invoices?format=pdf")

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


def test_date_range_filters_rows(client, bank):
    response = client.get(
        "/api/download/transactions?fromDate=2000-01-01&toDate=2000-01-31"
    )

    wb = load_workbook(io.BytesIO(response.content))
    assert wb["Transactions"].max_row == 1


@pytest.mark.parametrize(
    "url, status, code",
    [
        ("/api/download/payroll", 404, "NOT_FOUND"),
        ("/api/download/trips?format=csv", 400, "VALIDATION_ERROR"),
    ],
)
def test_bad_export_requests(client, url, status, code):
    response = client.get(url)

    assert response.status_code == status
    assert response.json()["code"] == code


def test_combined_report_has_one_sheet_per_module(client, bank):
    response = client.get("/api/reports/download?modules=banks,trips")

    assert response.status_code == 200
    assert "report_" in response.headers["content-disposition"]
    wb = load_workbook(io.BytesIO(response.content))
    assert wb.sheetnames == ["Banks", "Trips"]
    assert wb["Banks"].cell(2, 1).value == "Main Account"
