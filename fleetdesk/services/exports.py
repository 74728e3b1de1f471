"""Spreadsheet and PDF exports of the ledgers.

Exports are read-only projections: every module is described by an
:class:`ExportModule` (query, optional date column, columns) and rendered by
the same two writers, one openpyxl workbook or one reportlab document.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
import io
import logging
from typing import Any, Callable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import DateTime, func, select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NotFoundError, ValidationError
from ..models import (
    Attendance,
    Bank,
    BankTransfer,
    Customer,
    Driver,
    DriverBudget,
    Expense,
    FuelTracking,
    Income,
    Invoice,
    Maintenance,
    Mechanic,
    Transaction,
    Trip,
    Vehicle,
)
from ..models.base import utcnow

logger = logging.getLogger(__name__)

MONEY_FORMAT = "#,##0.00"
FORMATS = {
    "excel": ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    "pdf": ("pdf", "application/pdf"),
}


@dataclass
class Column:
    header: str
    value: Callable[[Any], Any]
    money: bool = False


@dataclass
class ExportModule:
    title: str
    model: Any = None
    date_column: Any = None
    columns: list[Column] = field(default_factory=list)
    rows: Callable[[Session, date | None, date | None], list[list[Any]]] | None = None


def _attr(name: str, money: bool = False, header: str | None = None) -> Column:
    return Column(header or name.replace("_", " ").title(), lambda obj: getattr(obj, name), money)


def _vehicle_trip_report(
    db: Session, from_date: date | None, to_date: date | None
) -> list[list[Any]]:
    stmt = (
        select(
            Vehicle.registration_number,
            func.count(Trip.id),
            func.coalesce(func.sum(Trip.total_km), 0),
            func.coalesce(func.sum(Trip.trip_route_cost), 0),
            func.coalesce(func.sum(Trip.trip_expenses), 0),
            func.coalesce(func.sum(Trip.trip_diesel_cost), 0),
            func.coalesce(func.sum(Trip.remaining_amount), 0),
        )
        .join(Trip, Trip.vehicle_id == Vehicle.id)
        .group_by(Vehicle.registration_number)
        .order_by(Vehicle.registration_number)
    )
    stmt = _date_filter(stmt, Trip.created_at, from_date, to_date)
    return [list(row) for row in db.execute(stmt).all()]


MODULES: dict[str, ExportModule] = {
    "trips": ExportModule(
        "Trips",
        Trip,
        Trip.created_at,
        [
            _attr("trip_no"),
            Column("Vehicle", lambda t: t.vehicle.registration_number if t.vehicle else ""),
            Column("Driver", lambda t: t.driver.name if t.driver else ""),
            Column("Dates", lambda t: ", ".join(d.date.isoformat() for d in t.dates)),
            _attr("status"),
            _attr("total_km"),
            _attr("trip_route_cost", money=True),
            _attr("trip_expenses", money=True),
            _attr("trip_diesel_cost", money=True),
            _attr("remaining_amount", money=True),
        ],
    ),
    "vehicle-trip-report": ExportModule(
        "Vehicle Trip Report",
        columns=[
            Column("Vehicle", None),
            Column("Trips", None),
            Column("Total Km", None),
            Column("Route Cost", None, money=True),
            Column("Expenses", None, money=True),
            Column("Diesel Cost", None, money=True),
            Column("Remaining", None, money=True),
        ],
        rows=_vehicle_trip_report,
    ),
    "customers": ExportModule(
        "Customers",
        Customer,
        Customer.created_at,
        [
            _attr("customer_name"),
            _attr("company_name"),
            _attr("mobile_no"),
            _attr("gstin", header="GSTIN"),
            _attr("address"),
            Column("Products", lambda c: ", ".join(p.product_name for p in c.products)),
        ],
    ),
    "drivers": ExportModule(
        "Drivers",
        Driver,
        Driver.created_at,
        [_attr("name"), _attr("mobile_no"), _attr("license_number"), _attr("address"), _attr("status")],
    ),
    "vehicles": ExportModule(
        "Vehicles",
        Vehicle,
        Vehicle.created_at,
        [
            _attr("registration_number"),
            _attr("vehicle_type"),
            _attr("vehicle_weight"),
            _attr("vehicle_status"),
        ],
    ),
    "mechanics": ExportModule(
        "Mechanics",
        Mechanic,
        Mechanic.created_at,
        [
            _attr("name"),
            _attr("phone"),
            _attr("status"),
            Column("Certifications", lambda m: ", ".join(m.certifications or [])),
        ],
    ),
    "banks": ExportModule(
        "Banks",
        Bank,
        Bank.created_at,
        [
            _attr("bank_name"),
            _attr("account_number"),
            _attr("opening_balance", money=True),
            _attr("balance", money=True),
            Column("Active", lambda b: "Yes" if b.is_active else "No"),
        ],
    ),
    "income": ExportModule(
        "Income",
        Income,
        Income.date,
        [_attr("date"), _attr("category"), _attr("description"), _attr("bank_id", header="Bank"),
         _attr("amount", money=True)],
    ),
    "expenses": ExportModule(
        "Expenses",
        Expense,
        Expense.date,
        [_attr("date"), _attr("category"), _attr("description"), _attr("bank_id", header="Bank"),
         _attr("amount", money=True)],
    ),
    "transactions": ExportModule(
        "Transactions",
        Transaction,
        Transaction.date,
        [
            _attr("transaction_no"),
            _attr("date"),
            _attr("type"),
            _attr("category"),
            _attr("description"),
            _attr("from_bank_id", header="From Bank"),
            _attr("to_bank_id", header="To Bank"),
            _attr("amount", money=True),
            _attr("balance_after", money=True),
        ],
    ),
    "bank-transfers": ExportModule(
        "Bank Transfers",
        BankTransfer,
        BankTransfer.transfer_date,
        [
            _attr("transfer_date"),
            _attr("from_bank_id", header="From Bank"),
            _attr("to_bank_id", header="To Bank"),
            _attr("description"),
            _attr("status"),
            _attr("amount", money=True),
        ],
    ),
    "driver-budgets": ExportModule(
        "Driver Budgets",
        DriverBudget,
        DriverBudget.date,
        [
            _attr("date"),
            _attr("driver_id", header="Driver"),
            _attr("allocated_amount", money=True),
            _attr("carried_forward", money=True),
            _attr("daily_budget_amount", money=True),
            _attr("remaining_budget_amount", money=True),
        ],
    ),
    "fuel-tracking": ExportModule(
        "Fuel Tracking",
        FuelTracking,
        FuelTracking.date,
        [
            _attr("date"),
            _attr("vehicle_id", header="Vehicle"),
            _attr("start_km"),
            _attr("end_km"),
            _attr("fuel_quantity"),
            _attr("carried_forward"),
            _attr("remaining_fuel_quantity"),
            _attr("fuel_rate", money=True),
            _attr("total_amount", money=True),
            _attr("truck_average"),
        ],
    ),
    "maintenance": ExportModule(
        "Maintenance",
        Maintenance,
        Maintenance.created_at,
        [
            _attr("vehicle_id", header="Vehicle"),
            _attr("category"),
            _attr("category_amount", money=True),
            _attr("start_km"),
            _attr("target_km"),
            _attr("total_km"),
            _attr("status"),
            Column("Alert", lambda m: "Yes" if m.is_alert else "No"),
        ],
    ),
    "attendance": ExportModule(
        "Attendance",
        Attendance,
        Attendance.date,
        [_attr("date"), _attr("driver_id", header="Driver"), _attr("status"), _attr("remarks")],
    ),
    "invoices": ExportModule(
        "Invoices",
        Invoice,
        Invoice.date,
        [
            _attr("lr_no", header="LR No"),
            _attr("date"),
            _attr("customer_name"),
            _attr("from_location", header="From"),
            _attr("to_location", header="To"),
            _attr("tax_amount", money=True),
            _attr("total", money=True),
            _attr("advance_amount", money=True),
            _attr("remaining_amount", money=True),
            _attr("status"),
        ],
    ),
}


def _date_filter(stmt, column, from_date: date | None, to_date: date | None):
    if column is None:
        return stmt
    is_datetime = isinstance(column.type, DateTime)
    if from_date:
        stmt = stmt.where(
            column >= (datetime.combine(from_date, time.min) if is_datetime else from_date)
        )
    if to_date:
        if is_datetime:
            stmt = stmt.where(column < datetime.combine(to_date + timedelta(days=1), time.min))
        else:
            stmt = stmt.where(column <= to_date)
    return stmt


def _cell(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    return value


def get_module(name: str) -> ExportModule:
    module = MODULES.get(name)
    if module is None:
        raise NotFoundError("Export module", name)
    return module


def collect(
    db: Session, name: str, from_date: date | None = None, to_date: date | None = None
) -> tuple[ExportModule, list[list[Any]]]:
    module = get_module(name)
    if module.rows is not None:
        rows = module.rows(db, from_date, to_date)
    else:
        stmt = _date_filter(select(module.model), module.date_column, from_date, to_date)
        stmt = stmt.order_by(module.model.id)
        rows = [
            [column.value(record) for column in module.columns]
            for record in db.scalars(stmt)
        ]
    return module, [[_cell(value) for value in row] for row in rows]


def render_excel(sections: list[tuple[ExportModule, list[list[Any]]]]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for module, rows in sections:
        # Sheet titles are limited to 31 characters.
        ws = wb.create_sheet(module.title[:31])
        for c, column in enumerate(module.columns, start=1):
            cell = ws.cell(1, c, column.header)
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center")
            ws.column_dimensions[get_column_letter(c)].width = max(12, len(column.header) + 4)
        for r, row in enumerate(rows, start=2):
            for c, value in enumerate(row, start=1):
                cell = ws.cell(r, c, value)
                if module.columns[c - 1].money:
                    cell.number_format = MONEY_FORMAT
        ws.freeze_panes = "A2"
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _pdf_text(value: Any, money: bool) -> str:
    if value is None:
        return "-"
    if money:
        return f"{settings.currency_label} {float(value):,.2f}"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


def render_pdf(sections: list[tuple[ExportModule, list[list[Any]]]], title: str) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(A4),
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=12 * mm,
        bottomMargin=12 * mm,
        title=title,
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph(title, styles["Title"]),
        Paragraph(f"Generated {utcnow():%Y-%m-%d %H:%M} UTC", styles["Normal"]),
        Spacer(1, 6 * mm),
    ]
    for index, (module, rows) in enumerate(sections):
        if index:
            story.append(PageBreak())
        story.append(Paragraph(module.title, styles["Heading2"]))
        data = [[column.header for column in module.columns]]
        for row in rows:
            data.append(
                [_pdf_text(value, column.money) for value, column in zip(row, module.columns)]
            )
        if len(data) == 1:
            data.append(["(No records)"] + [""] * (len(module.columns) - 1))
        table = Table(data, repeatRows=1, hAlign="LEFT")
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 7),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e5e7eb")),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        story.append(table)
    doc.build(story)
    return buf.getvalue()


def _check_format(fmt: str) -> tuple[str, str]:
    if fmt not in FORMATS:
        raise ValidationError("Format must be excel or pdf", "format")
    return FORMATS[fmt]


def export_module(
    db: Session,
    name: str,
    fmt: str = "excel",
    from_date: date | None = None,
    to_date: date | None = None,
) -> tuple[bytes, str, str]:
    """Return ``(content, filename, media_type)`` for one module."""
    extension, media_type = _check_format(fmt)
    section = collect(db, name, from_date, to_date)
    if fmt == "excel":
        content = render_excel([section])
    else:
        content = render_pdf([section], section[0].title)
    filename = f"{name}_{utcnow():%Y%m%d}.{extension}"
    logger.info("Exported %s rows of %s as %s", len(section[1]), name, fmt)
    return content, filename, media_type


def export_report(
    db: Session,
    modules: list[str],
    fmt: str = "excel",
    from_date: date | None = None,
    to_date: date | None = None,
) -> tuple[bytes, str, str]:
    extension, media_type = _check_format(fmt)
    names = [name.strip() for name in modules if name.strip()] or list(MODULES)
    sections = [collect(db, name, from_date, to_date) for name in names]
    if fmt == "excel":
        content = render_excel(sections)
    else:
        content = render_pdf(sections, "Fleet Report")
    filename = f"report_{utcnow():%Y%m%d}.{extension}"
    logger.info("Exported combined report of %s modules as %s", len(sections), fmt)
    return content, filename, media_type
