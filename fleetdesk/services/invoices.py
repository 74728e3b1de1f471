"""Lorry-receipt invoices.

Invoice totals always satisfy ``total == sum(rows.total) + tax_amount`` and
``remaining_amount == max(0, total - advance_amount)``; :func:`apply_totals`
is the only place that sets them.
"""

from datetime import date
from decimal import Decimal
import logging

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from ..errors import DuplicateKeyError, ValidationError
from ..models import Invoice, InvoiceRow, InvoiceStatusEnum
from ..models.base import utcnow
from ..schemas import BulkStatusUpdate, EntryCreate, InvoiceCreate, InvoiceUpdate
from . import ledger
from .common import ZERO, _money, _quantity, get_or_404
from .sequences import generate_lr_no

logger = logging.getLogger(__name__)


def invoice_query(status: str | None = None, q: str | None = None) -> Select:
    stmt = select(Invoice)
    if status and status != "all":
        stmt = stmt.where(Invoice.status == status)
    if q:
        like = f"%{q.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Invoice.lr_no).like(like),
                func.lower(Invoice.customer_name).like(like),
            )
        )
    return stmt.order_by(Invoice.date.desc(), Invoice.id.desc())


def apply_totals(invoice: Invoice) -> Invoice:
    subtotal = ZERO
    for row in invoice.rows:
        row.total = _money(row.total if row.total is not None else _quantity(row.weight) * _money(row.rate))
        subtotal += row.total
    invoice.tax_amount = _money(subtotal * _money(invoice.tax_percent) / Decimal("100"))
    invoice.total = subtotal + invoice.tax_amount
    invoice.advance_amount = _money(invoice.advance_amount)
    invoice.remaining_amount = max(ZERO, invoice.total - invoice.advance_amount)
    return invoice


def _rows_from(payload_rows) -> list[InvoiceRow]:
    return [
        InvoiceRow(
            product=row.product,
            truck_no=row.truck_no,
            articles=row.articles,
            weight=_quantity(row.weight),
            rate=_money(row.rate),
            total=row.total,
            remarks=row.remarks,
        )
        for row in payload_rows
    ]


def _check_lr_no(db: Session, lr_no: str, exclude_id: int | None = None) -> None:
    stmt = select(Invoice.id).where(Invoice.lr_no == lr_no)
    if exclude_id is not None:
        stmt = stmt.where(Invoice.id != exclude_id)
    if db.scalars(stmt).first() is not None:
        raise DuplicateKeyError("lrNo", lr_no)


def create_invoice(db: Session, payload: InvoiceCreate) -> Invoice:
    lr_no = payload.lr_no.strip() if payload.lr_no else ""
    if lr_no:
        _check_lr_no(db, lr_no)
    else:
        lr_no = generate_lr_no(db)
    invoice = Invoice(
        lr_no=lr_no,
        date=payload.date or date.today(),
        from_location=payload.from_location.strip(),
        to_location=payload.to_location.strip(),
        taluka=payload.taluka,
        dist=payload.dist,
        customer_name=payload.customer_name.strip(),
        consignor=payload.consignor,
        consignee=payload.consignee,
        remarks=payload.remarks,
        tax_percent=_money(payload.tax_percent),
        advance_amount=_money(payload.advance_amount),
        status=payload.status,
        rows=_rows_from(payload.rows),
    )
    apply_totals(invoice)
    db.add(invoice)
    db.flush()
    logger.info("Invoice %s created, total %s", invoice.lr_no, invoice.total)
    return invoice


def update_invoice(db: Session, invoice: Invoice, payload: InvoiceUpdate) -> Invoice:
    data = payload.model_dump(exclude_unset=True)
    if data.get("lr_no"):
        lr_no = data["lr_no"].strip()
        _check_lr_no(db, lr_no, exclude_id=invoice.id)
        invoice.lr_no = lr_no
    if payload.rows is not None:
        invoice.rows = _rows_from(payload.rows)
    for field in (
        "date",
        "from_location",
        "to_location",
        "taluka",
        "dist",
        "customer_name",
        "consignor",
        "consignee",
        "remarks",
        "tax_percent",
        "advance_amount",
        "status",
    ):
        if data.get(field) is not None:
            setattr(invoice, field, data[field])
    apply_totals(invoice)
    db.flush()
    return invoice


def delete_invoice(db: Session, invoice: Invoice) -> None:
    if invoice.trip_id is not None:
        raise ValidationError("Invoice belongs to a trip; change the trip instead", "tripId")
    db.delete(invoice)
    db.flush()


def bulk_status(db: Session, payload: BulkStatusUpdate) -> tuple[int, Decimal]:
    if payload.status == InvoiceStatusEnum.PENDING:
        raise ValidationError("Bulk status must be Paid or Unpaid", "status")
    if payload.status == InvoiceStatusEnum.PAID and (
        payload.bank_id is None or payload.app_user_id is None
    ):
        raise ValidationError("bankId and appUserId are required to mark invoices Paid", "bankId")

    invoices = [
        get_or_404(db, Invoice, invoice_id, lock=True)
        for invoice_id in dict.fromkeys(payload.invoice_ids)
    ]
    updated = 0
    credited = ZERO
    for invoice in invoices:
        if invoice.status == payload.status:
            continue
        if payload.status == InvoiceStatusEnum.PAID:
            amount = _money(invoice.remaining_amount)
            if amount > ZERO:
                ledger.create_income(
                    db,
                    EntryCreate(
                        app_user_id=payload.app_user_id,
                        bank_id=payload.bank_id,
                        category=payload.category,
                        amount=amount,
                        description=payload.description
                        or f"Payment received for {invoice.lr_no}",
                        date=payload.date or utcnow(),
                    ),
                )
                credited += amount
            # Money received counts as advance so the totals law still holds.
            invoice.advance_amount = _money(invoice.advance_amount) + amount
            apply_totals(invoice)
        invoice.status = payload.status
        updated += 1
    db.flush()
    logger.info(
        "%s invoices marked %s, %s credited", updated, payload.status.value, credited
    )
    return updated, credited
