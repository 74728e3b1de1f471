from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Invoice, InvoiceStatusEnum
from ..schemas import (
    BulkStatusResult,
    BulkStatusUpdate,
    InvoiceCreate,
    InvoiceRead,
    InvoiceUpdate,
    Message,
    Page,
)
from ..services import invoices as invoice_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[InvoiceRead])
def list_invoices(
    status: InvoiceStatusEnum | None = None,
    q: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, invoice_service.invoice_query(status, q), page, limit)


@router.post("", response_model=InvoiceRead, status_code=201)
def create_invoice(payload: InvoiceCreate, db: Session = Depends(get_db)) -> Invoice:
    invoice = invoice_service.create_invoice(db, payload)
    db.commit()
    db.refresh(invoice)
    return invoice


@router.post("/bulk-status", response_model=BulkStatusResult)
def bulk_status(payload: BulkStatusUpdate, db: Session = Depends(get_db)) -> dict:
    updated, credited = invoice_service.bulk_status(db, payload)
    db.commit()
    return {
        "message": f"{updated} invoices marked {payload.status.value}",
        "updated": updated,
        "total_credited": credited,
    }


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)) -> Invoice:
    return get_or_404(db, Invoice, invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(
    invoice_id: int, payload: InvoiceUpdate, db: Session = Depends(get_db)
) -> Invoice:
    invoice = invoice_service.update_invoice(
        db, get_or_404(db, Invoice, invoice_id, lock=True), payload
    )
    db.commit()
    db.refresh(invoice)
    return invoice


@router.delete("/{invoice_id}", response_model=Message)
def delete_invoice(invoice_id: int, db: Session = Depends(get_db)) -> dict:
    invoice_service.delete_invoice(db, get_or_404(db, Invoice, invoice_id))
    db.commit()
    return {"message": "Invoice deleted"}
