from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Customer
from ..schemas import (
    CustomerCreate,
    CustomerProductRead,
    CustomerRead,
    CustomerUpdate,
    Message,
    Page,
)
from ..services import reference as reference_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[CustomerRead])
def list_customers(
    q: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, reference_service.customer_query(q), page, limit)


@router.post("", response_model=CustomerRead, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)) -> Customer:
    customer = reference_service.create_customer(db, payload)
    db.commit()
    db.refresh(customer)
    return customer


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)) -> Customer:
    return get_or_404(db, Customer, customer_id)


@router.get("/{customer_id}/products", response_model=list[CustomerProductRead])
def customer_products(customer_id: int, db: Session = Depends(get_db)) -> list:
    return get_or_404(db, Customer, customer_id).products


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(
    customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)
) -> Customer:
    customer = reference_service.update_customer(
        db, get_or_404(db, Customer, customer_id), payload
    )
    db.commit()
    db.refresh(customer)
    return customer


@router.delete("/{customer_id}", response_model=Message)
def delete_customer(customer_id: int, db: Session = Depends(get_db)) -> dict:
    reference_service.delete_customer(db, get_or_404(db, Customer, customer_id))
    db.commit()
    return {"message": "Customer deleted"}
