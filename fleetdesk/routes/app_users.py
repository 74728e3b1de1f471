from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import AppUser
from ..schemas import AppUserCreate, AppUserRead, AppUserUpdate, BankRead, Message, Page
from ..services import reference as reference_service
from ..services.common import get_or_404, paginate

router = APIRouter()


@router.get("", response_model=Page[AppUserRead])
def list_app_users(
    q: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> dict:
    return paginate(db, reference_service.app_user_query(q), page, limit)


@router.post("", response_model=AppUserRead, status_code=201)
def create_app_user(payload: AppUserCreate, db: Session = Depends(get_db)) -> AppUser:
    user = reference_service.create_app_user(db, payload)
    db.commit()
    db.refresh(user)
    return user


@router.get("/{user_id}", response_model=AppUserRead)
def get_app_user(user_id: int, db: Session = Depends(get_db)) -> AppUser:
    return get_or_404(db, AppUser, user_id)


@router.get("/{user_id}/banks", response_model=list[BankRead])
def app_user_banks(user_id: int, db: Session = Depends(get_db)) -> list:
    return reference_service.banks_for_user(db, get_or_404(db, AppUser, user_id))


@router.put("/{user_id}", response_model=AppUserRead)
def update_app_user(
    user_id: int, payload: AppUserUpdate, db: Session = Depends(get_db)
) -> AppUser:
    user = reference_service.update_app_user(db, get_or_404(db, AppUser, user_id), payload)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=Message)
def delete_app_user(user_id: int, db: Session = Depends(get_db)) -> dict:
    reference_service.delete_app_user(db, get_or_404(db, AppUser, user_id))
    db.commit()
    return {"message": "App user deleted"}
