from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import exports as export_service

router = APIRouter()


def _attachment(content: bytes, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/download/{module}")
def download_module(
    module: str,
    format: str = "excel",
    from_date: date | None = Query(None, alias="fromDate"),
    to_date: date | None = Query(None, alias="toDate"),
    db: Session = Depends(get_db),
) -> Response:
    return _attachment(*export_service.export_module(db, module, format, from_date, to_date))


@router.get("/reports/download")
def download_report(
    modules: str = "",
    format: str = "excel",
    from_date: date | None = Query(None, alias="fromDate"),
    to_date: date | None = Query(None, alias="toDate"),
    db: Session = Depends(get_db),
) -> Response:
    return _attachment(
        *export_service.export_report(db, modules.split(","), format, from_date, to_date)
    )
