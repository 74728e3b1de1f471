from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import MONEY, QUANTITY, Base


class InvoiceRow(Base):
    __tablename__ = "invoice_rows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False
    )
    product: Mapped[str] = mapped_column(String(255), nullable=False)
    truck_no: Mapped[str] = mapped_column(String(50), nullable=False)
    articles: Mapped[str | None] = mapped_column(String(255))
    weight: Mapped[Decimal] = mapped_column(QUANTITY, nullable=False, default=Decimal("0"))
    rate: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    remarks: Mapped[str | None] = mapped_column(String(255))

    invoice: Mapped["Invoice"] = relationship(back_populates="rows")
