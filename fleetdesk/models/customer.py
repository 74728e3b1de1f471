from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import MONEY, Base, utcnow


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customers_customer_name", "customer_name"),
        Index("ix_customers_company_name", "company_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile_no: Mapped[str] = mapped_column(String(30), nullable=False)
    gstin: Mapped[str | None] = mapped_column(String(30))
    address: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
    products: Mapped[list["CustomerProduct"]] = relationship(
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="CustomerProduct.id",
    )


class CustomerProduct(Base):
    __tablename__ = "customer_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_rate: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    customer: Mapped[Customer] = relationship(back_populates="products")
    categories: Mapped[list["ProductCategory"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductCategory.id",
    )


class ProductCategory(Base):
    __tablename__ = "product_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("customer_products.id", ondelete="CASCADE"), nullable=False
    )
    category_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_rate: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    product: Mapped[CustomerProduct] = relationship(back_populates="categories")
