"""initial schema

Revision ID: 4c1e7a9d2b30
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa


revision = "4c1e7a9d2b30"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(14, 2)
QUANTITY = sa.Numeric(12, 3)
RATIO = sa.Numeric(12, 4)


def _timestamps(server_default: bool = False) -> list[sa.Column]:
    if server_default:
        return [
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        ]
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "document_sequences",
        sa.Column("prefix", sa.String(length=20), primary_key=True),
        sa.Column("period", sa.String(length=20), primary_key=True),
        sa.Column("last_number", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "app_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("mobile_no", sa.String(length=30), nullable=False),
        sa.Column("gstin", sa.String(length=30), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("registration_number", sa.String(length=50), nullable=False, unique=True),
        sa.Column("vehicle_type", sa.String(length=20), nullable=False),
        sa.Column("vehicle_weight", QUANTITY, nullable=False),
        sa.Column("vehicle_status", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("mobile_no", sa.String(length=30), nullable=False),
        sa.Column("license_number", sa.String(length=50), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(server_default=True),
        sa.UniqueConstraint("mobile_no", name="uq_drivers_mobile_no"),
    )
    op.create_index("ix_drivers_name", "drivers", ["name"])
    op.create_index("ix_drivers_status", "drivers", ["status"])
    op.create_table(
        "mechanics",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("certifications", sa.JSON(), nullable=False),
        *_timestamps(server_default=True),
        sa.UniqueConstraint("phone", name="uq_mechanics_phone"),
    )
    op.create_index("ix_mechanics_name", "mechanics", ["name"])
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("location_name", sa.String(length=120), nullable=False),
        *_timestamps(server_default=True),
        sa.UniqueConstraint("location_name", name="uq_locations_location_name"),
    )
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("mobile_no", sa.String(length=30), nullable=False),
        sa.Column("gstin", sa.String(length=30), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_customers_customer_name", "customers", ["customer_name"])
    op.create_index("ix_customers_company_name", "customers", ["company_name"])
    op.create_table(
        "customer_products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "customer_id",
            sa.Integer(),
            sa.ForeignKey("customers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("product_rate", MONEY, nullable=False),
    )
    op.create_table(
        "product_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("customer_products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("category_name", sa.String(length=255), nullable=False),
        sa.Column("category_rate", MONEY, nullable=False),
    )

    op.create_table(
        "banks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bank_name", sa.String(length=120), nullable=False),
        sa.Column("account_number", sa.String(length=50), nullable=False, unique=True),
        sa.Column("balance", MONEY, nullable=False),
        sa.Column("opening_balance", MONEY, nullable=False),
        sa.Column("app_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_no", sa.String(length=50), nullable=False, unique=True),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("from_bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=True),
        sa.Column("to_bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=True),
        sa.Column("app_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("related_entity_id", sa.Integer(), nullable=True),
        sa.Column("related_entity_type", sa.String(length=30), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("balance_after", MONEY, nullable=True),
        sa.Column("mirror", sa.Boolean(), nullable=False),
        sa.Column(
            "mirror_of_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True
        ),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_transactions_from_bank_id", "transactions", ["from_bank_id"])
    op.create_index("ix_transactions_to_bank_id", "transactions", ["to_bank_id"])
    op.create_index(
        "ix_transactions_related",
        "transactions",
        ["related_entity_type", "related_entity_id"],
    )
    op.create_table(
        "bank_transfers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("from_bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("to_bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("transfer_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column(
            "transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("app_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column(
            "transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True
        ),
        *_timestamps(),
    )
    op.create_table(
        "fuel_tracking",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("app_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("vehicle_id", sa.Integer(), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column(
            "previous_id", sa.Integer(), sa.ForeignKey("fuel_tracking.id"), nullable=True
        ),
        sa.Column("start_km", QUANTITY, nullable=False),
        sa.Column("end_km", QUANTITY, nullable=False),
        sa.Column("fuel_quantity", QUANTITY, nullable=False),
        sa.Column("carried_forward", QUANTITY, nullable=False),
        sa.Column("remaining_fuel_quantity", QUANTITY, nullable=False),
        sa.Column("fuel_rate", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("truck_average", RATIO, nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("payment_type", sa.String(length=20), nullable=False),
        sa.Column(
            "transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True
        ),
        *_timestamps(),
    )
    op.create_index("ix_fuel_tracking_vehicle_id", "fuel_tracking", ["vehicle_id"])
    op.create_table(
        "driver_budgets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("app_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("driver_id", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column(
            "previous_id", sa.Integer(), sa.ForeignKey("driver_budgets.id"), nullable=True
        ),
        sa.Column("allocated_amount", MONEY, nullable=False),
        sa.Column("carried_forward", MONEY, nullable=False),
        sa.Column("daily_budget_amount", MONEY, nullable=False),
        sa.Column("remaining_budget_amount", MONEY, nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("payment_type", sa.String(length=20), nullable=False),
        sa.Column(
            "transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True
        ),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_driver_budgets_driver_id", "driver_budgets", ["driver_id"])
    op.create_table(
        "maintenance",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("app_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("vehicle_id", sa.Integer(), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("mechanic_id", sa.Integer(), sa.ForeignKey("mechanics.id"), nullable=True),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("maintenance.id"), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("category_amount", MONEY, nullable=False),
        sa.Column("start_km", QUANTITY, nullable=False),
        sa.Column("target_km", QUANTITY, nullable=False),
        sa.Column("end_km", QUANTITY, nullable=False),
        sa.Column("total_km", QUANTITY, nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("is_alert", sa.Boolean(), nullable=False),
        sa.Column("is_notification_sent", sa.Boolean(), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("notification_status", sa.String(length=20), nullable=True),
        sa.Column("last_checked_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("declined_at", sa.DateTime(), nullable=True),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id"), nullable=True),
        sa.Column(
            "transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True
        ),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_maintenance_vehicle_status", "maintenance", ["vehicle_id", "status"])
    op.create_index(
        "ix_maintenance_status_notified", "maintenance", ["status", "is_notification_sent"]
    )

    op.create_table(
        "trips",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("trip_no", sa.String(length=50), nullable=False, unique=True),
        sa.Column("driver_id", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("vehicle_id", sa.Integer(), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("start_km", QUANTITY, nullable=False),
        sa.Column("end_km", QUANTITY, nullable=False),
        sa.Column("total_km", QUANTITY, nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("remarks", sa.String(length=255), nullable=True),
        sa.Column("trip_route_cost", MONEY, nullable=False),
        sa.Column("trip_expenses", MONEY, nullable=False),
        sa.Column("trip_diesel_cost", MONEY, nullable=False),
        sa.Column("remaining_amount", MONEY, nullable=False),
        sa.Column("fuel_needed", QUANTITY, nullable=False),
        sa.Column("fuel_drawn", QUANTITY, nullable=False),
        sa.Column(
            "fuel_tracking_id", sa.Integer(), sa.ForeignKey("fuel_tracking.id"), nullable=True
        ),
        sa.Column("fuel_consumed", sa.Boolean(), nullable=False),
        sa.Column(
            "driver_budget_id", sa.Integer(), sa.ForeignKey("driver_budgets.id"), nullable=True
        ),
        sa.Column("budget_deducted", MONEY, nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_trips_status", "trips", ["status"])
    op.create_index("ix_trips_driver_id", "trips", ["driver_id"])
    op.create_index("ix_trips_vehicle_id", "trips", ["vehicle_id"])

    op.create_table(
        "incomes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("app_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column(
            "transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True
        ),
        sa.Column("trip_id", sa.Integer(), sa.ForeignKey("trips.id"), nullable=True),
        sa.Column("route_number", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "trip_dates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "trip_id", sa.Integer(), sa.ForeignKey("trips.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.UniqueConstraint("trip_id", "date", name="uq_trip_dates_trip_date"),
    )
    op.create_table(
        "trip_routes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "trip_id", sa.Integer(), sa.ForeignKey("trips.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("route_number", sa.Integer(), nullable=False),
        sa.Column("start_location", sa.String(length=255), nullable=False),
        sa.Column("end_location", sa.String(length=255), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("weight", QUANTITY, nullable=False),
        sa.Column("rate", MONEY, nullable=False),
        sa.Column("route_amount", MONEY, nullable=False),
        sa.Column("advance_amount", MONEY, nullable=False),
        sa.Column("total_expense", MONEY, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("bank_id", sa.Integer(), sa.ForeignKey("banks.id"), nullable=False),
        sa.Column("payment_type", sa.String(length=20), nullable=False),
        sa.Column("route_status", sa.String(length=20), nullable=False),
        sa.UniqueConstraint("trip_id", "route_number", name="uq_trip_routes_number"),
    )
    op.create_table(
        "route_expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "route_id",
            sa.Integer(),
            sa.ForeignKey("trip_routes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("quantity", QUANTITY, nullable=False),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
    )
    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("lr_no", sa.String(length=60), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("from_location", sa.String(length=255), nullable=False),
        sa.Column("to_location", sa.String(length=255), nullable=False),
        sa.Column("taluka", sa.String(length=100), nullable=True),
        sa.Column("dist", sa.String(length=100), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("consignor", sa.String(length=255), nullable=True),
        sa.Column("consignee", sa.String(length=255), nullable=True),
        sa.Column("remarks", sa.String(length=255), nullable=True),
        sa.Column("tax_percent", MONEY, nullable=False),
        sa.Column("tax_amount", MONEY, nullable=False),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("advance_amount", MONEY, nullable=False),
        sa.Column("remaining_amount", MONEY, nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("trip_id", sa.Integer(), sa.ForeignKey("trips.id"), nullable=True),
        sa.Column("route_number", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_invoices_status", "invoices", ["status"])
    op.create_index("ix_invoices_trip_id", "invoices", ["trip_id"])
    op.create_table(
        "invoice_rows",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "invoice_id",
            sa.Integer(),
            sa.ForeignKey("invoices.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product", sa.String(length=255), nullable=False),
        sa.Column("truck_no", sa.String(length=50), nullable=False),
        sa.Column("articles", sa.String(length=255), nullable=True),
        sa.Column("weight", QUANTITY, nullable=False),
        sa.Column("rate", MONEY, nullable=False),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("remarks", sa.String(length=255), nullable=True),
    )
    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driver_id", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("trip_id", sa.Integer(), sa.ForeignKey("trips.id"), nullable=True),
        sa.Column("remarks", sa.String(length=255), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("driver_id", "date", name="uq_attendance_driver_date"),
    )


def downgrade() -> None:
    op.drop_table("attendance")
    op.drop_table("invoice_rows")
    op.drop_index("ix_invoices_trip_id", table_name="invoices")
    op.drop_index("ix_invoices_status", table_name="invoices")
    op.drop_table("invoices")
    op.drop_table("route_expenses")
    op.drop_table("trip_routes")
    op.drop_table("trip_dates")
    op.drop_table("incomes")
    op.drop_index("ix_trips_vehicle_id", table_name="trips")
    op.drop_index("ix_trips_driver_id", table_name="trips")
    op.drop_index("ix_trips_status", table_name="trips")
    op.drop_table("trips")
    op.drop_index("ix_maintenance_status_notified", table_name="maintenance")
    op.drop_index("ix_maintenance_vehicle_status", table_name="maintenance")
    op.drop_table("maintenance")
    op.drop_index("ix_driver_budgets_driver_id", table_name="driver_budgets")
    op.drop_table("driver_budgets")
    op.drop_index("ix_fuel_tracking_vehicle_id", table_name="fuel_tracking")
    op.drop_table("fuel_tracking")
    op.drop_table("expenses")
    op.drop_table("bank_transfers")
    op.drop_index("ix_transactions_related", table_name="transactions")
    op.drop_index("ix_transactions_to_bank_id", table_name="transactions")
    op.drop_index("ix_transactions_from_bank_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("banks")
    op.drop_table("product_categories")
    op.drop_table("customer_products")
    op.drop_index("ix_customers_company_name", table_name="customers")
    op.drop_index("ix_customers_customer_name", table_name="customers")
    op.drop_table("customers")
    op.drop_table("locations")
    op.drop_index("ix_mechanics_name", table_name="mechanics")
    op.drop_table("mechanics")
    op.drop_index("ix_drivers_status", table_name="drivers")
    op.drop_index("ix_drivers_name", table_name="drivers")
    op.drop_table("drivers")
    op.drop_table("vehicles")
    op.drop_table("app_users")
    op.drop_table("document_sequences")
