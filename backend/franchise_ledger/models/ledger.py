from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z


# Version 1: line items only in the legacy JSON payload (historical shapes).
# Version 2: line items stored as revenue_line_items rows.
LEGACY_LINE_ITEM_SCHEMA_VERSION = 1
LINE_ITEM_SCHEMA_VERSION = 2

REVENUE_STATUSES = ("draft", "pending", "verified", "disputed")

EXPENSE_CATEGORIES = (
    "cost_of_goods",
    "labor",
    "rent",
    "utilities",
    "marketing",
    "equipment",
    "supplies",
    "insurance",
    "taxes",
    "other",
)


class RevenueEntry(db.Model):
    """
    Sales ledger entry.

    INVARIANT: amount == net_amount == sum(price * quantity) over line_items
    after every create or edit. The write path creates exactly one line item
    per entry; the read path treats line_items as one-to-many.

    period_year/period_month are derived from revenue_date and are rewritten
    together with it on edit.
    """
    __tablename__ = "revenue_entries"
    __table_args__ = (
        db.UniqueConstraint("unit_id", "revenue_number", name="uq_revenue_unit_number"),
        db.Index("ix_revenue_unit_date", "unit_id", "revenue_date"),
        db.Index("ix_revenue_unit_period", "unit_id", "type", "period_year", "period_month"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    revenue_number = db.Column(db.String(64), nullable=False)

    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=False, index=True)

    type = db.Column(db.String(32), nullable=False, default="sales", index=True)
    category = db.Column(db.String(32), nullable=False, default="product_sales")

    amount = db.Column(db.Numeric(15, 2), nullable=False)
    net_amount = db.Column(db.Numeric(15, 2), nullable=False)

    description = db.Column(db.Text, nullable=True)

    revenue_date = db.Column(db.Date, nullable=False)
    period_year = db.Column(db.Integer, nullable=False)
    period_month = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(16), nullable=False, default="verified", index=True)

    # Historical JSON line items; only populated on version 1 rows awaiting migration
    legacy_line_items = db.Column(db.JSON, nullable=True)
    line_item_schema_version = db.Column(
        db.Integer,
        nullable=False,
        default=LINE_ITEM_SCHEMA_VERSION,
    )

    recorded_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    version_id = db.Column(db.Integer, nullable=False, default=1)

    line_items = db.relationship(
        "RevenueLineItem",
        back_populates="revenue",
        cascade="all, delete-orphan",
        order_by="RevenueLineItem.id",
    )
    unit = db.relationship("Unit")
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<RevenueEntry id={self.id} unit_id={self.unit_id} amount={self.amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "revenue_number": self.revenue_number,
            "franchise_id": self.franchise_id,
            "unit_id": self.unit_id,
            "type": self.type,
            "category": self.category,
            "amount": self.amount,
            "net_amount": self.net_amount,
            "description": self.description,
            "revenue_date": to_iso_date(self.revenue_date),
            "period_year": self.period_year,
            "period_month": self.period_month,
            "status": self.status,
            "line_items": [item.to_dict() for item in self.line_items],
            "line_item_schema_version": self.line_item_schema_version,
            "recorded_at": to_utc_z(self.recorded_at),
            "version_id": self.version_id,
        }


class RevenueLineItem(db.Model):
    """
    One product/quantity/price triple on a sales entry.

    product_id is nullable: the catalog row may be deleted later and
    migrated legacy items sometimes never carried one. product_name and
    price are snapshots taken at sale time.
    """
    __tablename__ = "revenue_line_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_line_items_quantity_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    revenue_id = db.Column(
        db.Integer,
        db.ForeignKey("revenue_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)

    revenue = db.relationship("RevenueEntry", back_populates="line_items")

    @property
    def display_id(self) -> str:
        """Composite id used by the dashboard: "{revenue_id}-{product_id|item}"."""
        suffix = self.product_id if self.product_id is not None else "item"
        return f"{self.revenue_id}-{suffix}"

    @property
    def line_total(self):
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "revenue_id": self.revenue_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price": self.price,
        }


class ExpenseEntry(db.Model):
    """
    Expense ledger entry. Independent of inventory.
    """
    __tablename__ = "expense_entries"
    __table_args__ = (
        db.UniqueConstraint("unit_id", "transaction_number", name="uq_expense_unit_number"),
        db.Index("ix_expense_unit_date", "unit_id", "transaction_date"),
        db.CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_number = db.Column(db.String(64), nullable=False)

    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=False, index=True)

    type = db.Column(db.String(32), nullable=False, default="expense")
    category = db.Column(db.String(32), nullable=False, default="other")

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")

    transaction_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="completed")

    recorded_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<ExpenseEntry id={self.id} unit_id={self.unit_id} amount={self.amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_number": self.transaction_number,
            "franchise_id": self.franchise_id,
            "unit_id": self.unit_id,
            "type": self.type,
            "category": self.category,
            "amount": self.amount,
            "description": self.description,
            "transaction_date": to_iso_date(self.transaction_date),
            "status": self.status,
            "recorded_at": to_utc_z(self.recorded_at),
            "version_id": self.version_id,
        }
