from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


PRODUCT_STATUSES = ("active", "inactive", "discontinued")


class Product(db.Model):
    """
    Product master data.

    MULTI-TENANT: Products belong to exactly one franchise and are shared by
    all of its units. Names are unique within a franchise because sales are
    recorded against the human-readable product name.

    Read-only for the ledger: price changes never rewrite historical line
    items, which snapshot the price at sale time.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("franchise_id", "name", name="uq_products_franchise_name"),
        db.Index("ix_products_franchise_status", "franchise_id", "status"),
        db.CheckConstraint("unit_price >= 0", name="ck_products_unit_price_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(64), nullable=True)
    sku = db.Column(db.String(64), nullable=True)

    unit_price = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(db.String(16), nullable=False, default="active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    franchise = db.relationship("Franchise", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} franchise_id={self.franchise_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "franchise_id": self.franchise_id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "sku": self.sku,
            "unit_price": self.unit_price,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }


class InventoryRecord(db.Model):
    """
    On-hand stock of one product at one unit.

    INVARIANT: quantity never goes negative. The check constraint is the
    last line of defence; services decrement with a conditional UPDATE so a
    lost race surfaces as InsufficientStock, not as an integrity error.
    """
    __tablename__ = "inventory_records"
    __table_args__ = (
        db.UniqueConstraint("unit_id", "product_id", name="uq_inventory_unit_product"),
        db.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        db.CheckConstraint("reorder_level >= 0", name="ck_inventory_reorder_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    reorder_level = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    unit = db.relationship("Unit", backref=db.backref("inventory_records", lazy=True))
    product = db.relationship("Product")

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.reorder_level

    def __repr__(self) -> str:
        return f"<InventoryRecord unit_id={self.unit_id} product_id={self.product_id} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "reorder_level": self.reorder_level,
            "is_low_stock": self.is_low_stock,
            "updated_at": to_utc_z(self.updated_at),
        }
