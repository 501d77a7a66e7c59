# Overview: Read-only product catalog lookups scoped to a franchise.

from __future__ import annotations

from sqlalchemy import select

from ..extensions import db
from ..errors import ProductNotFound, UnitNotFound
from ..models import InventoryRecord, Product, Unit


def get_unit(unit_id: int) -> Unit:
    unit = db.session.query(Unit).filter_by(id=unit_id).first()
    if unit is None:
        raise UnitNotFound()
    return unit


def find_active_product_by_name(franchise_id: int, name: str) -> Product:
    """Exact-name lookup; sales are entered against the product's display name."""
    product = (
        db.session.query(Product)
        .filter(
            Product.franchise_id == franchise_id,
            Product.name == name,
            Product.status == "active",
        )
        .first()
    )
    if product is None:
        raise ProductNotFound()
    return product


def get_franchise_product(franchise_id: int, product_id: int) -> Product:
    product = (
        db.session.query(Product)
        .filter(Product.id == product_id, Product.franchise_id == franchise_id)
        .first()
    )
    if product is None:
        raise ProductNotFound("Product not found or not available for this franchise")
    return product


def list_available_products(unit_id: int) -> list[Product]:
    """Active franchise products the unit does not stock yet."""
    unit = get_unit(unit_id)
    stocked = select(InventoryRecord.product_id).where(InventoryRecord.unit_id == unit.id)
    return (
        db.session.query(Product)
        .filter(
            Product.franchise_id == unit.franchise_id,
            Product.status == "active",
            Product.id.notin_(stocked),
        )
        .order_by(Product.name.asc())
        .all()
    )
