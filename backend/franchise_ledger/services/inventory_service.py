# Overview: Per-(unit, product) on-hand stock; the only mutable stock state in the ledger.

# backend/franchise_ledger/services/inventory_service.py

from __future__ import annotations

import logging

from sqlalchemy import update

from ..extensions import db
from ..errors import ConflictError, InsufficientStock, ProductNotInInventory, ValidationFailed
from ..models import InventoryRecord, Product
from .catalog_service import get_franchise_product, get_unit
from .concurrency import lock_for_update, run_with_retry, unit_of_work

"""
Inventory Invariants (authoritative)

- quantity >= 0 at every observable point.
- decrement() is one conditional UPDATE ("subtract if quantity >= n").
  The read of current stock and the write are never separated by
  application logic, so two concurrent sales cannot both pass the check.
- A decrement that loses a race re-reads the row and reports the fresh
  quantity through InsufficientStock; nothing else changes.
- decrement()/increment() never commit. They join the caller's unit of work
  so a ledger entry and its stock delta are committed together or not at all.
- Removing a product from a unit's inventory leaves ledger history intact.
"""

logger = logging.getLogger(__name__)


def _query_record(unit_id: int, product_id: int):
    return db.session.query(InventoryRecord).filter_by(unit_id=unit_id, product_id=product_id)


def _reload(unit_id: int, product_id: int) -> InventoryRecord | None:
    # populate_existing: never trust an identity-map copy after a bulk UPDATE
    return _query_record(unit_id, product_id).populate_existing().first()


def get_record(unit_id: int, product_id: int, *, lock: bool = False) -> InventoryRecord:
    query = _query_record(unit_id, product_id)
    if lock:
        query = lock_for_update(query).populate_existing()
    record = query.first()
    if record is None:
        raise ProductNotInInventory()
    return record


def find_record(unit_id: int, product_id: int) -> InventoryRecord | None:
    return _query_record(unit_id, product_id).first()


def decrement(unit_id: int, product_id: int, by_qty: int, *, for_increase: bool = False) -> InventoryRecord:
    """
    Atomically subtract `by_qty` from on-hand stock.

    Raises InsufficientStock (with the freshly read quantity) if the stock
    cannot cover the request, including when a concurrent writer got there
    first. Returns the refreshed record.
    """
    if by_qty <= 0:
        raise ValidationFailed("Invalid quantity", fields={"quantity": "quantity must be > 0"})

    stmt = (
        update(InventoryRecord)
        .where(
            InventoryRecord.unit_id == unit_id,
            InventoryRecord.product_id == product_id,
            InventoryRecord.quantity >= by_qty,
        )
        .values(quantity=InventoryRecord.quantity - by_qty)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)

    record = _reload(unit_id, product_id)
    if record is None:
        raise ProductNotInInventory()
    if not result.rowcount:
        logger.warning(
            "Stock decrement rejected unit=%s product=%s requested=%s available=%s",
            unit_id, product_id, by_qty, record.quantity,
        )
        raise InsufficientStock(record.quantity, for_increase=for_increase, product_id=product_id)

    logger.info("Stock decremented unit=%s product=%s by=%s remaining=%s", unit_id, product_id, by_qty, record.quantity)
    return record


def increment(unit_id: int, product_id: int, by_qty: int) -> InventoryRecord:
    """Atomically add `by_qty` to on-hand stock. No upper bound."""
    if by_qty <= 0:
        raise ValidationFailed("Invalid quantity", fields={"quantity": "quantity must be > 0"})

    stmt = (
        update(InventoryRecord)
        .where(
            InventoryRecord.unit_id == unit_id,
            InventoryRecord.product_id == product_id,
        )
        .values(quantity=InventoryRecord.quantity + by_qty)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if not result.rowcount:
        raise ProductNotInInventory()

    record = _reload(unit_id, product_id)
    logger.info("Stock incremented unit=%s product=%s by=%s remaining=%s", unit_id, product_id, by_qty, record.quantity)
    return record


def add_product_to_inventory(
    *,
    unit_id: int,
    product_id: int,
    quantity: int,
    reorder_level: int,
) -> InventoryRecord:
    """Start stocking a franchise product at a unit."""
    if quantity < 0 or reorder_level < 0:
        raise ValidationFailed(
            "Invalid stock levels",
            fields={"quantity": "must be >= 0", "reorderLevel": "must be >= 0"},
        )

    def _op():
        with unit_of_work():
            unit = get_unit(unit_id)
            product = get_franchise_product(unit.franchise_id, product_id)
            if find_record(unit.id, product.id) is not None:
                raise ConflictError("Product is already in unit inventory")

            record = InventoryRecord(
                unit_id=unit.id,
                product_id=product.id,
                quantity=quantity,
                reorder_level=reorder_level,
            )
            db.session.add(record)
            db.session.flush()
        logger.info("Product %s added to unit %s inventory with quantity=%s", product_id, unit_id, quantity)
        return record

    return run_with_retry(_op)


def set_stock_level(
    *,
    unit_id: int,
    product_id: int,
    quantity: int,
    reorder_level: int | None = None,
) -> InventoryRecord:
    """Overwrite on-hand quantity (stock count) and optionally the reorder level."""
    if quantity < 0 or (reorder_level is not None and reorder_level < 0):
        raise ValidationFailed(
            "Invalid stock levels",
            fields={"quantity": "must be >= 0", "reorderLevel": "must be >= 0"},
        )

    def _op():
        with unit_of_work():
            record = get_record(unit_id, product_id, lock=True)
            record.quantity = quantity
            if reorder_level is not None:
                record.reorder_level = reorder_level
            db.session.flush()
        return record

    return run_with_retry(_op)


def remove_product_from_inventory(*, unit_id: int, product_id: int) -> None:
    """Stop stocking a product. Historical sales that reference it stay valid."""
    def _op():
        with unit_of_work():
            record = get_record(unit_id, product_id, lock=True)
            db.session.delete(record)
        logger.info("Product %s removed from unit %s inventory", product_id, unit_id)

    run_with_retry(_op)


def list_unit_inventory(unit_id: int) -> list[tuple[InventoryRecord, Product]]:
    get_unit(unit_id)
    return (
        db.session.query(InventoryRecord, Product)
        .join(Product, InventoryRecord.product_id == Product.id)
        .filter(InventoryRecord.unit_id == unit_id)
        .order_by(Product.name.asc())
        .all()
    )


def low_stock_items(unit_id: int) -> list[tuple[InventoryRecord, Product]]:
    """Stocked products at or below their reorder level, emptiest first."""
    get_unit(unit_id)
    return (
        db.session.query(InventoryRecord, Product)
        .join(Product, InventoryRecord.product_id == Product.id)
        .filter(
            InventoryRecord.unit_id == unit_id,
            InventoryRecord.quantity <= InventoryRecord.reorder_level,
        )
        .order_by(InventoryRecord.quantity.asc(), Product.name.asc())
        .all()
    )
