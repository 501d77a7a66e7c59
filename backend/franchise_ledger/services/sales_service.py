"""
Sales recorder: creates and edits sales ledger entries and applies the
matching inventory delta in the same unit of work.

Lifecycle per entry: none -> created -> edited* -> deleted. There is no
approval workflow; new entries are written as status='verified'.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..extensions import db
from ..errors import InsufficientStock, SalesRecordNotFound, ValidationFailed
from ..models import RevenueEntry, RevenueLineItem
from ..models.ledger import LINE_ITEM_SCHEMA_VERSION
from ..time_utils import Clock, get_clock
from . import inventory_service
from .catalog_service import find_active_product_by_name, get_unit
from .concurrency import lock_for_update, run_with_retry, unit_of_work
from .document_service import next_document_number
from .ledger_service import parse_revenue_id
from .line_item_service import LineItem, current_line_items

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleResult:
    """A committed sale plus the post-mutation stock for caller display."""
    entry: RevenueEntry
    line_item: LineItem
    remaining_stock: int


def _validate_sale_input(quantity: int, sale_date: date) -> None:
    errors = {}
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        errors["quantity"] = "quantity must be a positive integer"
    if not isinstance(sale_date, date):
        errors["date"] = "date must be a calendar date"
    if errors:
        raise ValidationFailed("Invalid sale", fields=errors)


def _apply_period(entry: RevenueEntry, sale_date: date) -> None:
    entry.revenue_date = sale_date
    entry.period_year = sale_date.year
    entry.period_month = sale_date.month


def record_sale(
    *,
    unit_id: int,
    product_name: str,
    quantity: int,
    sale_date: date,
    user_id: int | None = None,
    clock: Clock | None = None,
) -> SaleResult:
    """
    Record a product sale and take the sold quantity out of stock.

    Either the revenue entry exists and stock is reduced, or neither happened.
    """
    _validate_sale_input(quantity, sale_date)
    clock = clock or get_clock()

    def _op() -> SaleResult:
        with unit_of_work():
            unit = get_unit(unit_id)
            product = find_active_product_by_name(unit.franchise_id, product_name)
            record = inventory_service.get_record(unit.id, product.id, lock=True)

            if quantity > record.quantity:
                raise InsufficientStock(record.quantity, product_id=product.id)

            unit_price = Decimal(str(product.unit_price))
            amount = unit_price * quantity

            entry = RevenueEntry(
                revenue_number=next_document_number(unit_id=unit.id, document_type="REVENUE", prefix="REV"),
                franchise_id=unit.franchise_id,
                unit_id=unit.id,
                type="sales",
                category="product_sales",
                amount=amount,
                net_amount=amount,
                description=f"Product sale: {product.name}",
                status="verified",
                line_item_schema_version=LINE_ITEM_SCHEMA_VERSION,
                recorded_at=clock.now(),
            )
            _apply_period(entry, sale_date)
            entry.line_items.append(
                RevenueLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    price=unit_price,
                )
            )
            db.session.add(entry)
            db.session.flush()

            record = inventory_service.decrement(unit.id, product.id, quantity)

            result = SaleResult(
                entry=entry,
                line_item=LineItem(product.id, product.name, quantity, unit_price),
                remaining_stock=record.quantity,
            )

        logger.info(
            "Sale %s recorded unit=%s product=%s quantity=%s amount=%s user=%s",
            entry.id, unit_id, product.id, quantity, amount, user_id,
        )
        return result

    return run_with_retry(_op)


def edit_sale(
    *,
    unit_id: int,
    revenue_entry_id: int | str,
    product_name: str,
    quantity: int,
    sale_date: date,
) -> SaleResult:
    """
    Rewrite a sale in place and apply only the quantity delta to stock.

    The previous quantity is read from the line item whose product name
    matches the new one (0 if none does), and the delta is applied to the
    stock record of the new product. Switching products therefore does not
    return stock to the original product.
    """
    _validate_sale_input(quantity, sale_date)
    revenue_id = parse_revenue_id(revenue_entry_id)
    if revenue_id is None:
        raise SalesRecordNotFound()

    def _op() -> SaleResult:
        with unit_of_work():
            entry = lock_for_update(
                db.session.query(RevenueEntry).filter_by(id=revenue_id, unit_id=unit_id, type="sales")
            ).first()
            if entry is None:
                raise SalesRecordNotFound()

            unit = get_unit(unit_id)
            product = find_active_product_by_name(unit.franchise_id, product_name)
            record = inventory_service.get_record(unit.id, product.id, lock=True)

            old_quantity = next(
                (item.quantity for item in current_line_items(entry) if item.product_name == product_name),
                0,
            )
            delta = quantity - old_quantity
            if delta > 0 and delta > record.quantity:
                raise InsufficientStock(record.quantity, for_increase=True, product_id=product.id)

            unit_price = Decimal(str(product.unit_price))
            amount = unit_price * quantity

            entry.amount = amount
            entry.net_amount = amount
            entry.description = f"Product sale: {product.name}"
            _apply_period(entry, sale_date)
            entry.line_items.clear()
            entry.line_items.append(
                RevenueLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    price=unit_price,
                )
            )
            entry.legacy_line_items = None
            entry.line_item_schema_version = LINE_ITEM_SCHEMA_VERSION
            db.session.flush()

            if delta > 0:
                record = inventory_service.decrement(unit.id, product.id, delta, for_increase=True)
            elif delta < 0:
                record = inventory_service.increment(unit.id, product.id, -delta)

            result = SaleResult(
                entry=entry,
                line_item=LineItem(product.id, product.name, quantity, unit_price),
                remaining_stock=record.quantity,
            )

        logger.info(
            "Sale %s edited unit=%s product=%s quantity=%s delta=%s",
            revenue_id, unit_id, product.id, quantity, delta,
        )
        return result

    return run_with_retry(_op)
