# Overview: Canonical line-item record and the one-way migration from legacy JSON shapes.

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from ..extensions import db
from ..errors import ValidationFailed
from ..models import RevenueEntry, RevenueLineItem
from ..models.ledger import LEGACY_LINE_ITEM_SCHEMA_VERSION, LINE_ITEM_SCHEMA_VERSION
from .concurrency import run_with_retry, unit_of_work

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT_NAME = "Unknown Product"

# Historical key spellings, most specific first. Nothing outside this module
# should know about them.
_NAME_KEYS = ("product_name", "item_name", "name", "product")
_PRICE_KEYS = ("unit_price", "price")
_QUANTITY_KEYS = ("quantity", "qty")


@dataclass(frozen=True)
class LineItem:
    product_id: int | None
    product_name: str
    quantity: int
    price: Decimal

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_row(cls, row: RevenueLineItem) -> "LineItem":
        return cls(
            product_id=row.product_id,
            product_name=row.product_name,
            quantity=int(row.quantity),
            price=Decimal(str(row.price)),
        )


def _first(raw: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def normalize_line_item(raw: dict) -> LineItem:
    """
    Convert one stored legacy line item into the canonical shape.

    Missing names become "Unknown Product"; missing or malformed quantities
    and prices become 0 so a bad historical row never blocks a migration.
    """
    if not isinstance(raw, dict):
        raise ValueError("line item must be an object")

    name = _first(raw, _NAME_KEYS)
    product_name = str(name).strip() if name is not None else UNKNOWN_PRODUCT_NAME

    product_id = raw.get("product_id")
    try:
        product_id = int(product_id) if product_id is not None else None
    except (TypeError, ValueError):
        product_id = None

    try:
        quantity = int(_first(raw, _QUANTITY_KEYS) or 0)
    except (TypeError, ValueError):
        quantity = 0

    try:
        price = Decimal(str(_first(raw, _PRICE_KEYS) or 0))
    except InvalidOperation:
        price = Decimal("0")

    return LineItem(
        product_id=product_id,
        product_name=product_name or UNKNOWN_PRODUCT_NAME,
        quantity=max(quantity, 0),
        price=price,
    )


def normalize_line_items(raw_items: Any) -> list[LineItem]:
    if not raw_items:
        return []
    if isinstance(raw_items, dict):
        raw_items = [raw_items]
    return [normalize_line_item(raw) for raw in raw_items if isinstance(raw, dict)]


def entry_line_items(entry: RevenueEntry) -> list[LineItem]:
    return [LineItem.from_row(row) for row in entry.line_items]


def current_line_items(entry: RevenueEntry) -> list[LineItem]:
    """Line items of an entry, normalizing the JSON payload of not-yet-migrated rows."""
    if entry.line_item_schema_version == LEGACY_LINE_ITEM_SCHEMA_VERSION:
        return normalize_line_items(entry.legacy_line_items)
    return entry_line_items(entry)


def migrate_legacy_line_items(unit_id: int | None = None, *, batch_size: int = 200) -> int:
    """
    Move version-1 JSON line items into revenue_line_items rows.

    Each batch commits on its own; a failing batch rolls back without
    touching the ones already migrated. Returns the number of entries migrated.
    """
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise ValidationFailed("Invalid batch size", fields={"batch_size": "batch_size must be >= 1"})

    migrated = 0
    while True:
        def _op():
            with unit_of_work():
                query = db.session.query(RevenueEntry).filter(
                    RevenueEntry.line_item_schema_version == LEGACY_LINE_ITEM_SCHEMA_VERSION
                )
                if unit_id is not None:
                    query = query.filter(RevenueEntry.unit_id == unit_id)
                entries = query.order_by(RevenueEntry.id.asc()).limit(batch_size).all()

                for entry in entries:
                    for item in normalize_line_items(entry.legacy_line_items):
                        entry.line_items.append(
                            RevenueLineItem(
                                product_id=item.product_id,
                                product_name=item.product_name,
                                quantity=item.quantity,
                                price=item.price,
                            )
                        )
                    entry.legacy_line_items = None
                    entry.line_item_schema_version = LINE_ITEM_SCHEMA_VERSION
                return len(entries)

        count = run_with_retry(_op)
        migrated += count
        if count < batch_size:
            break

    if migrated:
        logger.info("Migrated legacy line items for %s revenue entries", migrated)
    return migrated
