# Overview: Presentation mapping for route responses (camelCase keys, floats, ISO dates).

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from ..services.expense_service import category_label
from ..time_utils import to_iso_date, to_utc_z


def camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_json(value):
    """Recursively convert service results into JSON-ready values."""
    if isinstance(value, dict):
        return {camel(str(k)): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, date):
        return to_iso_date(value)
    return value


def sale_row(result) -> dict:
    """Dashboard row for a sale returned by the recorder."""
    entry = result.entry
    item = result.line_item
    return to_json(
        {
            "id": f"{entry.id}-item",
            "revenue_number": entry.revenue_number,
            "product": item.product_name,
            "date_of_sale": entry.revenue_date,
            "unit_price": item.price,
            "quantity_sold": item.quantity,
            "sale": item.total,
            "remaining_stock": result.remaining_stock,
        }
    )


def expense_row(entry) -> dict:
    return to_json(
        {
            "id": str(entry.id),
            "transaction_number": entry.transaction_number,
            "expense_category": category_label(entry.category),
            "date_of_expense": entry.transaction_date,
            "amount": entry.amount,
            "description": entry.description or "",
        }
    )


def stock_row(record, product) -> dict:
    return to_json(
        {
            "product_id": product.id,
            "product_name": product.name,
            "sku": product.sku,
            "category": product.category,
            "unit_price": product.unit_price,
            "quantity": record.quantity,
            "reorder_level": record.reorder_level,
            "is_low_stock": record.is_low_stock,
            "updated_at": record.updated_at,
        }
    )
