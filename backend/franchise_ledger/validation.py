from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationFailed
from .time_utils import parse_iso_date


# Maximum monetary value accepted from clients: 9,999,999,999.99
MAX_AMOUNT = Decimal("9999999999.99")

ENTRY_CATEGORIES = ("sales", "expense")


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to send (security boundary)
    - required: fields that must be present and non-null
    """
    writable_fields: set[str]
    required: set[str]


SALE_POLICY = PayloadPolicy(
    writable_fields={"category", "product", "quantitySold", "date"},
    required={"product", "quantitySold", "date"},
)

EXPENSE_POLICY = PayloadPolicy(
    writable_fields={"category", "expenseCategory", "amount", "date", "description"},
    required={"expenseCategory", "amount", "date"},
)

DELETE_POLICY = PayloadPolicy(
    writable_fields={"category", "ids"},
    required={"category", "ids"},
)

INVENTORY_ADD_POLICY = PayloadPolicy(
    writable_fields={"productId", "quantity", "reorderLevel"},
    required={"productId", "quantity", "reorderLevel"},
)

INVENTORY_STOCK_POLICY = PayloadPolicy(
    writable_fields={"quantity", "reorderLevel"},
    required={"quantity"},
)


def coerce_int(key: str, value: Any) -> int:
    """Strict integer coercion: rejects floats, decimals, booleans and scientific notation."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError(f"{key} must be an integer")
        if "e" in stripped.lower():
            raise ValueError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValueError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValueError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValueError(f"{key} must be an integer, not a decimal")
    raise ValueError(f"{key} must be an integer")


def coerce_decimal(key: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            # str() keeps floats from leaking binary noise into money
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"{key} must be a number")
    else:
        raise ValueError(f"{key} must be a number")
    if not amount.is_finite():
        raise ValueError(f"{key} must be a number")
    if amount.as_tuple().exponent < -2:
        raise ValueError(f"{key} must have at most 2 decimal places")
    if abs(amount) > MAX_AMOUNT:
        raise ValueError(f"{key} cannot exceed {MAX_AMOUNT}")
    return amount


def coerce_date(key: str, value: Any) -> date:
    try:
        parsed = parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a valid date (YYYY-MM-DD)")
    if parsed is None:
        raise ValueError(f"{key} must be a valid date (YYYY-MM-DD)")
    return parsed


def coerce_str(key: str, value: Any, *, max_length: int = 255, allow_blank: bool = False) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    s = value.strip()
    if not s and not allow_blank:
        raise ValueError(f"{key} cannot be blank")
    if len(s) > max_length:
        raise ValueError(f"{key} exceeds max length {max_length}")
    return s


def _check_policy(payload: Any, policy: PayloadPolicy) -> dict:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid JSON payload")

    errors: dict[str, str] = {}
    for k in payload.keys():
        if k not in policy.writable_fields:
            errors[k] = "Field not allowed"
    for k in sorted(policy.required):
        if payload.get(k) is None:
            errors[k] = "This field is required"
    if errors:
        raise ValidationFailed("Invalid payload", fields=errors)
    return payload


def _collect(payload: dict, coercers: dict) -> dict:
    """Run every coercer, gathering field-level errors before raising once."""
    errors: dict[str, str] = {}
    clean: dict = {}
    for key, coercer in coercers.items():
        if key not in payload or payload[key] is None:
            continue
        try:
            clean[key] = coercer(key, payload[key])
        except ValueError as exc:
            errors[key] = str(exc)
    if errors:
        raise ValidationFailed("Invalid payload", fields=errors)
    return clean


def validate_sale_payload(payload: Any) -> dict:
    payload = _check_policy(payload, SALE_POLICY)
    clean = _collect(payload, {
        "product": coerce_str,
        "quantitySold": coerce_int,
        "date": coerce_date,
    })
    if clean["quantitySold"] < 1:
        raise ValidationFailed("Invalid payload", fields={"quantitySold": "quantitySold must be at least 1"})
    return clean


def validate_expense_payload(payload: Any) -> dict:
    payload = _check_policy(payload, EXPENSE_POLICY)
    clean = _collect(payload, {
        "expenseCategory": coerce_str,
        "amount": coerce_decimal,
        "date": coerce_date,
        "description": lambda k, v: coerce_str(k, v, max_length=2000, allow_blank=True),
    })
    if clean["amount"] <= 0:
        raise ValidationFailed("Invalid payload", fields={"amount": "amount must be greater than 0"})
    clean.setdefault("description", "")
    return clean


def validate_delete_payload(payload: Any) -> dict:
    payload = _check_policy(payload, DELETE_POLICY)
    category = payload["category"]
    if category not in ENTRY_CATEGORIES:
        raise ValidationFailed("Invalid payload", fields={"category": "category must be sales or expense"})
    ids = payload["ids"]
    if not isinstance(ids, list) or not ids:
        raise ValidationFailed("Invalid payload", fields={"ids": "ids must be a non-empty list"})
    return {"category": category, "ids": [str(i) for i in ids]}


def validate_inventory_add_payload(payload: Any) -> dict:
    payload = _check_policy(payload, INVENTORY_ADD_POLICY)
    clean = _collect(payload, {
        "productId": coerce_int,
        "quantity": coerce_int,
        "reorderLevel": coerce_int,
    })
    enforce_non_negative_stock(clean)
    return clean


def validate_inventory_stock_payload(payload: Any) -> dict:
    payload = _check_policy(payload, INVENTORY_STOCK_POLICY)
    clean = _collect(payload, {
        "quantity": coerce_int,
        "reorderLevel": coerce_int,
    })
    enforce_non_negative_stock(clean)
    return clean


def enforce_non_negative_stock(clean: dict) -> None:
    errors = {
        key: f"{key} must be >= 0"
        for key in ("quantity", "reorderLevel")
        if key in clean and clean[key] < 0
    }
    if errors:
        raise ValidationFailed("Invalid payload", fields=errors)
