# Overview: Expense recorder; plain ledger inserts and edits with no stock side effects.

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from ..extensions import db
from ..errors import ExpenseRecordNotFound, ValidationFailed
from ..models import ExpenseEntry
from ..models.ledger import EXPENSE_CATEGORIES
from ..time_utils import Clock, get_clock
from .catalog_service import get_unit
from .concurrency import lock_for_update, run_with_retry, unit_of_work
from .document_service import next_document_number

logger = logging.getLogger(__name__)


# Dashboard label -> stored category
CATEGORY_BY_LABEL = {
    "Food Supplies": "cost_of_goods",
    "Utilities": "utilities",
    "Staff Wages": "labor",
    "Marketing": "marketing",
    "Equipment Maintenance": "equipment",
    "Rent": "rent",
    "Insurance": "insurance",
    "Cleaning Supplies": "supplies",
    "Office Supplies": "supplies",
    "Transportation": "other",
}

# Stored category -> dashboard label (several labels share "supplies"/"other")
LABEL_BY_CATEGORY = {
    "cost_of_goods": "Food Supplies",
    "utilities": "Utilities",
    "labor": "Staff Wages",
    "marketing": "Marketing",
    "equipment": "Equipment Maintenance",
    "rent": "Rent",
    "insurance": "Insurance",
    "supplies": "Office Supplies",
    "other": "Transportation",
}


def resolve_category(value: str) -> str:
    """Accept a stored category or a dashboard label; unknown labels become 'other'."""
    if value in EXPENSE_CATEGORIES:
        return value
    return CATEGORY_BY_LABEL.get(value, "other")


def category_label(category: str | None) -> str:
    return LABEL_BY_CATEGORY.get(category or "other", "Other")


def _validate_expense_input(amount: Decimal | int, expense_date: date) -> Decimal:
    errors = {}
    if isinstance(amount, int) and not isinstance(amount, bool):
        amount = Decimal(amount)
    if not isinstance(amount, Decimal) or not amount.is_finite():
        errors["amount"] = "amount must be a decimal"
    elif amount <= 0:
        errors["amount"] = "amount must be greater than 0"
    if not isinstance(expense_date, date):
        errors["date"] = "date must be a calendar date"
    if errors:
        raise ValidationFailed("Invalid expense", fields=errors)
    return amount


def record_expense(
    *,
    unit_id: int,
    category: str,
    amount: Decimal | int,
    expense_date: date,
    description: str = "",
    clock: Clock | None = None,
) -> ExpenseEntry:
    amount = _validate_expense_input(amount, expense_date)
    clock = clock or get_clock()

    def _op() -> ExpenseEntry:
        with unit_of_work():
            unit = get_unit(unit_id)
            entry = ExpenseEntry(
                transaction_number=next_document_number(unit_id=unit.id, document_type="EXPENSE", prefix="EXP"),
                franchise_id=unit.franchise_id,
                unit_id=unit.id,
                type="expense",
                category=resolve_category(category),
                amount=amount,
                description=description or "",
                transaction_date=expense_date,
                status="completed",
                recorded_at=clock.now(),
            )
            db.session.add(entry)
            db.session.flush()
        logger.info("Expense %s recorded unit=%s category=%s amount=%s", entry.id, unit_id, entry.category, amount)
        return entry

    return run_with_retry(_op)


def edit_expense(
    *,
    unit_id: int,
    expense_id: int | str,
    category: str,
    amount: Decimal | int,
    expense_date: date,
    description: str = "",
) -> ExpenseEntry:
    amount = _validate_expense_input(amount, expense_date)
    try:
        expense_id = int(expense_id)
    except (TypeError, ValueError):
        raise ExpenseRecordNotFound()

    def _op() -> ExpenseEntry:
        with unit_of_work():
            entry = lock_for_update(
                db.session.query(ExpenseEntry).filter_by(id=expense_id, unit_id=unit_id, type="expense")
            ).first()
            if entry is None:
                raise ExpenseRecordNotFound()

            entry.category = resolve_category(category)
            entry.amount = amount
            entry.description = description or ""
            entry.transaction_date = expense_date
            db.session.flush()
        return entry

    return run_with_retry(_op)
