# Overview: Ledger-wide operations that span sales and expenses (bulk deletion, display ids).

from __future__ import annotations

import logging

from sqlalchemy import select

from ..extensions import db
from ..errors import ValidationFailed
from ..models import ExpenseEntry, RevenueEntry, RevenueLineItem
from ..validation import ENTRY_CATEGORIES
from .concurrency import run_with_retry, unit_of_work

"""
Deletion semantics (authoritative)

- Sales ids arrive as composite display ids "{revenue_id}-{suffix}". Several
  display ids can point at line items of the same entry, so the numeric
  revenue ids are extracted and de-duplicated before deleting.
- Expense ids map 1:1 to expense entries.
- The returned count is the number of entries actually removed, which can be
  lower than the number of ids requested (duplicates, already deleted,
  owned by another unit).
- Deleting a sale does NOT return its quantity to stock.
"""

logger = logging.getLogger(__name__)


def parse_revenue_id(value: int | str | None) -> int | None:
    """Extract the revenue entry id from "12", 12 or a display id like "12-7" / "12-item"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    head = str(value).strip().split("-", 1)[0]
    if not head.isdigit():
        return None
    revenue_id = int(head)
    return revenue_id if revenue_id > 0 else None


def _parse_expense_id(value: int | str) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    s = str(value).strip()
    return int(s) if s.isdigit() else None


def delete_entries(*, unit_id: int, category: str, ids: list[int | str]) -> int:
    """Delete sales or expense entries owned by `unit_id`; returns rows removed."""
    if category not in ENTRY_CATEGORIES:
        raise ValidationFailed("Invalid category", fields={"category": "category must be sales or expense"})

    if category == "sales":
        target_ids = sorted({rid for rid in (parse_revenue_id(i) for i in ids) if rid is not None})
    else:
        target_ids = sorted({eid for eid in (_parse_expense_id(i) for i in ids) if eid is not None})

    if not target_ids:
        return 0

    def _op() -> int:
        with unit_of_work():
            if category == "sales":
                owned = select(RevenueEntry.id).where(
                    RevenueEntry.unit_id == unit_id,
                    RevenueEntry.type == "sales",
                    RevenueEntry.id.in_(target_ids),
                )
                db.session.query(RevenueLineItem).filter(
                    RevenueLineItem.revenue_id.in_(owned)
                ).delete(synchronize_session=False)
                deleted = db.session.query(RevenueEntry).filter(
                    RevenueEntry.unit_id == unit_id,
                    RevenueEntry.type == "sales",
                    RevenueEntry.id.in_(target_ids),
                ).delete(synchronize_session=False)
            else:
                deleted = db.session.query(ExpenseEntry).filter(
                    ExpenseEntry.unit_id == unit_id,
                    ExpenseEntry.id.in_(target_ids),
                ).delete(synchronize_session=False)
        return deleted

    deleted = run_with_retry(_op)
    db.session.expire_all()
    logger.info("Deleted %s %s entr(ies) for unit %s", deleted, category, unit_id)
    return deleted
