# Overview: Financial aggregator; read-only period statistics, series and rankings over the ledger.

from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import MAXYEAR, MINYEAR, date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import ExpenseEntry, RevenueEntry
from ..time_utils import Clock, get_clock, previous_month, shift_month, to_iso_date
from .catalog_service import get_unit
from .expense_service import category_label
from .line_item_service import current_line_items

"""
Numeric rules

- Sums are exact Decimal additions of stored 2dp amounts; nothing is rounded
  until a percentage change or an average price is produced.
- Any ratio with a zero (or negative) denominator is 0, never an error.
- Every function here is a pure read: calling it twice without an
  intervening write returns the same result.
"""

ZERO = Decimal("0")
TWO_PLACES = Decimal("0.01")
MONTHS_IN_YEAR = 12


class ReportError(Exception):
    """Raised when report parameters are out of range."""
    pass


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percentage_change(current, previous) -> Decimal:
    """(current - previous) / previous * 100, rounded to 2dp; 0 when previous <= 0."""
    current = _dec(current)
    previous = _dec(previous)
    if previous <= 0:
        return _round2(ZERO)
    return _round2((current - previous) / previous * 100)


def _check_year(year: int) -> None:
    if not MINYEAR <= year <= MAXYEAR:
        raise ReportError(f"year must be between {MINYEAR} and {MAXYEAR}")


def _resolve_as_of(as_of: date | None, clock: Clock | None) -> date:
    if as_of is not None:
        return as_of
    return (clock or get_clock()).today()


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _sales_totals(unit_id: int, year: int, month: int) -> tuple[Decimal, Decimal]:
    rows = (
        db.session.query(RevenueEntry.amount, RevenueEntry.net_amount)
        .filter(
            RevenueEntry.unit_id == unit_id,
            RevenueEntry.type == "sales",
            RevenueEntry.period_year == year,
            RevenueEntry.period_month == month,
        )
        .all()
    )
    amount = sum((_dec(r.amount) for r in rows), ZERO)
    net_amount = sum((_dec(r.net_amount) for r in rows), ZERO)
    return amount, net_amount


def _expense_total(unit_id: int, year: int, month: int) -> Decimal:
    if year < MINYEAR:
        return ZERO
    start, end = _month_bounds(year, month)
    rows = (
        db.session.query(ExpenseEntry.amount)
        .filter(
            ExpenseEntry.unit_id == unit_id,
            ExpenseEntry.transaction_date >= start,
            ExpenseEntry.transaction_date <= end,
        )
        .all()
    )
    return sum((_dec(r.amount) for r in rows), ZERO)


def sales_statistics(unit_id: int, as_of: date | None = None, *, clock: Clock | None = None) -> dict:
    """Current vs previous calendar month sales for the unit."""
    get_unit(unit_id)
    as_of = _resolve_as_of(as_of, clock)
    prev_year, prev_month = previous_month(as_of.year, as_of.month)

    current_sales, current_profit = _sales_totals(unit_id, as_of.year, as_of.month)
    previous_sales, previous_profit = _sales_totals(unit_id, prev_year, prev_month)

    return {
        "total_sales": current_sales,
        "total_profit": current_profit,
        "sales_change_pct": percentage_change(current_sales, previous_sales),
        "profit_change_pct": percentage_change(current_profit, previous_profit),
    }


def finance_statistics(unit_id: int, as_of: date | None = None, *, clock: Clock | None = None) -> dict:
    """Current vs previous calendar month sales, expenses and profit."""
    get_unit(unit_id)
    as_of = _resolve_as_of(as_of, clock)
    prev_year, prev_month = previous_month(as_of.year, as_of.month)

    current_sales, _ = _sales_totals(unit_id, as_of.year, as_of.month)
    previous_sales, _ = _sales_totals(unit_id, prev_year, prev_month)
    current_expenses = _expense_total(unit_id, as_of.year, as_of.month)
    previous_expenses = _expense_total(unit_id, prev_year, prev_month)

    current_profit = current_sales - current_expenses
    previous_profit = previous_sales - previous_expenses

    return {
        "total_sales": current_sales,
        "total_expenses": current_expenses,
        "total_profit": current_profit,
        "sales_change_pct": percentage_change(current_sales, previous_sales),
        "expenses_change_pct": percentage_change(current_expenses, previous_expenses),
        "profit_change_pct": percentage_change(current_profit, previous_profit),
    }


def monthly_series(unit_id: int, year: int) -> dict:
    """
    Twelve monthly buckets (index 0 = January) of sales, expenses and profit.

    Sales are bucketed by the entry's period month, expenses by the month of
    their transaction date. Months without entries are 0.
    """
    _check_year(year)
    get_unit(unit_id)
    sales = [ZERO] * MONTHS_IN_YEAR
    expenses = [ZERO] * MONTHS_IN_YEAR

    sales_rows = (
        db.session.query(RevenueEntry.period_month, RevenueEntry.amount)
        .filter(
            RevenueEntry.unit_id == unit_id,
            RevenueEntry.type == "sales",
            RevenueEntry.period_year == year,
        )
        .all()
    )
    for month, amount in sales_rows:
        sales[month - 1] += _dec(amount)

    expense_rows = (
        db.session.query(ExpenseEntry.transaction_date, ExpenseEntry.amount)
        .filter(
            ExpenseEntry.unit_id == unit_id,
            ExpenseEntry.transaction_date >= date(year, 1, 1),
            ExpenseEntry.transaction_date <= date(year, 12, 31),
        )
        .all()
    )
    for tx_date, amount in expense_rows:
        expenses[tx_date.month - 1] += _dec(amount)

    profit = [s - e for s, e in zip(sales, expenses)]
    return {"sales": sales, "expenses": expenses, "profit": profit}


def product_sales_ranking(unit_id: int, month: int, year: int, *, size: int = 5) -> dict:
    """
    Most and least sold products for one month, by total quantity.

    Only verified sales count. Products are grouped by display name. Both
    lists are in descending quantity order, so the low list starts with the
    best seller among the least sold.
    """
    if not 1 <= month <= MONTHS_IN_YEAR:
        raise ReportError("month must be between 1 and 12")
    if size < 1:
        raise ReportError("size must be positive")
    _check_year(year)
    get_unit(unit_id)

    entries = (
        db.session.query(RevenueEntry)
        .options(selectinload(RevenueEntry.line_items))
        .filter(
            RevenueEntry.unit_id == unit_id,
            RevenueEntry.type == "sales",
            RevenueEntry.status == "verified",
            RevenueEntry.period_year == year,
            RevenueEntry.period_month == month,
        )
        .order_by(RevenueEntry.revenue_date.asc(), RevenueEntry.id.asc())
        .all()
    )

    totals: "OrderedDict[str, dict]" = OrderedDict()
    for entry in entries:
        for item in current_line_items(entry):
            bucket = totals.setdefault(
                item.product_name,
                {"product_name": item.product_name, "total_quantity": 0, "total_revenue": ZERO},
            )
            bucket["total_quantity"] += item.quantity
            bucket["total_revenue"] += item.total

    ranked = []
    for bucket in totals.values():
        qty = bucket["total_quantity"]
        avg_price = _round2(bucket["total_revenue"] / qty) if qty else _round2(ZERO)
        ranked.append({**bucket, "avg_price": avg_price})

    # sorted() is stable: ties keep first-sold order
    ranked = sorted(ranked, key=lambda r: r["total_quantity"], reverse=True)

    return {
        "most_selling": ranked[:size],
        "low_selling": ranked[-size:] if ranked else [],
    }


def profit_timeline(sales_rows: Iterable[dict], expense_rows: Iterable[dict]) -> list[dict]:
    """
    Per-day sales, expenses and profit, newest day first.

    sales_rows need "date_of_sale" and "sale"; expense_rows need
    "date_of_expense" and "amount". A day missing on one side counts 0 there.
    """
    sales_by_date: dict[str, Decimal] = {}
    for row in sales_rows:
        key = _date_key(row["date_of_sale"])
        sales_by_date[key] = sales_by_date.get(key, ZERO) + _dec(row["sale"])

    expenses_by_date: dict[str, Decimal] = {}
    for row in expense_rows:
        key = _date_key(row["date_of_expense"])
        expenses_by_date[key] = expenses_by_date.get(key, ZERO) + _dec(row["amount"])

    timeline = []
    for day in sorted(set(sales_by_date) | set(expenses_by_date), reverse=True):
        total_sales = sales_by_date.get(day, ZERO)
        total_expenses = expenses_by_date.get(day, ZERO)
        timeline.append(
            {
                "id": day,
                "date": day,
                "total_sales": total_sales,
                "total_expenses": total_expenses,
                "profit": total_sales - total_expenses,
            }
        )
    return timeline


def _date_key(value) -> str:
    if isinstance(value, date):
        return to_iso_date(value)
    return str(value)


def _window_start(as_of: date, months: int) -> date:
    year, month = shift_month(as_of.year, as_of.month, -months)
    if year < MINYEAR:
        raise ReportError("months reaches back before year 1")
    day = min(as_of.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def sales_rows(unit_id: int, since: date) -> list[dict]:
    """One row per line item of every sale dated on or after `since`, newest first."""
    entries = (
        db.session.query(RevenueEntry)
        .options(selectinload(RevenueEntry.line_items))
        .filter(
            RevenueEntry.unit_id == unit_id,
            RevenueEntry.type == "sales",
            RevenueEntry.revenue_date >= since,
        )
        .order_by(RevenueEntry.revenue_date.desc(), RevenueEntry.id.desc())
        .all()
    )
    rows = []
    for entry in entries:
        for item in current_line_items(entry):
            suffix = item.product_id if item.product_id is not None else "item"
            rows.append(
                {
                    "id": f"{entry.id}-{suffix}",
                    "product": item.product_name,
                    "date_of_sale": entry.revenue_date,
                    "unit_price": item.price,
                    "quantity_sold": item.quantity,
                    "sale": item.total,
                }
            )
    return rows


def expense_rows(unit_id: int, since: date) -> list[dict]:
    entries = (
        db.session.query(ExpenseEntry)
        .filter(
            ExpenseEntry.unit_id == unit_id,
            ExpenseEntry.type == "expense",
            ExpenseEntry.transaction_date >= since,
        )
        .order_by(ExpenseEntry.transaction_date.desc(), ExpenseEntry.id.desc())
        .all()
    )
    return [
        {
            "id": str(e.id),
            "expense_category": category_label(e.category),
            "date_of_expense": e.transaction_date,
            "amount": _dec(e.amount),
            "description": e.description or "",
        }
        for e in entries
    ]


def financial_overview(
    unit_id: int,
    as_of: date | None = None,
    *,
    months: int = 3,
    clock: Clock | None = None,
) -> dict:
    """Sales and expense rows for the trailing window, the per-day profit timeline and totals."""
    if months < 1:
        raise ReportError("months must be positive")
    get_unit(unit_id)
    as_of = _resolve_as_of(as_of, clock)
    since = _window_start(as_of, months)

    sales = sales_rows(unit_id, since)
    expenses = expense_rows(unit_id, since)
    total_sales = sum((r["sale"] for r in sales), ZERO)
    total_expenses = sum((r["amount"] for r in expenses), ZERO)

    return {
        "sales": sales,
        "expenses": expenses,
        "profit": profit_timeline(sales, expenses),
        "totals": {
            "sales": total_sales,
            "expenses": total_expenses,
            "profit": total_sales - total_expenses,
        },
    }


def product_performance(unit_id: int, year: int | None = None, *, clock: Clock | None = None) -> dict:
    """
    Monthly sold quantities (12 buckets) of the year's top and lowest selling product.

    Items without a product id are ignored. With no sales both series are zeros.
    """
    get_unit(unit_id)
    if year is None:
        year = (clock or get_clock()).today().year
    _check_year(year)

    entries = (
        db.session.query(RevenueEntry)
        .options(selectinload(RevenueEntry.line_items))
        .filter(
            RevenueEntry.unit_id == unit_id,
            RevenueEntry.type == "sales",
            RevenueEntry.period_year == year,
        )
        .order_by(RevenueEntry.id.asc())
        .all()
    )

    by_product: dict[int, list[int]] = {}
    for entry in entries:
        for item in current_line_items(entry):
            if item.product_id is None:
                continue
            buckets = by_product.setdefault(item.product_id, [0] * MONTHS_IN_YEAR)
            buckets[entry.period_month - 1] += item.quantity

    ranked = sorted(by_product.items(), key=lambda kv: sum(kv[1]), reverse=True)
    empty = [0] * MONTHS_IN_YEAR
    top_id, top_data = ranked[0] if ranked else (None, empty)
    low_id, low_data = ranked[-1] if ranked else (None, empty)

    return {
        "year": year,
        "top_product_id": top_id,
        "top_performing_product_data": list(top_data),
        "low_product_id": low_id,
        "low_performing_product_data": list(low_data),
    }
