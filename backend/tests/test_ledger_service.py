# Overview: Pytest coverage for composite ids and bulk ledger deletion.

from datetime import date
from decimal import Decimal

import pytest

from franchise_ledger.errors import ValidationFailed
from franchise_ledger.models import ExpenseEntry, RevenueEntry, RevenueLineItem
from franchise_ledger.services import expense_service, sales_service
from franchise_ledger.services.ledger_service import delete_entries, parse_revenue_id

from conftest import TODAY, on_hand, stock_product


@pytest.mark.parametrize(
    "value,expected",
    [
        (12, 12),
        ("12", 12),
        ("12-7", 12),
        ("12-item", 12),
        (" 12-Widget ", 12),
        ("0-item", None),
        ("-12", None),
        ("abc-1", None),
        ("", None),
        (None, None),
        (True, None),
        (0, None),
    ],
)
def test_parse_revenue_id(value, expected):
    assert parse_revenue_id(value) == expected


def _sell(unit, quantity):
    return sales_service.record_sale(unit_id=unit.id, product_name="Widget", quantity=quantity, sale_date=TODAY)


def test_composite_ids_are_deduplicated(db_session, unit, product, stock):
    first = _sell(unit, 1).entry.id
    second = _sell(unit, 2).entry.id

    deleted = delete_entries(
        unit_id=unit.id,
        category="sales",
        ids=[f"{first}-{product.id}", f"{first}-item", str(first), f"{second}-{product.id}"],
    )

    assert deleted == 2
    assert db_session.query(RevenueEntry).count() == 0
    assert db_session.query(RevenueLineItem).count() == 0
    assert on_hand(db_session, unit, product) == 47


def test_count_reflects_rows_actually_removed(db_session, unit, product, stock):
    entry_id = _sell(unit, 1).entry.id

    assert delete_entries(unit_id=unit.id, category="sales", ids=[f"{entry_id}-item", "99999-item"]) == 1
    assert delete_entries(unit_id=unit.id, category="sales", ids=[f"{entry_id}-item"]) == 0


def test_other_units_entries_are_untouched(db_session, unit, other_unit, product, stock):
    stock_product(db_session, other_unit, product, 10)
    theirs = sales_service.record_sale(
        unit_id=other_unit.id, product_name="Widget", quantity=1, sale_date=TODAY
    ).entry.id

    assert delete_entries(unit_id=unit.id, category="sales", ids=[f"{theirs}-item"]) == 0
    assert db_session.query(RevenueEntry).count() == 1


def test_delete_expenses(db_session, unit, other_unit):
    mine = expense_service.record_expense(
        unit_id=unit.id, category="Rent", amount=Decimal("10.00"), expense_date=date(2026, 3, 1)
    )
    theirs = expense_service.record_expense(
        unit_id=other_unit.id, category="Rent", amount=Decimal("10.00"), expense_date=date(2026, 3, 1)
    )

    deleted = delete_entries(unit_id=unit.id, category="expense", ids=[str(mine.id), mine.id, theirs.id, "junk"])

    assert deleted == 1
    assert [e.id for e in db_session.query(ExpenseEntry).all()] == [theirs.id]


def test_sales_ids_do_not_touch_expenses(db_session, unit, product, stock):
    expense = expense_service.record_expense(
        unit_id=unit.id, category="Rent", amount=Decimal("10.00"), expense_date=TODAY
    )
    assert delete_entries(unit_id=unit.id, category="sales", ids=[f"{expense.id}-item"]) == 0
    assert db_session.query(ExpenseEntry).count() == 1


def test_unparseable_ids_delete_nothing(db_session, unit):
    assert delete_entries(unit_id=unit.id, category="sales", ids=["x", "", "-"]) == 0


def test_invalid_category(db_session, unit):
    with pytest.raises(ValidationFailed):
        delete_entries(unit_id=unit.id, category="royalty", ids=["1"])
