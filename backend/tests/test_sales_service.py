# Overview: Pytest coverage for recording and editing sales against unit stock.

from datetime import date
from decimal import Decimal

import pytest

from franchise_ledger.errors import (
    InsufficientStock,
    ProductNotFound,
    ProductNotInInventory,
    SalesRecordNotFound,
    UnitNotFound,
    ValidationFailed,
)
from franchise_ledger.models import InventoryRecord, RevenueEntry
from franchise_ledger.models.ledger import LEGACY_LINE_ITEM_SCHEMA_VERSION, LINE_ITEM_SCHEMA_VERSION
from franchise_ledger.services import ledger_service, sales_service

from conftest import TODAY, make_product, on_hand, stock_product


def _sell(unit, quantity, name="Widget", sale_date=TODAY):
    return sales_service.record_sale(unit_id=unit.id, product_name=name, quantity=quantity, sale_date=sale_date)


def _edit(unit, entry_id, quantity, name="Widget", sale_date=TODAY):
    return sales_service.edit_sale(
        unit_id=unit.id,
        revenue_entry_id=entry_id,
        product_name=name,
        quantity=quantity,
        sale_date=sale_date,
    )


class TestRecordSale:
    def test_sale_computes_amount_and_decrements_stock(self, db_session, unit, product, stock):
        result = _sell(unit, 10)

        assert result.entry.amount == Decimal("100.00")
        assert result.entry.net_amount == Decimal("100.00")
        assert result.remaining_stock == 40
        assert on_hand(db_session, unit, product) == 40

    def test_sale_writes_single_line_item_and_period(self, db_session, unit, product, stock):
        result = _sell(unit, 3, sale_date=date(2026, 2, 7))

        entry = db_session.get(RevenueEntry, result.entry.id)
        assert entry.type == "sales"
        assert entry.status == "verified"
        assert entry.revenue_number == "REV-0001"
        assert (entry.period_year, entry.period_month) == (2026, 2)
        assert entry.line_item_schema_version == LINE_ITEM_SCHEMA_VERSION
        assert len(entry.line_items) == 1
        item = entry.line_items[0]
        assert (item.product_id, item.product_name, item.quantity) == (product.id, "Widget", 3)
        assert item.price == Decimal("10.00")
        assert item.display_id == f"{entry.id}-{product.id}"

    def test_revenue_numbers_increase_per_unit(self, db_session, unit, product, stock):
        first = _sell(unit, 1)
        second = _sell(unit, 1)
        assert first.entry.revenue_number == "REV-0001"
        assert second.entry.revenue_number == "REV-0002"

    def test_recorded_at_comes_from_clock(self, db_session, unit, product, stock):
        result = _sell(unit, 1)
        assert result.entry.recorded_at.date() == TODAY

    def test_insufficient_stock_reports_current_quantity(self, db_session, unit, product, stock):
        stock.quantity = 10
        db_session.commit()

        with pytest.raises(InsufficientStock) as excinfo:
            _sell(unit, 15)

        assert "Only 10 units available" in str(excinfo.value)
        assert excinfo.value.available == 10
        assert on_hand(db_session, unit, product) == 10
        assert db_session.query(RevenueEntry).count() == 0

    def test_selling_exact_stock_leaves_zero(self, db_session, unit, product, stock):
        result = _sell(unit, 50)
        assert result.remaining_stock == 0

    def test_unknown_product(self, db_session, unit, product, stock):
        with pytest.raises(ProductNotFound):
            _sell(unit, 1, name="Gizmo")

    def test_inactive_product_is_not_sellable(self, db_session, franchise, unit):
        retired = make_product(db_session, franchise, "Retired", status="discontinued")
        stock_product(db_session, unit, retired, 10)

        with pytest.raises(ProductNotFound):
            _sell(unit, 1, name="Retired")

    def test_product_of_other_franchise_is_not_found(self, db_session, unit, other_franchise):
        make_product(db_session, other_franchise, "Taco")
        with pytest.raises(ProductNotFound):
            _sell(unit, 1, name="Taco")

    def test_product_not_stocked_at_unit(self, db_session, unit, product):
        with pytest.raises(ProductNotInInventory):
            _sell(unit, 1)
        assert db_session.query(RevenueEntry).count() == 0

    def test_unknown_unit(self, db_session):
        with pytest.raises(UnitNotFound):
            sales_service.record_sale(unit_id=999, product_name="Widget", quantity=1, sale_date=TODAY)

    @pytest.mark.parametrize("quantity", [0, -3, True])
    def test_invalid_quantity_rejected_before_any_write(self, db_session, unit, product, stock, quantity):
        with pytest.raises(ValidationFailed) as excinfo:
            _sell(unit, quantity)
        assert "quantity" in excinfo.value.fields
        assert on_hand(db_session, unit, product) == 50

    def test_invalid_date_rejected(self, db_session, unit, product, stock):
        with pytest.raises(ValidationFailed) as excinfo:
            _sell(unit, 1, sale_date="2026-02-30")
        assert "date" in excinfo.value.fields


class TestEditSale:
    def test_increase_applies_only_the_delta(self, db_session, unit, product, stock):
        created = _sell(unit, 10)

        edited = _edit(unit, created.entry.id, 25)

        assert edited.entry.amount == Decimal("250.00")
        assert edited.entry.net_amount == Decimal("250.00")
        assert edited.remaining_stock == 25
        assert on_hand(db_session, unit, product) == 25

    def test_decrease_returns_stock(self, db_session, unit, product, stock):
        created = _sell(unit, 10)
        _edit(unit, created.entry.id, 25)

        edited = _edit(unit, created.entry.id, 5)

        assert edited.entry.amount == Decimal("50.00")
        assert on_hand(db_session, unit, product) == 45

    def test_same_quantity_leaves_stock_untouched(self, db_session, unit, product, stock):
        created = _sell(unit, 10)
        edited = _edit(unit, created.entry.id, 10, sale_date=date(2026, 1, 31))

        assert on_hand(db_session, unit, product) == 40
        assert edited.remaining_stock == 40
        entry = db_session.get(RevenueEntry, created.entry.id)
        assert entry.revenue_date == date(2026, 1, 31)
        assert (entry.period_year, entry.period_month) == (2026, 1)

    def test_increase_beyond_stock_fails_without_changes(self, db_session, unit, product, stock):
        created = _sell(unit, 45)

        with pytest.raises(InsufficientStock) as excinfo:
            _edit(unit, created.entry.id, 51)

        assert "Only 5 units available for increase" in str(excinfo.value)
        assert on_hand(db_session, unit, product) == 5
        entry = db_session.get(RevenueEntry, created.entry.id)
        assert entry.amount == Decimal("450.00")
        assert entry.line_items[0].quantity == 45

    def test_edit_keeps_a_single_line_item(self, db_session, unit, product, stock):
        created = _sell(unit, 2)
        _edit(unit, created.entry.id, 4)
        _edit(unit, created.entry.id, 3)

        entry = db_session.get(RevenueEntry, created.entry.id)
        assert len(entry.line_items) == 1
        assert entry.line_items[0].quantity == 3

    def test_accepts_composite_display_id(self, db_session, unit, product, stock):
        created = _sell(unit, 2)
        _edit(unit, f"{created.entry.id}-{product.id}", 6)
        assert on_hand(db_session, unit, product) == 44

    def test_entry_of_other_unit_is_not_found(self, db_session, unit, other_unit, product, stock):
        created = _sell(unit, 2)
        stock_product(db_session, other_unit, product, 10)

        with pytest.raises(SalesRecordNotFound):
            _edit(other_unit, created.entry.id, 1)

    @pytest.mark.parametrize("entry_id", ["abc", "", 99999, "-5"])
    def test_unknown_entry(self, db_session, unit, product, stock, entry_id):
        with pytest.raises(SalesRecordNotFound):
            _edit(unit, entry_id, 1)

    def test_switching_product_charges_the_new_product_only(self, db_session, franchise, unit, product, stock):
        gadget = make_product(db_session, franchise, "Gadget", price="7.50")
        stock_product(db_session, unit, gadget, 20)
        created = _sell(unit, 10)

        edited = _edit(unit, created.entry.id, 5, name="Gadget")

        # No line item named Gadget existed, so the whole new quantity is taken
        assert edited.entry.amount == Decimal("37.50")
        assert on_hand(db_session, unit, gadget) == 15
        assert on_hand(db_session, unit, product) == 40

    def test_editing_legacy_entry_normalizes_line_items(self, db_session, unit, product, stock):
        entry = RevenueEntry(
            revenue_number="REV-LEGACY-1",
            franchise_id=unit.franchise_id,
            unit_id=unit.id,
            type="sales",
            amount=Decimal("40.00"),
            net_amount=Decimal("40.00"),
            revenue_date=date(2026, 3, 1),
            period_year=2026,
            period_month=3,
            legacy_line_items=[{"item_name": "Widget", "qty": "4", "unit_price": "10.00", "product_id": product.id}],
            line_item_schema_version=LEGACY_LINE_ITEM_SCHEMA_VERSION,
        )
        db_session.add(entry)
        db_session.commit()

        _edit(unit, entry.id, 6)

        db_session.expire_all()
        entry = db_session.get(RevenueEntry, entry.id)
        assert entry.line_item_schema_version == LINE_ITEM_SCHEMA_VERSION
        assert entry.legacy_line_items is None
        assert [(i.product_name, i.quantity) for i in entry.line_items] == [("Widget", 6)]
        assert on_hand(db_session, unit, product) == 48


class TestLedgerProperties:
    def test_stock_never_negative_across_sequence(self, db_session, unit, product, stock):
        entry_ids = []
        for quantity in (20, 20, 20, 5, 30):
            try:
                entry_ids.append(_sell(unit, quantity).entry.id)
            except InsufficientStock:
                pass
            assert on_hand(db_session, unit, product) >= 0

        for entry_id, quantity in zip(entry_ids, (40, 1, 60)):
            try:
                _edit(unit, entry_id, quantity)
            except InsufficientStock:
                pass
            assert on_hand(db_session, unit, product) >= 0

    def test_amount_matches_line_item_at_rest(self, db_session, unit, product, stock):
        first = _sell(unit, 3)
        _sell(unit, 7)
        _edit(unit, first.entry.id, 9)

        db_session.expire_all()
        for entry in db_session.query(RevenueEntry).all():
            (item,) = entry.line_items
            assert entry.amount == item.price * item.quantity
            assert entry.net_amount == entry.amount

    @pytest.mark.parametrize("q1,q2", [(10, 25), (25, 10), (7, 7), (1, 50)])
    def test_edit_yields_stock_minus_new_quantity(self, db_session, unit, product, stock, q1, q2):
        created = _sell(unit, q1)
        _edit(unit, created.entry.id, q2)
        assert on_hand(db_session, unit, product) == 50 - q2

    def test_delete_does_not_restore_stock(self, db_session, unit, product, stock):
        created = _sell(unit, 10)
        _edit(unit, created.entry.id, 25)
        _edit(unit, created.entry.id, 5)

        deleted = ledger_service.delete_entries(
            unit_id=unit.id, category="sales", ids=[f"{created.entry.id}-Widget"]
        )

        assert deleted == 1
        assert db_session.query(RevenueEntry).count() == 0
        assert on_hand(db_session, unit, product) == 45
        assert db_session.query(InventoryRecord).count() == 1
