# Overview: Pytest coverage for unit stock primitives and inventory management.

import pytest
from sqlalchemy import update

from franchise_ledger.errors import (
    ConflictError,
    InsufficientStock,
    ProductNotFound,
    ProductNotInInventory,
    ValidationFailed,
)
from franchise_ledger.models import InventoryRecord
from franchise_ledger.services import catalog_service, inventory_service

from conftest import make_product, on_hand, stock_product


class TestStockPrimitives:
    def test_decrement_returns_refreshed_record(self, db_session, unit, product, stock):
        record = inventory_service.decrement(unit.id, product.id, 8)
        db_session.commit()

        assert record.quantity == 42
        assert on_hand(db_session, unit, product) == 42

    def test_decrement_more_than_on_hand(self, db_session, unit, product, stock):
        with pytest.raises(InsufficientStock) as excinfo:
            inventory_service.decrement(unit.id, product.id, 51)
        db_session.rollback()

        assert excinfo.value.available == 50
        assert on_hand(db_session, unit, product) == 50

    def test_decrement_reports_fresh_quantity_not_stale_copy(self, db_session, unit, product, stock):
        loaded = inventory_service.get_record(unit.id, product.id)
        assert loaded.quantity == 50

        # Another writer drains the row behind the session's back
        db_session.execute(
            update(InventoryRecord)
            .where(InventoryRecord.id == loaded.id)
            .values(quantity=3)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(InsufficientStock) as excinfo:
            inventory_service.decrement(unit.id, product.id, 5)

        assert excinfo.value.available == 3
        assert "Only 3 units available" in excinfo.value.message

    def test_decrement_for_increase_wording(self, db_session, unit, product, stock):
        with pytest.raises(InsufficientStock) as excinfo:
            inventory_service.decrement(unit.id, product.id, 60, for_increase=True)
        assert str(excinfo.value).endswith("available for increase")

    def test_decrement_unstocked_product(self, db_session, unit, product):
        with pytest.raises(ProductNotInInventory):
            inventory_service.decrement(unit.id, product.id, 1)

    @pytest.mark.parametrize("qty", [0, -1])
    def test_non_positive_quantities_rejected(self, db_session, unit, product, stock, qty):
        with pytest.raises(ValidationFailed):
            inventory_service.decrement(unit.id, product.id, qty)
        with pytest.raises(ValidationFailed):
            inventory_service.increment(unit.id, product.id, qty)

    def test_increment_has_no_upper_bound(self, db_session, unit, product, stock):
        record = inventory_service.increment(unit.id, product.id, 10_000)
        db_session.commit()
        assert record.quantity == 10_050

    def test_increment_unstocked_product(self, db_session, unit, product):
        with pytest.raises(ProductNotInInventory):
            inventory_service.increment(unit.id, product.id, 1)

    def test_get_record_missing(self, db_session, unit, product):
        with pytest.raises(ProductNotInInventory):
            inventory_service.get_record(unit.id, product.id)


class TestInventoryManagement:
    def test_add_product_to_inventory(self, db_session, unit, product):
        record = inventory_service.add_product_to_inventory(
            unit_id=unit.id, product_id=product.id, quantity=12, reorder_level=4
        )
        assert (record.quantity, record.reorder_level) == (12, 4)
        assert on_hand(db_session, unit, product) == 12

    def test_add_twice_conflicts(self, db_session, unit, product, stock):
        with pytest.raises(ConflictError):
            inventory_service.add_product_to_inventory(
                unit_id=unit.id, product_id=product.id, quantity=1, reorder_level=0
            )
        assert on_hand(db_session, unit, product) == 50

    def test_add_product_of_other_franchise(self, db_session, unit, other_franchise):
        foreign = make_product(db_session, other_franchise, "Taco")
        with pytest.raises(ProductNotFound):
            inventory_service.add_product_to_inventory(
                unit_id=unit.id, product_id=foreign.id, quantity=1, reorder_level=0
            )

    def test_add_negative_levels_rejected(self, db_session, unit, product):
        with pytest.raises(ValidationFailed):
            inventory_service.add_product_to_inventory(
                unit_id=unit.id, product_id=product.id, quantity=-1, reorder_level=0
            )
        assert db_session.query(InventoryRecord).count() == 0

    def test_set_stock_level(self, db_session, unit, product, stock):
        record = inventory_service.set_stock_level(
            unit_id=unit.id, product_id=product.id, quantity=7, reorder_level=9
        )
        assert (record.quantity, record.reorder_level) == (7, 9)
        assert record.is_low_stock

    def test_set_stock_level_keeps_reorder_level_when_omitted(self, db_session, unit, product, stock):
        record = inventory_service.set_stock_level(unit_id=unit.id, product_id=product.id, quantity=0)
        assert (record.quantity, record.reorder_level) == (0, 5)

    def test_set_stock_level_rejects_negative(self, db_session, unit, product, stock):
        with pytest.raises(ValidationFailed):
            inventory_service.set_stock_level(unit_id=unit.id, product_id=product.id, quantity=-2)

    def test_remove_product(self, db_session, unit, product, stock):
        inventory_service.remove_product_from_inventory(unit_id=unit.id, product_id=product.id)
        assert db_session.query(InventoryRecord).count() == 0

        with pytest.raises(ProductNotInInventory):
            inventory_service.remove_product_from_inventory(unit_id=unit.id, product_id=product.id)

    def test_list_and_low_stock(self, db_session, franchise, unit, other_unit, product, stock):
        bolt = make_product(db_session, franchise, "Bolt")
        nut = make_product(db_session, franchise, "Nut")
        stock_product(db_session, unit, bolt, 2, reorder_level=10)
        stock_product(db_session, unit, nut, 4, reorder_level=4)
        stock_product(db_session, other_unit, nut, 0, reorder_level=4)

        listed = inventory_service.list_unit_inventory(unit.id)
        assert [p.name for _, p in listed] == ["Bolt", "Nut", "Widget"]

        low = inventory_service.low_stock_items(unit.id)
        assert [(r.quantity, p.name) for r, p in low] == [(2, "Bolt"), (4, "Nut")]

    def test_available_products_excludes_stocked_and_inactive(self, db_session, franchise, unit, product, stock):
        make_product(db_session, franchise, "Bolt")
        make_product(db_session, franchise, "Old Bolt", status="inactive")

        available = catalog_service.list_available_products(unit.id)
        assert [p.name for p in available] == ["Bolt"]
