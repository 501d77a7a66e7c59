"""
Pytest fixtures for the franchise ledger tests.

Provides an in-memory database, a pinned clock, tenancy fixtures and the
"Widget" product stocked at a unit.
"""

from datetime import date
from decimal import Decimal

import pytest

from franchise_ledger import create_app
from franchise_ledger.extensions import db
from franchise_ledger.models import Franchise, InventoryRecord, Product, Unit
from franchise_ledger.time_utils import FixedClock


TODAY = date(2026, 3, 15)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })
    app.extensions["ledger_clock"] = FixedClock(TODAY)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def franchise(db_session):
    franchise = Franchise(name="Burger Co", code="BURGER", is_active=True)
    db_session.add(franchise)
    db_session.commit()
    return franchise


@pytest.fixture(scope='function')
def other_franchise(db_session):
    franchise = Franchise(name="Taco Co", code="TACO", is_active=True)
    db_session.add(franchise)
    db_session.commit()
    return franchise


@pytest.fixture(scope='function')
def unit(db_session, franchise):
    unit = Unit(franchise_id=franchise.id, name="Downtown", code="DT")
    db_session.add(unit)
    db_session.commit()
    return unit


@pytest.fixture(scope='function')
def other_unit(db_session, franchise):
    """Second unit of the same franchise."""
    unit = Unit(franchise_id=franchise.id, name="Airport", code="AP")
    db_session.add(unit)
    db_session.commit()
    return unit


@pytest.fixture(scope='function')
def product(db_session, franchise):
    """Widget at 10.00."""
    product = Product(franchise_id=franchise.id, name="Widget", sku="WID-1", unit_price=Decimal("10.00"))
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def stock(db_session, unit, product):
    """50 Widgets on hand at the unit, reorder level 5."""
    record = InventoryRecord(unit_id=unit.id, product_id=product.id, quantity=50, reorder_level=5)
    db_session.add(record)
    db_session.commit()
    return record


def make_product(db_session, franchise, name, price="5.00", status="active"):
    product = Product(franchise_id=franchise.id, name=name, unit_price=Decimal(price), status=status)
    db_session.add(product)
    db_session.commit()
    return product


def stock_product(db_session, unit, product, quantity, reorder_level=0):
    record = InventoryRecord(
        unit_id=unit.id,
        product_id=product.id,
        quantity=quantity,
        reorder_level=reorder_level,
    )
    db_session.add(record)
    db_session.commit()
    return record


def on_hand(db_session, unit, product) -> int:
    db_session.expire_all()
    record = db_session.query(InventoryRecord).filter_by(unit_id=unit.id, product_id=product.id).one()
    return record.quantity
