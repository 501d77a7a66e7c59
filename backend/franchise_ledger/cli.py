# Overview: Flask CLI command groups for bootstrap and ledger maintenance.

# backend/franchise_ledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Ledger maintenance:
# - python -m flask ledger migrate-line-items [--unit-id 1]
#   Convert legacy JSON line items into revenue_line_items rows.
#
# Demo data:
# - python -m flask demo seed
#   Create a demo franchise/unit with products, stock, sales, expenses and royalties.

import calendar
from datetime import date
from decimal import Decimal

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Franchise, Product, Royalty, Unit
from .services import expense_service, inventory_service, sales_service
from .services.line_item_service import migrate_legacy_line_items
from .time_utils import get_clock, shift_month


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask demo seed' for sample data.")


@click.group('ledger')
def ledger_group():
    """Ledger maintenance commands."""


@ledger_group.command('migrate-line-items')
@click.option('--unit-id', type=int, help='Only migrate entries of this unit')
@click.option('--batch-size', type=click.IntRange(min=1), default=200, show_default=True)
@with_appcontext
def migrate_line_items(unit_id, batch_size):
    """Move legacy JSON line items into revenue_line_items rows."""
    migrated = migrate_legacy_line_items(unit_id, batch_size=batch_size)
    click.echo(f"PASS Migrated {migrated} revenue entr(ies)")


@click.group('demo')
def demo_group():
    """Demo data commands."""


DEMO_PRODUCTS = [
    # name, category, sku, unit price, opening stock, reorder level
    ("Classic Burger", "Food", "DEMO-BURGER", "8.50", 200, 20),
    ("Fries", "Food", "DEMO-FRIES", "3.25", 300, 40),
    ("Cola", "Beverage", "DEMO-COLA", "2.00", 250, 30),
    ("Milkshake", "Beverage", "DEMO-SHAKE", "4.75", 60, 15),
]

DEMO_EXPENSES = [
    ("Food Supplies", "650.00", "Weekly produce order"),
    ("Staff Wages", "2400.00", "Payroll"),
    ("Utilities", "310.40", "Electricity and water"),
    ("Rent", "1800.00", "Monthly lease"),
]


@demo_group.command('seed')
@with_appcontext
def seed_demo():
    """
    Seed a demo franchise with one unit.

    Skipped when the demo franchise already exists.
    """
    if db.session.query(Franchise).filter_by(code="DEMO").first():
        click.echo("SKIP Demo franchise already exists")
        return

    today = get_clock().today()

    franchise = Franchise(name="Demo Burgers", code="DEMO")
    db.session.add(franchise)
    db.session.flush()
    unit = Unit(franchise_id=franchise.id, name="Demo Burgers Downtown", code="DT-01")
    db.session.add(unit)
    db.session.flush()

    products = []
    for name, category, sku, price, _, _ in DEMO_PRODUCTS:
        product = Product(
            franchise_id=franchise.id,
            name=name,
            category=category,
            sku=sku,
            unit_price=Decimal(price),
        )
        db.session.add(product)
        products.append(product)
    db.session.commit()

    for product, (_, _, _, _, stock, reorder) in zip(products, DEMO_PRODUCTS):
        inventory_service.add_product_to_inventory(
            unit_id=unit.id,
            product_id=product.id,
            quantity=stock,
            reorder_level=reorder,
        )

    sales = 0
    for offset in (1, 0):
        year, month = shift_month(today.year, today.month, -offset)
        last_day = today.day if offset == 0 else calendar.monthrange(year, month)[1]
        for i, product in enumerate(products):
            day = min(1 + i * 5, last_day)
            sales_service.record_sale(
                unit_id=unit.id,
                product_name=product.name,
                quantity=3 + i + offset * 2,
                sale_date=date(year, month, day),
            )
            sales += 1

    for label, amount, description in DEMO_EXPENSES:
        expense_service.record_expense(
            unit_id=unit.id,
            category=label,
            amount=Decimal(amount),
            expense_date=date(today.year, today.month, 1),
            description=description,
        )

    for offset in range(4, 0, -1):
        year, month = shift_month(today.year, today.month, -offset)
        last_day = calendar.monthrange(year, month)[1]
        gross = Decimal("12000.00") + Decimal(500 * (4 - offset))
        royalty = (gross * Decimal("0.06")).quantize(Decimal("0.01"))
        db.session.add(
            Royalty(
                franchise_id=franchise.id,
                unit_id=unit.id,
                period_year=year,
                period_month=month,
                period_start_date=date(year, month, 1),
                period_end_date=date(year, month, last_day),
                gross_revenue=gross,
                royalty_percentage=Decimal("6.00"),
                royalty_amount=royalty,
                total_amount=royalty,
                status="paid",
                due_date=date(*shift_month(year, month, 1), 15),
            )
        )
    db.session.commit()

    click.echo(
        f"PASS Demo unit {unit.id} seeded: {len(products)} products, {sales} sales, "
        f"{len(DEMO_EXPENSES)} expenses, 4 royalty periods"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(ledger_group)
    app.cli.add_command(demo_group)
