# backend/franchise_ledger/__init__.py
import logging

from flask import Flask

from .config import Config
from .extensions import db, migrate
from .time_utils import SystemClock


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Period boundaries ("this month") come from here; tests install a FixedClock
    app.extensions.setdefault("ledger_clock", SystemClock())

    # Register blueprints
    from .routes.sales import sales_bp
    from .routes.expenses import expenses_bp
    from .routes.financials import financials_bp
    from .routes.inventory import inventory_bp

    app.register_blueprint(sales_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(financials_bp)
    app.register_blueprint(inventory_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
