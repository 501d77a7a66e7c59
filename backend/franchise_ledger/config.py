# backend/franchise_ledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/franchise_ledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///franchise_ledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Dashboard windows
    FINANCIAL_OVERVIEW_MONTHS = int(os.environ.get("FINANCIAL_OVERVIEW_MONTHS", "3"))
    ROYALTY_PHASE_COUNT = int(os.environ.get("ROYALTY_PHASE_COUNT", "4"))
    PRODUCT_RANKING_SIZE = int(os.environ.get("PRODUCT_RANKING_SIZE", "5"))
