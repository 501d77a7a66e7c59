# backend/wsgi.py
from franchise_ledger import create_app

app = create_app()
