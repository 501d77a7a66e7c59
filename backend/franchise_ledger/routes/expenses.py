# backend/franchise_ledger/routes/expenses.py
from flask import Blueprint, jsonify, request

from ..services import expense_service
from ..validation import validate_expense_payload
from .errors import register_error_handlers
from .serializers import expense_row


expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/units/<int:unit_id>/expenses")
register_error_handlers(expenses_bp)


@expenses_bp.post("")
def create_expense_route(unit_id: int):
    clean = validate_expense_payload(request.get_json(silent=True))

    entry = expense_service.record_expense(
        unit_id=unit_id,
        category=clean["expenseCategory"],
        amount=clean["amount"],
        expense_date=clean["date"],
        description=clean["description"],
    )
    return jsonify({"message": "Expense record created successfully", "data": expense_row(entry)}), 201


@expenses_bp.put("/<expense_id>")
def update_expense_route(unit_id: int, expense_id: str):
    clean = validate_expense_payload(request.get_json(silent=True))

    entry = expense_service.edit_expense(
        unit_id=unit_id,
        expense_id=expense_id,
        category=clean["expenseCategory"],
        amount=clean["amount"],
        expense_date=clean["date"],
        description=clean["description"],
    )
    return jsonify({"message": "Expense record updated successfully", "data": expense_row(entry)}), 200
