# backend/franchise_ledger/routes/sales.py
"""
Sales ledger routes.

The unit id in the path comes from the (external) identity layer and is trusted.
Every write commits the revenue entry and its stock delta together.
"""
from flask import Blueprint, jsonify, request

from ..services import sales_service
from ..validation import validate_sale_payload
from .errors import register_error_handlers
from .serializers import sale_row


sales_bp = Blueprint("sales", __name__, url_prefix="/api/units/<int:unit_id>/sales")
register_error_handlers(sales_bp)


@sales_bp.post("")
def create_sale_route(unit_id: int):
    clean = validate_sale_payload(request.get_json(silent=True))

    result = sales_service.record_sale(
        unit_id=unit_id,
        product_name=clean["product"],
        quantity=clean["quantitySold"],
        sale_date=clean["date"],
    )
    return jsonify({"message": "Sales record created successfully", "data": sale_row(result)}), 201


@sales_bp.put("/<entry_id>")
def update_sale_route(unit_id: int, entry_id: str):
    clean = validate_sale_payload(request.get_json(silent=True))

    result = sales_service.edit_sale(
        unit_id=unit_id,
        revenue_entry_id=entry_id,
        product_name=clean["product"],
        quantity=clean["quantitySold"],
        sale_date=clean["date"],
    )
    return jsonify({"message": "Sales record updated successfully", "data": sale_row(result)}), 200
