# backend/franchise_ledger/routes/inventory.py
"""
Unit inventory management routes.

These share the stock invariant with the sales recorder: quantity never
goes below zero, and deleting a record leaves ledger history untouched.
"""
from flask import Blueprint, jsonify, request

from ..services import catalog_service, inventory_service
from ..validation import validate_inventory_add_payload, validate_inventory_stock_payload
from .errors import register_error_handlers
from .serializers import stock_row, to_json


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/units/<int:unit_id>/inventory")
register_error_handlers(inventory_bp)


@inventory_bp.get("")
def list_inventory_route(unit_id: int):
    rows = inventory_service.list_unit_inventory(unit_id)
    return jsonify({"items": [stock_row(record, product) for record, product in rows]}), 200


@inventory_bp.get("/low-stock")
def low_stock_route(unit_id: int):
    rows = inventory_service.low_stock_items(unit_id)
    return jsonify({"items": [stock_row(record, product) for record, product in rows]}), 200


@inventory_bp.get("/available-products")
def available_products_route(unit_id: int):
    products = catalog_service.list_available_products(unit_id)
    return jsonify({"products": [to_json(p.to_dict()) for p in products]}), 200


@inventory_bp.post("")
def add_inventory_route(unit_id: int):
    clean = validate_inventory_add_payload(request.get_json(silent=True))

    record = inventory_service.add_product_to_inventory(
        unit_id=unit_id,
        product_id=clean["productId"],
        quantity=clean["quantity"],
        reorder_level=clean["reorderLevel"],
    )
    return jsonify({"message": "Product added to inventory", "data": stock_row(record, record.product)}), 201


@inventory_bp.put("/<int:product_id>")
def set_stock_route(unit_id: int, product_id: int):
    clean = validate_inventory_stock_payload(request.get_json(silent=True))

    record = inventory_service.set_stock_level(
        unit_id=unit_id,
        product_id=product_id,
        quantity=clean["quantity"],
        reorder_level=clean.get("reorderLevel"),
    )
    return jsonify({"message": "Stock level updated", "data": stock_row(record, record.product)}), 200


@inventory_bp.delete("/<int:product_id>")
def remove_inventory_route(unit_id: int, product_id: int):
    inventory_service.remove_product_from_inventory(unit_id=unit_id, product_id=product_id)
    return jsonify({"message": "Product removed from inventory"}), 200
