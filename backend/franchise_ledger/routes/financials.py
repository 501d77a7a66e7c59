# backend/franchise_ledger/routes/financials.py
"""
Financial dashboard routes: ledger deletion plus the read-only aggregations.

Time semantics:
- asOf is a calendar date (YYYY-MM-DD); it defaults to "today" from the app clock.
- Months are calendar months; "previous" is the month before asOf's month.
"""
from flask import Blueprint, current_app, jsonify, request

from ..errors import ValidationFailed
from ..services import ledger_service, reporting_service, royalty_service
from ..time_utils import get_clock, parse_iso_date
from ..validation import validate_delete_payload
from .errors import register_error_handlers
from .serializers import to_json


financials_bp = Blueprint("financials", __name__, url_prefix="/api/units/<int:unit_id>")
register_error_handlers(financials_bp)


def _as_of_arg():
    raw = request.args.get("asOf")
    try:
        as_of = parse_iso_date(raw)
    except ValueError:
        raise ValidationFailed("Invalid query", fields={"asOf": "asOf must be a valid date (YYYY-MM-DD)"})
    return as_of or get_clock().today()


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationFailed("Invalid query", fields={name: f"{name} must be an integer"})


@financials_bp.post("/financials/delete")
def delete_entries_route(unit_id: int):
    clean = validate_delete_payload(request.get_json(silent=True))

    deleted = ledger_service.delete_entries(unit_id=unit_id, category=clean["category"], ids=clean["ids"])
    return jsonify({"message": f"{deleted} record(s) deleted successfully", "deletedCount": deleted}), 200


@financials_bp.get("/statistics/sales")
def sales_statistics_route(unit_id: int):
    stats = reporting_service.sales_statistics(unit_id, _as_of_arg())
    return jsonify(to_json(stats)), 200


@financials_bp.get("/statistics/finance")
def finance_statistics_route(unit_id: int):
    stats = reporting_service.finance_statistics(unit_id, _as_of_arg())
    return jsonify(to_json(stats)), 200


@financials_bp.get("/financials/summary")
def financial_summary_route(unit_id: int):
    year = _int_arg("year", get_clock().today().year)
    series = reporting_service.monthly_series(unit_id, year)
    return jsonify(to_json({"year": year, **series})), 200


@financials_bp.get("/financials/overview")
def financial_overview_route(unit_id: int):
    months = _int_arg("months", current_app.config["FINANCIAL_OVERVIEW_MONTHS"])
    overview = reporting_service.financial_overview(unit_id, _as_of_arg(), months=months)
    return jsonify(to_json(overview)), 200


@financials_bp.get("/statistics/product-sales")
def product_sales_route(unit_id: int):
    today = get_clock().today()
    ranking = reporting_service.product_sales_ranking(
        unit_id,
        _int_arg("month", today.month),
        _int_arg("year", today.year),
        size=current_app.config["PRODUCT_RANKING_SIZE"],
    )
    return jsonify(to_json(ranking)), 200


@financials_bp.get("/statistics/product-performance")
def product_performance_route(unit_id: int):
    year = _int_arg("year", get_clock().today().year)
    performance = reporting_service.product_performance(unit_id, year)
    return jsonify(to_json(performance)), 200


@financials_bp.get("/royalties/snapshot")
def royalty_snapshot_route(unit_id: int):
    snapshot = royalty_service.royalty_snapshot(unit_id, phases=current_app.config["ROYALTY_PHASE_COUNT"])
    return jsonify(to_json(snapshot)), 200
