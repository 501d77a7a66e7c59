# Overview: Shared JSON error handlers for the ledger blueprints.

from flask import Blueprint, current_app, jsonify
from werkzeug.exceptions import HTTPException

from ..errors import LedgerError
from ..services.reporting_service import ReportError


def register_error_handlers(bp: Blueprint) -> None:
    @bp.errorhandler(LedgerError)
    def handle_ledger_error(exc: LedgerError):
        return jsonify({"error": exc.message, "details": exc.details}), exc.status_code

    @bp.errorhandler(ReportError)
    def handle_report_error(exc: ReportError):
        return jsonify({"error": str(exc), "details": {}}), 400

    @bp.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        current_app.logger.exception("Unhandled error in %s", bp.name)
        return jsonify({"error": "Internal server error", "details": {}}), 500
