# Overview: Error taxonomy shared by the ledger services and the HTTP layer.

from __future__ import annotations


class LedgerError(Exception):
    """Base class for recoverable ledger errors."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationFailed(LedgerError, ValueError):
    """Malformed or missing input, rejected before any state is touched."""

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        super().__init__(message, details={"fields": fields or {}})
        self.fields = fields or {}


class ConflictError(LedgerError):
    """Request conflicts with existing state (e.g. product already stocked)."""

    status_code = 409


class NotFoundError(LedgerError):
    status_code = 404


class ProductNotFound(NotFoundError):
    def __init__(self, message: str = "Product not found", details: dict | None = None):
        super().__init__(message, details)


class ProductNotInInventory(NotFoundError):
    def __init__(
        self,
        message: str = "Product not available in your unit inventory",
        details: dict | None = None,
    ):
        super().__init__(message, details)


class SalesRecordNotFound(NotFoundError):
    def __init__(self, message: str = "Sales record not found", details: dict | None = None):
        super().__init__(message, details)


class ExpenseRecordNotFound(NotFoundError):
    def __init__(self, message: str = "Expense record not found", details: dict | None = None):
        super().__init__(message, details)


class UnitNotFound(NotFoundError):
    def __init__(self, message: str = "Unit not found", details: dict | None = None):
        super().__init__(message, details)


class InsufficientStock(LedgerError):
    """Business rule: stock can never go negative. `available` is the fresh on-hand quantity."""

    def __init__(self, available: int, *, for_increase: bool = False, product_id: int | None = None):
        suffix = " for increase" if for_increase else ""
        super().__init__(
            f"Insufficient stock. Only {available} units available{suffix}",
            details={"available": available, "product_id": product_id},
        )
        self.available = available
