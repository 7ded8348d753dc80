# sales/services/exceptions.py

"""
SALES SERVICE ERRORS

Business-level failures surfaced to the HTTP layer. Ledger failures are
wrapped into these (the original error is chained and logged).
"""


class SaleCreationError(Exception):
    """Raised when a sale cannot be recorded; nothing was written."""


class StockValidationError(SaleCreationError):
    """Raised when a sale line asks for more stock than is on hand."""


class SalePaymentError(Exception):
    """Raised when a payment cannot be applied to a sale."""


class ReturnProcessingError(Exception):
    """Raised when a return cannot be processed; nothing was written."""
