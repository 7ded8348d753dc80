# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class PostingRuleError(AccountingServiceError):
    """Raised when a recorder is handed malformed business data."""


class AccountResolutionError(AccountingServiceError):
    """Raised when a required system account is not configured for the store."""


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal entry cannot be created."""


class UnbalancedJournalEntryError(JournalEntryCreationError):
    """Raised when total debits and total credits differ."""
