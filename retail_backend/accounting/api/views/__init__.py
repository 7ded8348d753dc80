# accounting/api/views/__init__.py

"""
accounting.api.views package

Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.accounts import AccountDetailView, AccountListCreateView
from accounting.api.views.journal_entries import JournalEntryViewSet

__all__ = [
    "AccountListCreateView",
    "AccountDetailView",
    "JournalEntryViewSet",
]
