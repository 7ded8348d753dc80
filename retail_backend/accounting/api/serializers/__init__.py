# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import AccountSerializer
from accounting.api.serializers.journal_entries import (
    JournalEntryLineSerializer,
    JournalEntrySerializer,
    ManualJournalEntryInputSerializer,
)

__all__ = [
    "AccountSerializer",
    "JournalEntryLineSerializer",
    "JournalEntrySerializer",
    "ManualJournalEntryInputSerializer",
]
