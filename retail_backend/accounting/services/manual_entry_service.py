# accounting/services/manual_entry_service.py

"""
MANUAL JOURNAL ENTRIES

Bookkeeper-entered entries (rent, owner drawings, corrections). Lines
reference accounts by id; every id must belong to the store. Balance is
enforced by the journal poster.
"""

import logging
from datetime import datetime

from django.db import transaction

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.services.exceptions import JournalEntryCreationError
from accounting.services.journal_entry_service import create_journal_entry
from audit.services import log_action

logger = logging.getLogger(__name__)


@transaction.atomic
def create_manual_journal_entry(
    *,
    store,
    actor,
    description: str,
    lines: list,
    date: datetime | None = None,
) -> JournalEntry:
    """
    lines: [{"account_id": <id>, "debit": <amount>, "credit": <amount>}, ...]
    """
    if not lines:
        raise JournalEntryCreationError("Journal entry must contain at least one posting")

    account_ids = {line.get("account_id") for line in lines}
    accounts = {a.pk: a for a in Account.objects.filter(store=store, pk__in=account_ids)}

    postings = []
    for line in lines:
        account = accounts.get(line.get("account_id"))
        if account is None:
            raise JournalEntryCreationError(
                f"Account {line.get('account_id')} not found for this store"
            )
        postings.append(
            {
                "account": account,
                "debit": line.get("debit"),
                "credit": line.get("credit"),
            }
        )

    entry = create_journal_entry(
        store=store,
        date=date,
        description=description,
        postings=postings,
        source_type=JournalEntry.SOURCE_MANUAL,
    )

    log_action(
        store=store,
        actor=actor,
        action="Journal Entry Created",
        details=f"Manual journal entry '{entry.description}' ({entry.pk}).",
    )
    return entry
