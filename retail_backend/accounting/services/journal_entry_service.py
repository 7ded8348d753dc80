# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / JournalEntryLine rows
- Enforce debit == credit
- Move Account.balance
- Guarantee atomicity of the above

Everything else (sales, purchases, stock, returns, manual entries) must pass
through create_journal_entry().

POSTING SHAPE:
    {"account": Account, "debit": Decimal|str|int, "credit": Decimal|str|int}

BALANCE POLARITY:
- a debit line raises a debit-normal account (asset, expense) and lowers a
  credit-normal one (liability, equity, revenue)
- a credit line does the opposite
- balances move via F("balance") + delta, never read-modify-write
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.exceptions import (
    JournalEntryCreationError,
    UnbalancedJournalEntryError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
MIN_LINE_AMOUNT = Decimal("0.01")


def money(value) -> Decimal:
    if value is None or value == "":
        return ZERO

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _as_aware_dt(dt: datetime | None) -> datetime:
    if dt is None:
        return timezone.now()
    if timezone.is_naive(dt):
        return timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def balance_delta(*, account: Account, entry_type: str, amount: Decimal) -> Decimal:
    """
    Signed change a line applies to its account's balance.
    """
    debit_side = entry_type == JournalEntryLine.DEBIT
    if debit_side == bool(account.is_debit_normal):
        return amount
    return -amount


def _normalize_postings(*, store, postings) -> list[dict]:
    normalized: list[dict] = []

    for line in postings:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each posting must be an object/dict")

        account = line.get("account")
        if account is None or getattr(account, "pk", None) is None:
            raise JournalEntryCreationError("Posting missing account")

        if account.store_id != store.pk:
            raise JournalEntryCreationError(
                f"Account {account.number} does not belong to store '{store}'"
            )

        debit = money(line.get("debit"))
        credit = money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")

        if debit > 0 and credit > 0:
            raise JournalEntryCreationError("A posting cannot have both debit and credit")

        # Sub-cent lines carry no value; they are dropped, not posted.
        if debit < MIN_LINE_AMOUNT and credit < MIN_LINE_AMOUNT:
            continue

        normalized.append({"account": account, "debit": debit, "credit": credit})

    return normalized


@transaction.atomic
def create_journal_entry(
    *,
    store,
    description: str,
    postings: list,
    source_type: str,
    source_id: str | None = None,
    date: datetime | None = None,
) -> JournalEntry:
    if store is None:
        raise JournalEntryCreationError("store is required")

    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    if source_type not in dict(JournalEntry.SOURCE_TYPES):
        raise JournalEntryCreationError(f"Invalid source_type: {source_type!r}")

    normalized = _normalize_postings(store=store, postings=postings or [])
    if not normalized:
        raise JournalEntryCreationError("Journal entry must contain at least one posting")

    total_debits = sum((p["debit"] for p in normalized), ZERO)
    total_credits = sum((p["credit"] for p in normalized), ZERO)

    if abs(total_debits - total_credits) >= TWOPLACES:
        logger.error(
            "Rejected unbalanced journal entry",
            extra={
                "store_id": str(store.pk),
                "source_type": source_type,
                "source_id": source_id,
                "debits": str(total_debits),
                "credits": str(total_credits),
            },
        )
        raise UnbalancedJournalEntryError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )

    journal_entry = JournalEntry.objects.create(
        store=store,
        date=_as_aware_dt(date),
        description=description,
        source_type=source_type,
        source_id=str(source_id) if source_id is not None else None,
    )

    lines: list[JournalEntryLine] = []
    deltas: "OrderedDict[object, Decimal]" = OrderedDict()

    for p in normalized:
        account = p["account"]
        if p["debit"] > 0:
            entry_type, amount = JournalEntryLine.DEBIT, p["debit"]
        else:
            entry_type, amount = JournalEntryLine.CREDIT, p["credit"]

        lines.append(
            JournalEntryLine(
                journal_entry=journal_entry,
                account=account,
                entry_type=entry_type,
                amount=amount,
                account_name=account.name,
            )
        )
        deltas[account.pk] = deltas.get(account.pk, ZERO) + balance_delta(
            account=account, entry_type=entry_type, amount=amount
        )

    JournalEntryLine.objects.bulk_create(lines)

    for account_id, delta in deltas.items():
        if delta:
            Account.objects.filter(pk=account_id).update(balance=F("balance") + delta)

    logger.info(
        "Journal entry posted",
        extra={
            "journal_entry_id": str(journal_entry.pk),
            "store_id": str(store.pk),
            "source_type": source_type,
            "source_id": source_id,
            "amount": str(total_debits),
        },
    )
    return journal_entry
