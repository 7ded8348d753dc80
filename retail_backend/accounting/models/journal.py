# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY + LINE MODELS

A journal entry is the header of one balanced accounting transaction;
its lines are the individual debit/credit postings.

Guarantees:
- Immutable once created (no updates, no deletes)
- Line amounts are always positive; direction is via entry_type
- Lines snapshot the account name at posting time
- Accounts referenced by a line cannot be deleted (PROTECT)

Balance checking is the journal poster's job
(accounting.services.journal_entry_service); these models only hold rows.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounting.models.account import Account


class JournalEntry(models.Model):
    SOURCE_SALE = "sale"
    SOURCE_PURCHASE = "purchase"
    SOURCE_MANUAL = "manual"
    SOURCE_PAYMENT = "payment"
    SOURCE_RETURN = "return"

    SOURCE_TYPES = [
        (SOURCE_SALE, "Sale"),
        (SOURCE_PURCHASE, "Purchase"),
        (SOURCE_MANUAL, "Manual"),
        (SOURCE_PAYMENT, "Payment"),
        (SOURCE_RETURN, "Return"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    date = models.DateTimeField(
        default=timezone.now,
        help_text="Accounting effective date",
    )

    description = models.TextField(help_text="Narrative description of the journal entry")

    source_type = models.CharField(max_length=20, choices=SOURCE_TYPES)

    source_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Id of the originating record (sale transaction id, PO id, ...)",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["store", "date"], name="je_store_date_idx"),
            models.Index(fields=["source_type", "source_id"], name="je_source_idx"),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry {self.id} - {self.date.date()}"

    def clean(self):
        if self.source_id is not None:
            self.source_id = str(self.source_id).strip() or None

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        if self.date and timezone.is_naive(self.date):
            self.date = timezone.make_aware(self.date, timezone.get_current_timezone())

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")


class JournalEntryLine(models.Model):
    DEBIT = "debit"
    CREDIT = "credit"

    ENTRY_TYPES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    entry_type = models.CharField(max_length=6, choices=ENTRY_TYPES)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )

    account_name = models.CharField(max_length=150)

    class Meta:
        verbose_name = "Journal Entry Line"
        verbose_name_plural = "Journal Entry Lines"
        indexes = [
            models.Index(fields=["account", "entry_type"], name="jel_account_type_idx"),
        ]

    def __str__(self):
        return f"{self.entry_type} {self.amount} -> {self.account_name}"

    def clean(self):
        if self.entry_type not in (self.DEBIT, self.CREDIT):
            raise ValidationError("Invalid entry_type")

        if self.amount is None or self.amount <= 0:
            raise ValidationError("Line amount must be > 0")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("JournalEntryLine records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntryLine records are immutable and cannot be deleted")
