# accounting/tests/test_manual_entries.py

from decimal import Decimal

from django.test import TestCase

from accounting.models import Account, JournalEntry
from accounting.services.exceptions import (
    JournalEntryCreationError,
    UnbalancedJournalEntryError,
)
from accounting.services.manual_entry_service import create_manual_journal_entry
from accounting.tests.utils import ACTOR, balance_of, make_store, seed_chart
from audit.models import AuditLog


class ManualJournalEntryTests(TestCase):
    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.rent = Account.objects.get(store=self.store, number="6010")
        self.cash = self.accounts[Account.CASH]

    def test_posts_and_audits(self):
        entry = create_manual_journal_entry(
            store=self.store,
            actor=ACTOR,
            description="March rent",
            lines=[
                {"account_id": self.rent.pk, "debit": "500.00", "credit": "0"},
                {"account_id": self.cash.pk, "debit": "0", "credit": "500.00"},
            ],
        )

        self.assertEqual(entry.source_type, JournalEntry.SOURCE_MANUAL)
        self.assertEqual(balance_of(self.rent), Decimal("500.00"))
        self.assertEqual(balance_of(self.cash), Decimal("-500.00"))
        self.assertTrue(
            AuditLog.objects.filter(store=self.store, action="Journal Entry Created").exists()
        )

    def test_foreign_account_rejected(self):
        other_cash = seed_chart(make_store("Other"))[Account.CASH]
        with self.assertRaises(JournalEntryCreationError):
            create_manual_journal_entry(
                store=self.store,
                actor=ACTOR,
                description="Bad",
                lines=[
                    {"account_id": self.rent.pk, "debit": "10.00"},
                    {"account_id": other_cash.pk, "credit": "10.00"},
                ],
            )

    def test_unbalanced_rejected_without_audit(self):
        with self.assertRaises(UnbalancedJournalEntryError):
            create_manual_journal_entry(
                store=self.store,
                actor=ACTOR,
                description="Bad",
                lines=[
                    {"account_id": self.rent.pk, "debit": "10.00"},
                    {"account_id": self.cash.pk, "credit": "9.00"},
                ],
            )
        self.assertFalse(AuditLog.objects.exists())
