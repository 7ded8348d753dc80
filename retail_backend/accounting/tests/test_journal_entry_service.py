# accounting/tests/test_journal_entry_service.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db.models import ProtectedError
from django.test import TestCase

from accounting.models import Account, JournalEntry, JournalEntryLine
from accounting.services.exceptions import (
    JournalEntryCreationError,
    UnbalancedJournalEntryError,
)
from accounting.services.journal_entry_service import create_journal_entry
from accounting.tests.utils import balance_of, entry_totals, make_store, seed_chart


class JournalEntryServiceTests(TestCase):
    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.cash = self.accounts[Account.CASH]
        self.revenue = self.accounts[Account.SALES_REVENUE]
        self.payable = self.accounts[Account.ACCOUNTS_PAYABLE]

    def _post(self, postings, **kwargs):
        return create_journal_entry(
            store=self.store,
            description=kwargs.pop("description", "Test entry"),
            postings=postings,
            source_type=kwargs.pop("source_type", JournalEntry.SOURCE_MANUAL),
            **kwargs,
        )

    def test_balanced_entry_creates_lines(self):
        je = self._post(
            [
                {"account": self.cash, "debit": "100.00", "credit": "0.00"},
                {"account": self.revenue, "debit": "0.00", "credit": "100.00"},
            ]
        )

        self.assertEqual(je.lines.count(), 2)
        self.assertEqual(entry_totals(je), (Decimal("100.00"), Decimal("100.00")))
        line = je.lines.get(account=self.cash)
        self.assertEqual(line.account_name, self.cash.name)

    def test_unbalanced_raises_and_writes_nothing(self):
        with self.assertRaises(UnbalancedJournalEntryError):
            self._post(
                [
                    {"account": self.cash, "debit": "100.00", "credit": "0.00"},
                    {"account": self.revenue, "debit": "0.00", "credit": "90.00"},
                ]
            )

        self.assertFalse(JournalEntry.objects.exists())
        self.assertEqual(balance_of(self.cash), Decimal("0.00"))

    def test_unbalanced_is_a_creation_error(self):
        self.assertTrue(issubclass(UnbalancedJournalEntryError, JournalEntryCreationError))

    def test_balance_moves_by_account_polarity(self):
        # asset (debit-normal) up on debit, revenue (credit-normal) up on credit
        self._post(
            [
                {"account": self.cash, "debit": "100.00"},
                {"account": self.revenue, "credit": "100.00"},
            ]
        )
        self.assertEqual(balance_of(self.cash), Decimal("100.00"))
        self.assertEqual(balance_of(self.revenue), Decimal("100.00"))

        # paying a supplier: liability down on debit, asset down on credit
        self._post(
            [
                {"account": self.payable, "debit": "30.00"},
                {"account": self.cash, "credit": "30.00"},
            ]
        )
        self.assertEqual(balance_of(self.cash), Decimal("70.00"))
        self.assertEqual(balance_of(self.payable), Decimal("-30.00"))

    def test_zero_lines_are_dropped(self):
        je = self._post(
            [
                {"account": self.cash, "debit": "50.00"},
                {"account": self.accounts[Account.SALES_TAX_PAYABLE], "credit": "0.00"},
                {"account": self.revenue, "credit": "50.00"},
            ]
        )
        self.assertEqual(je.lines.count(), 2)

    def test_all_zero_postings_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "0.00"},
                    {"account": self.revenue, "credit": "0.00"},
                ]
            )

    def test_negative_and_two_sided_lines_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "-10.00"},
                    {"account": self.revenue, "credit": "-10.00"},
                ]
            )
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "10.00", "credit": "10.00"},
                ]
            )

    def test_foreign_store_account_rejected(self):
        other = make_store("Other")
        other_cash = seed_chart(other)[Account.CASH]

        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": other_cash, "debit": "10.00"},
                    {"account": self.revenue, "credit": "10.00"},
                ]
            )
        self.assertEqual(balance_of(other_cash), Decimal("0.00"))

    def test_invalid_source_type_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._post(
                [
                    {"account": self.cash, "debit": "10.00"},
                    {"account": self.revenue, "credit": "10.00"},
                ],
                source_type="bogus",
            )

    def test_entries_and_lines_are_immutable(self):
        je = self._post(
            [
                {"account": self.cash, "debit": "10.00"},
                {"account": self.revenue, "credit": "10.00"},
            ]
        )

        je.description = "changed"
        with self.assertRaises(ValidationError):
            je.save()
        with self.assertRaises(ValidationError):
            je.delete()

        line = je.lines.first()
        line.amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()

    def test_account_with_lines_cannot_be_deleted(self):
        self._post(
            [
                {"account": self.cash, "debit": "10.00"},
                {"account": self.revenue, "credit": "10.00"},
            ]
        )
        with self.assertRaises(ProtectedError):
            Account.objects.get(pk=self.cash.pk).delete()

    def test_half_up_rounding(self):
        je = self._post(
            [
                {"account": self.cash, "debit": "10.005"},
                {"account": self.revenue, "credit": "10.005"},
            ]
        )
        self.assertEqual(
            je.lines.get(entry_type=JournalEntryLine.DEBIT).amount, Decimal("10.01")
        )
