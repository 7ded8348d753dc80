# accounting/tests/test_accounts.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models import Account
from accounting.services.account_resolver import (
    find_account,
    load_account_map,
    require_account,
)
from accounting.services.chart_seeding import DEFAULT_CHART, seed_default_chart
from accounting.services.exceptions import AccountResolutionError
from accounting.tests.utils import make_category, make_store, seed_chart


class AccountModelTests(TestCase):
    def setUp(self):
        self.store = make_store()

    def test_debit_normal_fixed_at_creation(self):
        acc = Account.objects.create(
            store=self.store, number="1500", name="Equipment", account_type=Account.ASSET
        )
        self.assertTrue(acc.is_debit_normal)

        acc.account_type = Account.LIABILITY
        acc.save()
        acc.refresh_from_db()
        self.assertTrue(acc.is_debit_normal)

    def test_save_never_writes_balance(self):
        acc = Account.objects.create(
            store=self.store, number="1500", name="Equipment", account_type=Account.ASSET
        )
        Account.objects.filter(pk=acc.pk).update(balance=Decimal("25.00"))

        acc.balance = Decimal("999.00")
        acc.name = "Fixtures"
        acc.save()

        acc.refresh_from_db()
        self.assertEqual(acc.name, "Fixtures")
        self.assertEqual(acc.balance, Decimal("25.00"))

    def test_number_unique_per_store(self):
        Account.objects.create(store=self.store, number="1500", name="A", account_type=Account.ASSET)
        with self.assertRaises(ValidationError):
            Account.objects.create(store=self.store, number="1500", name="B", account_type=Account.ASSET)

        other = make_store("Other")
        Account.objects.create(store=other, number="1500", name="A", account_type=Account.ASSET)

    def test_sub_type_unique_per_store(self):
        seed_chart(self.store)
        with self.assertRaises(ValidationError):
            Account.objects.create(
                store=self.store,
                number="1011",
                name="Second till",
                account_type=Account.ASSET,
                sub_type=Account.CASH,
            )


class ChartSeedingTests(TestCase):
    def test_seed_is_idempotent(self):
        store = make_store()
        created, updated = seed_default_chart(store)
        self.assertEqual(created, len(DEFAULT_CHART))
        self.assertEqual(updated, 0)

        created, updated = seed_default_chart(store)
        self.assertEqual((created, updated), (0, 0))
        self.assertEqual(Account.objects.filter(store=store).count(), len(DEFAULT_CHART))


class AccountResolverTests(TestCase):
    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)

    def test_find_account_is_stable(self):
        first = find_account(self.store, Account.CASH)
        second = find_account(self.store, Account.CASH)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.pk, self.accounts[Account.CASH].pk)

    def test_find_account_scoped_to_store(self):
        other = make_store("Other")
        self.assertIsNone(find_account(other, Account.CASH))
        with self.assertRaises(AccountResolutionError):
            require_account(other, Account.CASH)

    def test_map_require_names_every_missing_sub_type(self):
        Account.objects.filter(
            store=self.store, sub_type__in=[Account.COGS, Account.INVENTORY]
        ).update(sub_type=None)

        accounts = load_account_map(self.store)
        with self.assertRaises(AccountResolutionError) as ctx:
            accounts.require(Account.CASH, Account.COGS, Account.INVENTORY)

        message = str(ctx.exception)
        self.assertIn(Account.COGS, message)
        self.assertIn(Account.INVENTORY, message)

    def test_category_override_and_fallback(self):
        books = Account.objects.create(
            store=self.store, number="4020", name="Book Sales", account_type=Account.REVENUE
        )
        category = make_category(self.store, "Books", revenue_account=books)
        plain = make_category(self.store, "Plain")

        accounts = load_account_map(self.store)
        self.assertEqual(accounts.revenue_account_for(category).pk, books.pk)
        self.assertEqual(
            accounts.revenue_account_for(plain).pk, self.accounts[Account.SALES_REVENUE].pk
        )
        self.assertEqual(
            accounts.cogs_account_for(category).pk, self.accounts[Account.COGS].pk
        )
        self.assertEqual(
            accounts.revenue_account_for(None).pk, self.accounts[Account.SALES_REVENUE].pk
        )
