# accounting/tests/test_posting.py

"""
Transaction recorders, exercised on hand-built sales so the ledger maths is
tested apart from the sale workflow.
"""

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from accounting.models import Account, JournalEntry, JournalEntryLine
from accounting.services.exceptions import PostingRuleError
from accounting.services.journal_entry_service import ZERO
from accounting.services.posting import (
    _allocate,
    post_consolidated_stock_adjustment,
    post_sale_to_ledger,
    post_stock_adjustment_to_ledger,
)
from accounting.tests.utils import (
    balance_of,
    entry_totals,
    line_amount,
    make_category,
    make_product,
    make_store,
    seed_chart,
)
from sales.models import Customer, Sale, SaleItem

DEBIT = JournalEntryLine.DEBIT
CREDIT = JournalEntryLine.CREDIT


class SaleRecorderTests(TestCase):
    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)

    def _sale(self, *, lines, subtotal, tax="0.00", payment_status=Sale.PAYMENT_PAID, store_credit_used="0.00", customer=None):
        subtotal = Decimal(subtotal)
        tax = Decimal(tax)
        sale = Sale.objects.create(
            store=self.store,
            transaction_id=f"SALE-TEST-{Sale.objects.count() + 1}",
            customer=customer,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            store_credit_used=Decimal(store_credit_used),
            payment_status=payment_status,
        )
        for product, qty, price, cost in lines:
            SaleItem.objects.create(
                sale=sale,
                product=product,
                quantity=qty,
                price_at_sale=Decimal(price),
                cost_at_sale=Decimal(cost),
            )
        return sale

    def test_revenue_prorated_across_category_accounts(self):
        books = Account.objects.create(
            store=self.store, number="4020", name="Book Sales", account_type=Account.REVENUE
        )
        toys = Account.objects.create(
            store=self.store, number="4030", name="Toy Sales", account_type=Account.REVENUE
        )
        p1 = make_product(self.store, sku="B-1", category=make_category(self.store, "Books", revenue_account=books))
        p2 = make_product(self.store, sku="T-1", category=make_category(self.store, "Toys", revenue_account=toys))

        # cart value 100, subtotal 90 after discount
        sale = self._sale(
            lines=[(p1, 1, "60.00", "20.00"), (p2, 1, "40.00", "10.00")],
            subtotal="90.00",
        )

        je = post_sale_to_ledger(sale=sale)

        self.assertEqual(line_amount(je, books, CREDIT), Decimal("54.00"))
        self.assertEqual(line_amount(je, toys, CREDIT), Decimal("36.00"))
        self.assertEqual(line_amount(je, self.accounts[Account.CASH], DEBIT), Decimal("90.00"))
        debits, credits = entry_totals(je)
        self.assertEqual(debits, credits)

    def test_revenue_rounding_residual_sums_to_subtotal(self):
        books = Account.objects.create(
            store=self.store, number="4020", name="Book Sales", account_type=Account.REVENUE
        )
        p1 = make_product(self.store, sku="A", category=make_category(self.store, "Books", revenue_account=books))
        p2 = make_product(self.store, sku="B")
        p3 = make_product(self.store, sku="C")

        sale = self._sale(
            lines=[(p1, 1, "10.00", "0"), (p2, 1, "10.00", "0"), (p3, 1, "10.00", "0")],
            subtotal="20.00",
        )
        je = post_sale_to_ledger(sale=sale)

        revenue = line_amount(je, books, CREDIT) + line_amount(
            je, self.accounts[Account.SALES_REVENUE], CREDIT
        )
        self.assertEqual(revenue, Decimal("20.00"))

    def test_discounted_cent_split_never_credits_negative_revenue(self):
        books = Account.objects.create(
            store=self.store, number="4020", name="Book Sales", account_type=Account.REVENUE
        )
        toys = Account.objects.create(
            store=self.store, number="4030", name="Toy Sales", account_type=Account.REVENUE
        )
        p1 = make_product(self.store, sku="A", price="1.00")
        p2 = make_product(self.store, sku="B", price="1.00", category=make_category(self.store, "Books", revenue_account=books))
        p3 = make_product(self.store, sku="C", price="0.00", category=make_category(self.store, "Toys", revenue_account=toys))

        # cart value 2.00, discount 0.99
        sale = self._sale(
            lines=[(p1, 1, "1.00", "0"), (p2, 1, "1.00", "0"), (p3, 1, "0.00", "0")],
            subtotal="1.01",
        )
        je = post_sale_to_ledger(sale=sale)

        self.assertEqual(line_amount(je, self.accounts[Account.SALES_REVENUE], CREDIT), Decimal("0.51"))
        self.assertEqual(line_amount(je, books, CREDIT), Decimal("0.50"))
        self.assertFalse(je.lines.filter(account=toys).exists())
        self.assertFalse(je.lines.filter(amount__lt=0).exists())
        debits, credits = entry_totals(je)
        self.assertEqual(debits, credits)
        self.assertEqual(debits, Decimal("1.01"))

    def test_cogs_aggregated_into_one_line(self):
        p1 = make_product(self.store, sku="A")
        p2 = make_product(self.store, sku="B")
        sale = self._sale(
            lines=[(p1, 2, "10.00", "4.00"), (p2, 1, "15.00", "6.50")],
            subtotal="35.00",
            tax="3.50",
        )

        je = post_sale_to_ledger(sale=sale)
        cogs = self.accounts[Account.COGS]

        self.assertEqual(je.lines.filter(account=cogs).count(), 1)
        self.assertEqual(line_amount(je, cogs, DEBIT), Decimal("14.50"))
        self.assertEqual(line_amount(je, self.accounts[Account.INVENTORY], CREDIT), Decimal("14.50"))
        self.assertEqual(line_amount(je, self.accounts[Account.SALES_TAX_PAYABLE], CREDIT), Decimal("3.50"))
        self.assertEqual(je.source_type, JournalEntry.SOURCE_SALE)
        self.assertEqual(je.source_id, sale.transaction_id)

    def test_unpaid_sale_debits_receivable(self):
        customer = Customer.objects.create(store=self.store, name="Ada")
        p1 = make_product(self.store)
        sale = self._sale(
            lines=[(p1, 1, "50.00", "20.00")],
            subtotal="50.00",
            payment_status=Sale.PAYMENT_UNPAID,
            customer=customer,
        )

        je = post_sale_to_ledger(sale=sale)

        self.assertEqual(line_amount(je, self.accounts[Account.ACCOUNTS_RECEIVABLE], DEBIT), Decimal("50.00"))
        self.assertFalse(je.lines.filter(account=self.accounts[Account.CASH]).exists())
        self.assertEqual(je.description, f"Sale to Ada - ID {sale.transaction_id}")

    def test_store_credit_splits_the_asset_debit(self):
        customer = Customer.objects.create(store=self.store, name="Ada")
        p1 = make_product(self.store)
        sale = self._sale(
            lines=[(p1, 1, "50.00", "20.00")],
            subtotal="50.00",
            store_credit_used="15.00",
            customer=customer,
        )

        je = post_sale_to_ledger(sale=sale)

        self.assertEqual(line_amount(je, self.accounts[Account.CASH], DEBIT), Decimal("35.00"))
        self.assertEqual(
            line_amount(je, self.accounts[Account.STORE_CREDIT_PAYABLE], DEBIT), Decimal("15.00")
        )
        debits, credits = entry_totals(je)
        self.assertEqual(debits, credits)

    def test_zero_cart_value_uses_ratio_one(self):
        p1 = make_product(self.store, cost="3.00")
        sale = self._sale(lines=[(p1, 1, "0.00", "3.00")], subtotal="0.00")

        je = post_sale_to_ledger(sale=sale)

        self.assertFalse(je.lines.filter(account=self.accounts[Account.SALES_REVENUE]).exists())
        self.assertEqual(line_amount(je, self.accounts[Account.COGS], DEBIT), Decimal("3.00"))

    def test_totals_mismatch_rejected(self):
        p1 = make_product(self.store)
        sale = self._sale(lines=[(p1, 1, "10.00", "4.00")], subtotal="10.00")
        Sale.objects.filter(pk=sale.pk).update(total=Decimal("12.00"))
        sale.refresh_from_db()

        with self.assertRaises(PostingRuleError):
            post_sale_to_ledger(sale=sale)

    def test_sale_without_items_posts_nothing(self):
        sale = self._sale(lines=[], subtotal="0.00")
        self.assertIsNone(post_sale_to_ledger(sale=sale))


class StockAdjustmentRecorderTests(TestCase):
    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.inventory = self.accounts[Account.INVENTORY]
        self.adjustment = self.accounts[Account.INVENTORY_ADJUSTMENT]

    def test_gain_debits_inventory(self):
        je = post_consolidated_stock_adjustment(
            store=self.store, total_adjustment_cost=Decimal("7.00"), description="Count"
        )
        self.assertEqual(line_amount(je, self.inventory, DEBIT), Decimal("7.00"))
        self.assertEqual(line_amount(je, self.adjustment, CREDIT), Decimal("7.00"))
        self.assertEqual(balance_of(self.inventory), Decimal("7.00"))

    def test_loss_credits_inventory(self):
        je = post_consolidated_stock_adjustment(
            store=self.store, total_adjustment_cost=Decimal("-4.25"), description="Shrinkage"
        )
        self.assertEqual(line_amount(je, self.inventory, CREDIT), Decimal("4.25"))
        self.assertEqual(line_amount(je, self.adjustment, DEBIT), Decimal("4.25"))

    def test_sub_cent_adjustment_is_a_no_op(self):
        self.assertIsNone(
            post_consolidated_stock_adjustment(
                store=self.store, total_adjustment_cost=Decimal("0.004"), description="Noise"
            )
        )
        self.assertFalse(JournalEntry.objects.exists())

    def test_product_adjustment_uses_cost_price(self):
        product = make_product(self.store, name="Widget", cost="2.50", stock=13)

        je = post_stock_adjustment_to_ledger(product=product, old_quantity=10, reason="Found")

        self.assertEqual(line_amount(je, self.inventory, DEBIT), Decimal("7.50"))
        self.assertEqual(je.description, "Inventory adjustment for Widget. Reason: Found.")


class AllocateTests(TestCase):
    def test_cents_go_to_largest_remainders(self):
        shares = _allocate({"a": Decimal("3.333"), "b": Decimal("3.336"), "c": Decimal("3.331")}, Decimal("10.00"))
        self.assertEqual(shares, {"a": Decimal("3.33"), "b": Decimal("3.34"), "c": Decimal("3.33")})

    def test_zero_share_stays_zero(self):
        shares = _allocate({"a": Decimal("0.505"), "b": Decimal("0.505"), "c": ZERO}, Decimal("1.01"))
        self.assertEqual(shares, {"a": Decimal("0.51"), "b": Decimal("0.50"), "c": Decimal("0.00")})
