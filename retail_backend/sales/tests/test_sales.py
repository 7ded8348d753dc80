from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase

from accounting.models import Account, JournalEntry, JournalEntryLine
from accounting.services.exceptions import JournalEntryCreationError
from accounting.tests.utils import (
    ACTOR,
    balance_of,
    entry_totals,
    line_amount,
    make_product,
    make_store,
    seed_chart,
)
from audit.models import AuditLog
from products.models import Product
from sales.models import Customer, Payment, Sale
from sales.services.exceptions import SaleCreationError, StockValidationError
from sales.services.sale_service import create_sale


class CreateSaleTests(TestCase):
    """
    Tests for the sale workflow.

    GUARANTEES:
    - Stock, sale rows, audit row and journal entry are written together
    - Any failure leaves no partial state behind
    """

    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.product = make_product(self.store, price="25.00", cost="10.00", stock=5)

    def _stock(self):
        return Product.objects.get(pk=self.product.pk).stock

    def test_paid_sale_writes_everything(self):
        sale = create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.product.pk, "quantity": 2}],
            tax="5.00",
        )

        self.assertTrue(sale.transaction_id.startswith("SALE-"))
        self.assertEqual(sale.subtotal, Decimal("50.00"))
        self.assertEqual(sale.total, Decimal("55.00"))
        self.assertEqual(sale.amount_paid, Decimal("55.00"))
        self.assertEqual(self._stock(), 3)

        item = sale.items.get()
        self.assertEqual(item.price_at_sale, Decimal("25.00"))
        self.assertEqual(item.cost_at_sale, Decimal("10.00"))

        payment = Payment.objects.get(sale=sale)
        self.assertEqual((payment.amount, payment.method), (Decimal("55.00"), "cash"))

        je = JournalEntry.objects.get(source_type=JournalEntry.SOURCE_SALE, source_id=sale.transaction_id)
        debits, credits = entry_totals(je)
        self.assertEqual(debits, credits)
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("55.00"))
        self.assertEqual(balance_of(self.accounts[Account.SALES_REVENUE]), Decimal("50.00"))
        self.assertEqual(balance_of(self.accounts[Account.INVENTORY]), Decimal("-20.00"))

        log = AuditLog.objects.get(store=self.store, action="Sale Created")
        self.assertEqual(log.details, f"Transaction ID: {sale.transaction_id}, Total: 55.00")
        self.assertEqual(log.actor_name, "Test Cashier")

    def test_discount_reduces_subtotal(self):
        sale = create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.product.pk, "quantity": 4}],
            discount="10.00",
        )
        self.assertEqual(sale.subtotal, Decimal("90.00"))
        self.assertEqual(sale.total, Decimal("90.00"))

    def test_insufficient_stock_rolls_back(self):
        with self.assertRaises(StockValidationError):
            create_sale(
                store=self.store,
                actor=ACTOR,
                items=[{"product_id": self.product.pk, "quantity": 6}],
            )

        self.assertEqual(self._stock(), 5)
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(JournalEntry.objects.exists())
        self.assertFalse(AuditLog.objects.exists())

    def test_missing_system_account_aborts_before_writes(self):
        Account.objects.filter(store=self.store, sub_type=Account.COGS).update(sub_type=None)

        with self.assertRaises(SaleCreationError):
            create_sale(
                store=self.store,
                actor=ACTOR,
                items=[{"product_id": self.product.pk, "quantity": 1}],
            )

        self.assertEqual(self._stock(), 5)
        self.assertFalse(Sale.objects.exists())

    def test_ledger_failure_rolls_back_sale(self):
        with patch(
            "sales.services.sale_service.post_sale_to_ledger",
            side_effect=JournalEntryCreationError("boom"),
        ):
            with self.assertRaises(SaleCreationError):
                create_sale(
                    store=self.store,
                    actor=ACTOR,
                    items=[{"product_id": self.product.pk, "quantity": 1}],
                )

        self.assertEqual(self._stock(), 5)
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(AuditLog.objects.exists())

    def test_product_from_another_store_rejected(self):
        other = make_product(make_store("Other"), sku="X-1")
        with self.assertRaises(SaleCreationError):
            create_sale(
                store=self.store,
                actor=ACTOR,
                items=[{"product_id": other.pk, "quantity": 1}],
            )

    def test_empty_cart_rejected(self):
        with self.assertRaises(SaleCreationError):
            create_sale(store=self.store, actor=ACTOR, items=[])

    def test_unpaid_sale_needs_customer(self):
        with self.assertRaises(SaleCreationError):
            create_sale(
                store=self.store,
                actor=ACTOR,
                items=[{"product_id": self.product.pk, "quantity": 1}],
                payment_status=Sale.PAYMENT_UNPAID,
            )

    def test_unpaid_sale_books_receivable(self):
        customer = Customer.objects.create(store=self.store, name="Ada")

        sale = create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.product.pk, "quantity": 2}],
            customer_id=customer.pk,
            payment_status=Sale.PAYMENT_UNPAID,
        )

        self.assertTrue(sale.transaction_id.startswith("INV-"))
        self.assertEqual(sale.amount_paid, Decimal("0.00"))
        self.assertFalse(Payment.objects.filter(sale=sale).exists())
        self.assertEqual(Customer.objects.get(pk=customer.pk).account_balance, Decimal("50.00"))
        self.assertEqual(balance_of(self.accounts[Account.ACCOUNTS_RECEIVABLE]), Decimal("50.00"))
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("0.00"))

    def test_partially_paid_checkout_settles_part_of_receivable(self):
        customer = Customer.objects.create(store=self.store, name="Ada")

        create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.product.pk, "quantity": 2}],
            customer_id=customer.pk,
            payment_status=Sale.PAYMENT_PARTIAL,
            payments=[{"amount": "20.00", "method": "card"}],
        )

        self.assertEqual(Customer.objects.get(pk=customer.pk).account_balance, Decimal("30.00"))
        self.assertEqual(balance_of(self.accounts[Account.ACCOUNTS_RECEIVABLE]), Decimal("30.00"))
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("20.00"))

    def test_store_credit_is_consumed(self):
        customer = Customer.objects.create(store=self.store, name="Ada", store_credit=Decimal("15.00"))

        sale = create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.product.pk, "quantity": 2}],
            customer_id=customer.pk,
            store_credit_used="15.00",
        )

        self.assertEqual(Customer.objects.get(pk=customer.pk).store_credit, Decimal("0.00"))
        self.assertEqual(Payment.objects.get(sale=sale).amount, Decimal("35.00"))
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("35.00"))
        self.assertEqual(balance_of(self.accounts[Account.STORE_CREDIT_PAYABLE]), Decimal("-15.00"))

    def test_store_credit_beyond_balance_rolls_back(self):
        customer = Customer.objects.create(store=self.store, name="Ada", store_credit=Decimal("5.00"))

        with self.assertRaises(SaleCreationError):
            create_sale(
                store=self.store,
                actor=ACTOR,
                items=[{"product_id": self.product.pk, "quantity": 1}],
                customer_id=customer.pk,
                store_credit_used="10.00",
            )

        self.assertEqual(self._stock(), 5)
        self.assertEqual(Customer.objects.get(pk=customer.pk).store_credit, Decimal("5.00"))

    def test_cogs_uses_cost_snapshot(self):
        sale = create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.product.pk, "quantity": 1}],
        )
        Product.objects.filter(pk=self.product.pk).update(cost_price=Decimal("99.00"))

        je = JournalEntry.objects.get(source_id=sale.transaction_id)
        self.assertEqual(
            line_amount(je, self.accounts[Account.COGS], JournalEntryLine.DEBIT),
            Decimal("10.00"),
        )
