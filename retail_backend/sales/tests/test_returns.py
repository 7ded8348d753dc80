from decimal import Decimal

from django.test import TestCase

from accounting.models import Account, JournalEntry
from accounting.tests.utils import (
    ACTOR,
    balance_of,
    entry_totals,
    make_product,
    make_store,
    seed_chart,
)
from audit.models import AuditLog
from products.models import Product
from sales.models import Customer, Return, Sale
from sales.services.exceptions import ReturnProcessingError
from sales.services.return_service import create_return
from sales.services.sale_service import create_sale


class CreateReturnTests(TestCase):
    """
    Returns reverse the sale proportionally and restock only what is
    flagged add_to_stock.
    """

    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.customer = Customer.objects.create(store=self.store, name="Ada")
        self.shirt = make_product(self.store, sku="SH-1", name="Shirt", price="30.00", cost="12.00", stock=10)
        self.mug = make_product(self.store, sku="MG-1", name="Mug", price="10.00", cost="4.00", stock=10)
        self.sale = create_sale(
            store=self.store,
            actor=ACTOR,
            customer_id=self.customer.pk,
            items=[
                {"product_id": self.shirt.pk, "quantity": 2},
                {"product_id": self.mug.pk, "quantity": 1},
            ],
            tax="7.00",
        )

    def _return(self, items, refund_method=Return.REFUND_CASH):
        return create_return(
            store=self.store,
            actor=ACTOR,
            transaction_id=self.sale.transaction_id,
            items=items,
            refund_method=refund_method,
        )

    def _stock(self, product):
        return Product.objects.get(pk=product.pk).stock

    def test_partial_cash_return(self):
        sale_return = self._return([{"product_id": self.shirt.pk, "quantity": 1, "reason": "Too small"}])

        # revenue 30 of subtotal 70, tax share 3.00
        self.assertEqual(sale_return.refund_amount, Decimal("33.00"))
        self.assertEqual(self._stock(self.shirt), 9)
        self.assertEqual(Sale.objects.get(pk=self.sale.pk).refund_status, Sale.REFUND_PARTIAL)

        je = JournalEntry.objects.get(source_type=JournalEntry.SOURCE_RETURN)
        debits, credits = entry_totals(je)
        self.assertEqual(debits, credits)
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("44.00"))
        self.assertEqual(balance_of(self.accounts[Account.SALES_REVENUE]), Decimal("40.00"))
        self.assertEqual(balance_of(self.accounts[Account.SALES_TAX_PAYABLE]), Decimal("4.00"))
        self.assertEqual(balance_of(self.accounts[Account.COGS]), Decimal("16.00"))
        self.assertEqual(
            AuditLog.objects.get(action="Return Processed").details,
            f"For Sale ID: {self.sale.transaction_id}, Amount: 33.00",
        )

    def test_damaged_goods_not_restocked(self):
        self._return([{"product_id": self.mug.pk, "quantity": 1, "add_to_stock": False}])

        self.assertEqual(self._stock(self.mug), 9)
        self.assertEqual(balance_of(self.accounts[Account.COGS]), Decimal("28.00"))
        self.assertEqual(balance_of(self.accounts[Account.INVENTORY]), Decimal("-28.00"))

    def test_full_return_marks_refunded(self):
        self._return(
            [
                {"product_id": self.shirt.pk, "quantity": 2},
                {"product_id": self.mug.pk, "quantity": 1},
            ]
        )
        sale = Sale.objects.get(pk=self.sale.pk)
        self.assertEqual(sale.refund_status, Sale.REFUND_FULL)
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("0.00"))
        self.assertEqual(balance_of(self.accounts[Account.SALES_TAX_PAYABLE]), Decimal("0.00"))

    def test_cannot_return_more_than_sold(self):
        self._return([{"product_id": self.shirt.pk, "quantity": 2}])
        with self.assertRaises(ReturnProcessingError):
            self._return([{"product_id": self.shirt.pk, "quantity": 1}])
        self.assertEqual(Return.objects.count(), 1)

    def test_store_credit_refund(self):
        self._return([{"product_id": self.mug.pk, "quantity": 1}], refund_method=Return.REFUND_STORE_CREDIT)

        self.assertEqual(Customer.objects.get(pk=self.customer.pk).store_credit, Decimal("11.00"))
        self.assertEqual(balance_of(self.accounts[Account.STORE_CREDIT_PAYABLE]), Decimal("11.00"))

    def test_store_credit_refund_needs_customer(self):
        walk_in = create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.mug.pk, "quantity": 1}],
        )
        with self.assertRaises(ReturnProcessingError):
            create_return(
                store=self.store,
                actor=ACTOR,
                transaction_id=walk_in.transaction_id,
                items=[{"product_id": self.mug.pk, "quantity": 1}],
                refund_method=Return.REFUND_STORE_CREDIT,
            )

    def test_invalid_refund_method(self):
        with self.assertRaises(ReturnProcessingError):
            self._return([{"product_id": self.mug.pk, "quantity": 1}], refund_method="bitcoin")

    def test_item_not_on_sale(self):
        stranger = make_product(self.store, sku="ZZ-1")
        with self.assertRaises(ReturnProcessingError):
            self._return([{"product_id": stranger.pk, "quantity": 1}])


class PiecewiseReturnTests(TestCase):
    """
    A discounted sale returned one unit at a time refunds exactly what was
    paid, however the per-unit shares round.
    """

    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.pen = make_product(self.store, sku="PN-1", name="Pen", price="10.00", cost="3.00", stock=10)

    def _sell(self, tax):
        return create_sale(
            store=self.store,
            actor=ACTOR,
            items=[{"product_id": self.pen.pk, "quantity": 3}],
            discount="10.00",
            tax=tax,
        )

    def _return_one_at_a_time(self, sale):
        return [
            create_return(
                store=self.store,
                actor=ACTOR,
                transaction_id=sale.transaction_id,
                items=[{"product_id": self.pen.pk, "quantity": 1}],
                refund_method=Return.REFUND_CASH,
            ).refund_amount
            for _ in range(3)
        ]

    def test_refunds_sum_to_sale_total(self):
        sale = self._sell(tax="2.00")

        refunds = self._return_one_at_a_time(sale)

        self.assertEqual(refunds, [Decimal("7.34"), Decimal("7.32"), Decimal("7.34")])
        self.assertEqual(sum(refunds), sale.total)
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("0.00"))
        self.assertEqual(balance_of(self.accounts[Account.SALES_REVENUE]), Decimal("0.00"))
        self.assertEqual(balance_of(self.accounts[Account.SALES_TAX_PAYABLE]), Decimal("0.00"))
        self.assertEqual(Sale.objects.get(pk=sale.pk).refund_status, Sale.REFUND_FULL)

    def test_untaxed_refunds_never_exceed_subtotal(self):
        sale = self._sell(tax="0.00")

        refunds = self._return_one_at_a_time(sale)

        self.assertEqual(refunds, [Decimal("6.67"), Decimal("6.66"), Decimal("6.67")])
        self.assertEqual(sum(refunds), Decimal("20.00"))
        for je in JournalEntry.objects.filter(source_type=JournalEntry.SOURCE_RETURN):
            debits, credits = entry_totals(je)
            self.assertEqual(debits, credits)
