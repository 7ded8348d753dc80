from decimal import Decimal

from django.test import TestCase

from accounting.models import Account, JournalEntry
from accounting.tests.utils import ACTOR, balance_of, make_product, make_store, seed_chart
from audit.models import AuditLog
from products.models import Product
from purchases.models import PurchaseOrder, PurchaseOrderItem, Supplier
from purchases.services.receiving_service import (
    PurchaseReceivingError,
    receive_purchase_order,
)


class ReceivePurchaseOrderTests(TestCase):
    """
    GUARANTEES:
    - Stock rises by what was received, never beyond what was ordered
    - Inventory is valued at the PO line cost, not the product's cost
    - PO status follows the outstanding quantities
    """

    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        self.supplier = Supplier.objects.create(store=self.store, name="Acme Wholesale")
        self.pen = make_product(self.store, sku="PEN", name="Pen", cost="0.90", stock=0)
        self.pad = make_product(self.store, sku="PAD", name="Pad", cost="3.00", stock=2)

        self.po = PurchaseOrder.objects.create(
            store=self.store,
            supplier=self.supplier,
            po_number="PO-0001",
            status=PurchaseOrder.STATUS_ORDERED,
            subtotal=Decimal("85.00"),
            total=Decimal("85.00"),
        )
        PurchaseOrderItem.objects.create(
            purchase_order=self.po, product=self.pen, quantity=50, cost_price=Decimal("1.00")
        )
        PurchaseOrderItem.objects.create(
            purchase_order=self.po, product=self.pad, quantity=10, cost_price=Decimal("3.50")
        )

    def _receive(self, items, store=None):
        return receive_purchase_order(
            store=store or self.store,
            actor=ACTOR,
            purchase_order_id=self.po.pk,
            received_items=items,
        )

    def _stock(self, product):
        return Product.objects.get(pk=product.pk).stock

    def test_partial_then_full_reception(self):
        po = self._receive([{"product_id": self.pen.pk, "quantity": 20}])

        self.assertEqual(po.status, PurchaseOrder.STATUS_PARTIALLY_RECEIVED)
        self.assertEqual(self._stock(self.pen), 20)
        self.assertEqual(balance_of(self.accounts[Account.INVENTORY]), Decimal("20.00"))
        self.assertEqual(balance_of(self.accounts[Account.ACCOUNTS_PAYABLE]), Decimal("20.00"))

        po = self._receive(
            [
                {"product_id": self.pen.pk, "quantity": 30},
                {"product_id": self.pad.pk, "quantity": 10},
            ]
        )

        self.assertEqual(po.status, PurchaseOrder.STATUS_RECEIVED)
        self.assertIsNotNone(po.received_at)
        self.assertEqual(self._stock(self.pen), 50)
        self.assertEqual(self._stock(self.pad), 12)
        self.assertEqual(balance_of(self.accounts[Account.INVENTORY]), Decimal("85.00"))
        self.assertEqual(
            JournalEntry.objects.filter(source_type=JournalEntry.SOURCE_PURCHASE).count(), 2
        )
        self.assertEqual(
            AuditLog.objects.filter(action="PO Stock Received").first().details,
            f"PO ID: {self.po.pk} | 2 item types.",
        )

    def test_repeated_product_lines_are_summed(self):
        self._receive(
            [
                {"product_id": self.pen.pk, "quantity": 5},
                {"product_id": self.pen.pk, "quantity": 5},
            ]
        )
        self.assertEqual(PurchaseOrderItem.objects.get(product=self.pen).received_quantity, 10)

    def test_over_receipt_rejected(self):
        with self.assertRaises(PurchaseReceivingError):
            self._receive([{"product_id": self.pad.pk, "quantity": 11}])
        self.assertEqual(self._stock(self.pad), 2)
        self.assertFalse(JournalEntry.objects.exists())

    def test_product_not_on_order_rejected(self):
        stranger = make_product(self.store, sku="INK")
        with self.assertRaises(PurchaseReceivingError):
            self._receive([{"product_id": stranger.pk, "quantity": 1}])

    def test_draft_order_cannot_be_received(self):
        PurchaseOrder.objects.filter(pk=self.po.pk).update(status=PurchaseOrder.STATUS_DRAFT)
        with self.assertRaises(PurchaseReceivingError):
            self._receive([{"product_id": self.pen.pk, "quantity": 1}])

    def test_received_order_cannot_be_received_again(self):
        self._receive(
            [
                {"product_id": self.pen.pk, "quantity": 50},
                {"product_id": self.pad.pk, "quantity": 10},
            ]
        )
        with self.assertRaises(PurchaseReceivingError):
            self._receive([{"product_id": self.pen.pk, "quantity": 1}])

    def test_non_positive_quantity_rejected(self):
        with self.assertRaises(PurchaseReceivingError):
            self._receive([{"product_id": self.pen.pk, "quantity": 0}])

    def test_order_from_another_store_not_found(self):
        other = make_store("Other")
        seed_chart(other)
        with self.assertRaises(PurchaseReceivingError):
            self._receive([{"product_id": self.pen.pk, "quantity": 1}], store=other)
