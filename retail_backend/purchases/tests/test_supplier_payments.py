from decimal import Decimal

from django.test import TestCase

from accounting.models import Account, JournalEntry
from accounting.tests.utils import ACTOR, balance_of, make_store, seed_chart
from audit.models import AuditLog
from purchases.models import Supplier, SupplierInvoice, SupplierPayment
from purchases.services.payment_service import (
    SupplierPaymentError,
    next_invoice_status,
    record_supplier_payment,
)


class RecordSupplierPaymentTests(TestCase):
    def setUp(self):
        self.store = make_store()
        self.accounts = seed_chart(self.store)
        supplier = Supplier.objects.create(store=self.store, name="Acme Wholesale")
        self.invoice = SupplierInvoice.objects.create(
            store=self.store,
            supplier=supplier,
            invoice_number="ACME-77",
            amount=Decimal("100.00"),
        )

    def _pay(self, amount):
        return record_supplier_payment(
            store=self.store,
            actor=ACTOR,
            invoice_id=self.invoice.pk,
            amount=amount,
            reference="TRF-1",
        )

    def _invoice(self):
        return SupplierInvoice.objects.get(pk=self.invoice.pk)

    def test_partial_then_full(self):
        self._pay("40.00")
        invoice = self._invoice()
        self.assertEqual(invoice.status, SupplierInvoice.STATUS_PARTIALLY_PAID)
        self.assertEqual(invoice.outstanding, Decimal("60.00"))

        self._pay("60.00")
        self.assertEqual(self._invoice().status, SupplierInvoice.STATUS_PAID)
        self.assertEqual(SupplierPayment.objects.filter(invoice=self.invoice).count(), 2)

        self.assertEqual(balance_of(self.accounts[Account.ACCOUNTS_PAYABLE]), Decimal("-100.00"))
        self.assertEqual(balance_of(self.accounts[Account.CASH]), Decimal("-100.00"))
        self.assertEqual(
            JournalEntry.objects.filter(source_type=JournalEntry.SOURCE_PAYMENT).count(), 2
        )
        self.assertEqual(AuditLog.objects.filter(action="Supplier Payment Recorded").count(), 2)

    def test_paid_invoice_rejects_payment(self):
        self._pay("100.00")
        with self.assertRaises(SupplierPaymentError):
            self._pay("1.00")

    def test_non_positive_amount_rejected(self):
        with self.assertRaises(SupplierPaymentError):
            self._pay("-5")
        self.assertFalse(SupplierPayment.objects.exists())

    def test_unparseable_amount_rejected(self):
        with self.assertRaises(SupplierPaymentError):
            self._pay("abc")
        self.assertFalse(SupplierPayment.objects.exists())

    def test_amount_rounded_half_up_to_cents(self):
        self._pay("40.005")
        self.assertEqual(self._invoice().amount_paid, Decimal("40.01"))

    def test_invoice_from_another_store_not_found(self):
        other = make_store("Other")
        seed_chart(other)
        with self.assertRaises(SupplierPaymentError):
            record_supplier_payment(
                store=other, actor=ACTOR, invoice_id=self.invoice.pk, amount="10.00"
            )

    def test_next_invoice_status(self):
        self.assertEqual(
            next_invoice_status(amount_paid=Decimal("0"), amount=Decimal("5")),
            SupplierInvoice.STATUS_UNPAID,
        )
        self.assertEqual(
            next_invoice_status(amount_paid=Decimal("5"), amount=Decimal("5")),
            SupplierInvoice.STATUS_PAID,
        )
