# purchases/models.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models.product import Product
from store.models.store import Store

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES)


class Supplier(models.Model):
    """
    Supplier master.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        Store,
        on_delete=models.CASCADE,
        related_name="suppliers",
    )

    name = models.CharField(max_length=200)
    contact_person = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["store", "name"], name="supplier_store_name_idx"),
        ]

    def __str__(self):
        return self.name


class PurchaseOrder(models.Model):
    """
    Purchase order header.

    Receiving is performed by services (purchases.services.receiving_service):
    - increments received_quantity per line and product stock
    - moves status to partially_received / received
    - posts Dr Inventory / Cr Accounts Payable at the PO line cost
    """

    STATUS_DRAFT = "draft"
    STATUS_ORDERED = "ordered"
    STATUS_PARTIALLY_RECEIVED = "partially_received"
    STATUS_RECEIVED = "received"
    STATUS_CANCELED = "canceled"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_ORDERED, "Ordered"),
        (STATUS_PARTIALLY_RECEIVED, "Partially received"),
        (STATUS_RECEIVED, "Received"),
        (STATUS_CANCELED, "Canceled"),
    ]

    RECEIVABLE_STATUSES = {STATUS_ORDERED, STATUS_PARTIALLY_RECEIVED}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        Store,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )

    po_number = models.CharField(max_length=64)
    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    shipping_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True, default="")

    ordered_at = models.DateTimeField(default=timezone.now)
    expected_at = models.DateTimeField(null=True, blank=True)
    received_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["store", "po_number"],
                name="uniq_store_po_number",
            ),
            models.CheckConstraint(
                condition=models.Q(total__gte=Decimal("0.00")),
                name="purchase_order_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="po_status_created_idx"),
        ]

    def clean(self):
        if not (self.po_number or "").strip():
            raise ValidationError({"po_number": "po_number is required"})

        if self.status == self.STATUS_RECEIVED and not self.received_at:
            raise ValidationError(
                {"received_at": "received_at is required when status is received"}
            )

    def save(self, *args, **kwargs):
        if self.po_number is not None:
            self.po_number = self.po_number.strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.po_number} ({self.supplier.name})"


class PurchaseOrderItem(models.Model):
    """
    Purchase order line. cost_price is the agreed unit cost and is what the
    ledger books on reception, whatever the product's current cost is.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="purchase_order_items",
    )

    quantity = models.PositiveIntegerField()
    cost_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    received_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="po_item_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(cost_price__gte=Decimal("0.00")),
                name="po_item_cost_price_nonnegative",
            ),
            models.UniqueConstraint(
                fields=["purchase_order", "product"],
                name="uniq_po_product",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return _money(Decimal(str(self.quantity)) * Decimal(str(self.cost_price)))

    @property
    def outstanding_quantity(self) -> int:
        return max(0, int(self.quantity) - int(self.received_quantity))

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} x {self.quantity}"


class SupplierInvoice(models.Model):
    """
    Supplier bill, optionally tied to the PO it charges for.

    amount_paid / status are maintained by the supplier payment service.
    """

    STATUS_UNPAID = "unpaid"
    STATUS_PARTIALLY_PAID = "partially_paid"
    STATUS_PAID = "paid"

    STATUSES = [
        (STATUS_UNPAID, "Unpaid"),
        (STATUS_PARTIALLY_PAID, "Partially paid"),
        (STATUS_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        Store,
        on_delete=models.PROTECT,
        related_name="supplier_invoices",
    )

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )

    invoice_number = models.CharField(max_length=64)
    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_UNPAID)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["supplier", "invoice_number"],
                name="uniq_supplier_invoice_number",
            ),
            models.CheckConstraint(
                condition=models.Q(amount__gte=Decimal("0.00")),
                name="supplier_invoice_amount_nonnegative",
            ),
        ]

    def clean(self):
        if not (self.invoice_number or "").strip():
            raise ValidationError({"invoice_number": "invoice_number is required"})

    def save(self, *args, **kwargs):
        if self.invoice_number is not None:
            self.invoice_number = self.invoice_number.strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def outstanding(self) -> Decimal:
        return _money(Decimal(str(self.amount)) - Decimal(str(self.amount_paid)))

    def __str__(self):
        return f"{self.invoice_number} ({self.supplier.name})"


class SupplierPayment(models.Model):
    """
    Payment against a supplier invoice (settles Accounts Payable).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice = models.ForeignKey(
        SupplierInvoice,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    date = models.DateTimeField(default=timezone.now)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(max_length=32, default="cash")
    reference = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="supplier_payment_amount_gt_zero",
            ),
        ]

    def clean(self):
        if self.amount is not None and self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "amount must be > 0"})

    def save(self, *args, **kwargs):
        if self.reference is not None:
            self.reference = self.reference.strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.invoice.invoice_number} - {self.amount}"
