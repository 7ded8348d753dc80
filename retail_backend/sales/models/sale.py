# sales/models/sale.py

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone


def generate_transaction_id(prefix: str) -> str:
    millis = int(timezone.now().timestamp() * 1000)
    return f"{prefix}-{millis}-{uuid.uuid4().hex[:7]}"


class Sale(models.Model):
    """
    Represents a completed POS transaction.

    GUARANTEES:
    - Financial figures (subtotal/tax/discount/total/store_credit_used) are
      immutable once created
    - payment_status / amount_paid move only through the payment service
    - refund_status moves only through the return service
    - subtotal is net of discount; total == subtotal + tax

    transaction_id prefix: INV for unpaid (on account) sales, SALE otherwise.
    """

    PAYMENT_PAID = "paid"
    PAYMENT_UNPAID = "unpaid"
    PAYMENT_PARTIAL = "partially_paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_UNPAID, "Unpaid"),
        (PAYMENT_PARTIAL, "Partially paid"),
    ]

    REFUND_NONE = "none"
    REFUND_PARTIAL = "partially_refunded"
    REFUND_FULL = "refunded"

    REFUND_STATUS_CHOICES = [
        (REFUND_NONE, "None"),
        (REFUND_PARTIAL, "Partially refunded"),
        (REFUND_FULL, "Refunded"),
    ]

    _IMMUTABLE_FIELDS = (
        "transaction_id",
        "store_id",
        "customer_id",
        "subtotal",
        "tax",
        "discount",
        "total",
        "store_credit_used",
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.PROTECT,
        related_name="sales",
    )

    transaction_id = models.CharField(max_length=64, unique=True)

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )

    timestamp = models.DateTimeField(default=timezone.now)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    store_credit_used = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PAID,
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    due_date = models.DateField(null=True, blank=True)

    refund_status = models.CharField(
        max_length=20,
        choices=REFUND_STATUS_CHOICES,
        default=REFUND_NONE,
    )

    class Meta:
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["store", "timestamp"], name="sale_store_ts_idx"),
            models.Index(fields=["payment_status"], name="sale_payment_status_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                for field in self._IMMUTABLE_FIELDS:
                    if getattr(self, field) != getattr(previous, field):
                        raise ValueError(f"Sale field '{field}' cannot be changed once recorded.")

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.transaction_id} | {self.total}"
