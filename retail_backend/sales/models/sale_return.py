# sales/models/sale_return.py

"""
CUSTOMER RETURNS

A Return reverses part (or all) of one sale. Each ReturnItem points at the
original SaleItem so returned quantities can be capped and the original
price/cost snapshots reused.

Created once. Never updated. Never deleted.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone


class Return(models.Model):
    REFUND_CASH = "cash"
    REFUND_CARD = "card"
    REFUND_STORE_CREDIT = "store_credit"
    REFUND_ACCOUNT = "account"

    REFUND_METHOD_CHOICES = [
        (REFUND_CASH, "Cash"),
        (REFUND_CARD, "Card"),
        (REFUND_STORE_CREDIT, "Store credit"),
        (REFUND_ACCOUNT, "Customer account"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.PROTECT,
        related_name="returns",
    )

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="returns",
    )

    timestamp = models.DateTimeField(default=timezone.now)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    refund_method = models.CharField(max_length=20, choices=REFUND_METHOD_CHOICES)

    class Meta:
        ordering = ["-timestamp"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("Return records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("Return records cannot be deleted")

    def __str__(self):
        return f"Return | {self.sale.transaction_id} | {self.refund_amount}"


class ReturnItem(models.Model):
    sale_return = models.ForeignKey(
        Return,
        on_delete=models.CASCADE,
        related_name="items",
    )

    sale_item = models.ForeignKey(
        "sales.SaleItem",
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    quantity = models.PositiveIntegerField()
    reason = models.CharField(max_length=255, blank=True, default="")
    add_to_stock = models.BooleanField(default=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.product} x {self.quantity}"
