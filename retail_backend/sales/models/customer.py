# sales/models/customer.py

import uuid
from decimal import Decimal

from django.db import models


class Customer(models.Model):
    """
    store_credit: what the store owes the customer (returns to credit).
    account_balance: what the customer owes the store (sales on account).

    Both are moved only by the sale / payment / return services, via F().
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.CASCADE,
        related_name="customers",
    )

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")

    store_credit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    account_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
