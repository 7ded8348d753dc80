# products/models/stock_take.py

"""
STOCK TAKE (PHYSICAL COUNT SESSION)

A session snapshots every active product's stock as `expected` when it
starts; staff then fill in `counted`. Finalizing applies the counts and posts
one consolidated inventory adjustment.

At most one active session per store (DB constraint).
"""

import uuid

from django.db import models
from django.db.models import Q
from django.utils import timezone


class StockTake(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.CASCADE,
        related_name="stock_takes",
    )

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-start_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["store"],
                condition=Q(status="active"),
                name="uniq_active_stock_take_per_store",
            ),
        ]

    def __str__(self):
        return f"StockTake {self.start_time:%Y-%m-%d} ({self.status})"


class StockTakeItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    stock_take = models.ForeignKey(
        StockTake,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="stock_take_items",
    )

    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=128)

    expected = models.IntegerField()
    counted = models.IntegerField(null=True, blank=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["stock_take", "product"],
                name="uniq_stock_take_product",
            ),
        ]

    def __str__(self):
        return f"{self.name}: expected {self.expected}, counted {self.counted}"
