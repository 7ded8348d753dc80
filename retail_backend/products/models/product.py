# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .category import Category


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - stock is an on-hand integer count, never negative
    - it is only moved by services (sale, reception, adjustment, stock take,
      return) and always via F() expressions
    - cost_price is the current unit cost; sales snapshot it on the line
    """

    STATUS_ACTIVE = "active"
    STATUS_ARCHIVED = "archived"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_ARCHIVED, "Archived"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.CASCADE,
        related_name="products",
    )

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=128, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    stock = models.IntegerField(default=0)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["store", "sku"], name="uniq_product_store_sku"),
            models.CheckConstraint(condition=Q(stock__gte=0), name="chk_product_stock_non_negative"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        self.sku = (self.sku or "").strip()
        if not self.sku:
            raise ValidationError("SKU is required")

        if self.price is None or Decimal(self.price) < 0:
            raise ValidationError("Price cannot be negative")

        if self.cost_price is None or Decimal(self.cost_price) < 0:
            raise ValidationError("Cost price cannot be negative")

        if self.category_id and self.category.store_id != self.store_id:
            raise ValidationError("Category belongs to another store")
