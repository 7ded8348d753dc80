# sales/models/sale_item.py

"""
SALE ITEM (SNAPSHOT)

Price and cost are snapshotted at sale time; later product edits never
change what a sale earned or cost. returned_quantity is the only field that
moves after creation (return service).
"""

from decimal import Decimal

from django.db import models

from .sale import Sale


class SaleItem(models.Model):
    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    quantity = models.PositiveIntegerField()

    price_at_sale = models.DecimalField(max_digits=12, decimal_places=2)
    cost_at_sale = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    returned_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["id"]

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.price_at_sale) * self.quantity

    @property
    def returnable_quantity(self) -> int:
        return int(self.quantity) - int(self.returned_quantity)

    def __str__(self):
        return f"{self.product} x {self.quantity}"
