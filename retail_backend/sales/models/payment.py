# sales/models/payment.py

import uuid

from django.db import models
from django.utils import timezone


class Payment(models.Model):
    """
    One payment received against a sale (at checkout or later on account).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.CASCADE,
        related_name="payments",
    )

    date = models.DateTimeField(default=timezone.now)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=32, default="cash")

    class Meta:
        ordering = ["date"]

    def __str__(self):
        return f"{self.method} {self.amount}"
