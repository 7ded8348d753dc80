# store/models/store.py

import uuid

from django.db import models
from django.db.models import Q


class Store(models.Model):
    """
    A store is the tenant boundary of the back office.

    Every ledger row (accounts, journal entries) and every inventory row
    (products, sales, purchase orders, stock takes) carries a store FK,
    and every query is filtered by it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)

    code = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Unique store/branch code (optional). If set, must be unique.",
        db_index=True,
    )

    address = models.TextField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["code"],
                condition=Q(code__isnull=False) & ~Q(code=""),
                name="uniq_store_code_when_present",
            ),
        ]

    def __str__(self):
        c = (self.code or "").strip()
        if c:
            return f"{self.name} ({c})"
        return self.name
