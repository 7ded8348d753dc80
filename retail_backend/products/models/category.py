# products/models/category.py

from django.core.exceptions import ValidationError
from django.db import models


class Category(models.Model):
    """
    Product grouping. Optional revenue/COGS account overrides route a
    category's sales to its own ledger accounts; when unset the store's
    default sales_revenue / cogs accounts are used.
    """

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.CASCADE,
        related_name="categories",
    )

    name = models.CharField(max_length=150)

    revenue_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="revenue_categories",
    )

    cogs_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cogs_categories",
    )

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Categories"
        constraints = [
            models.UniqueConstraint(fields=["store", "name"], name="uniq_category_store_name"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Category name is required")

        for field in ("revenue_account", "cogs_account"):
            account = getattr(self, field)
            if account is not None and account.store_id != self.store_id:
                raise ValidationError({field: "Account belongs to another store."})
