# accounting/models/account.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    A single ledger account belonging to one store.

    Guarantees:
    - Account numbers are unique per store
    - A sub_type (system role) is held by at most one account per store
    - is_debit_normal is derived from account_type at creation and frozen
    - balance is owned by the journal poster: save() never writes it for an
      existing row, the poster moves it with F() increments
    """

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    DEBIT_NORMAL_TYPES = {ASSET, EXPENSE}

    # System roles looked up by the posting layer.
    CASH = "cash"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    ACCOUNTS_PAYABLE = "accounts_payable"
    SALES_TAX_PAYABLE = "sales_tax_payable"
    STORE_CREDIT_PAYABLE = "store_credit_payable"
    SALES_REVENUE = "sales_revenue"
    COGS = "cogs"
    INVENTORY_ADJUSTMENT = "inventory_adjustment"

    SUB_TYPES = [
        (CASH, "Cash"),
        (ACCOUNTS_RECEIVABLE, "Accounts Receivable"),
        (INVENTORY, "Inventory"),
        (ACCOUNTS_PAYABLE, "Accounts Payable"),
        (SALES_TAX_PAYABLE, "Sales Tax Payable"),
        (STORE_CREDIT_PAYABLE, "Store Credit Payable"),
        (SALES_REVENUE, "Sales Revenue"),
        (COGS, "Cost of Goods Sold"),
        (INVENTORY_ADJUSTMENT, "Inventory Adjustment"),
    ]

    # Fields the poster owns once the row exists.
    _POSTER_OWNED_FIELDS = {"balance", "is_debit_normal"}

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.PROTECT,
        related_name="accounts",
    )

    number = models.CharField(max_length=20)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=ACCOUNT_TYPES,
    )

    sub_type = models.CharField(
        max_length=40,
        choices=SUB_TYPES,
        null=True,
        blank=True,
    )

    is_debit_normal = models.BooleanField(default=True, editable=False)

    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["number"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["store", "account_type"], name="acct_store_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["store", "number"],
                name="uniq_account_store_number",
            ),
            models.UniqueConstraint(
                fields=["store", "sub_type"],
                condition=Q(sub_type__isnull=False),
                name="uniq_account_store_sub_type",
            ),
            models.CheckConstraint(
                condition=~Q(number=""),
                name="chk_account_number_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.number} - {self.name}"

    @classmethod
    def debit_normal_for(cls, account_type: str) -> bool:
        return account_type in cls.DEBIT_NORMAL_TYPES

    def clean(self):
        self.number = (self.number or "").strip()
        self.name = (self.name or "").strip()
        self.sub_type = (self.sub_type or "").strip() or None

        if not self.number:
            raise ValidationError("Account number is required")
        if not self.name:
            raise ValidationError("Account name is required")

    def save(self, *args, **kwargs):
        self.full_clean()

        if self._state.adding:
            self.is_debit_normal = self.debit_normal_for(self.account_type)
            return super().save(*args, **kwargs)

        update_fields = kwargs.pop("update_fields", None)
        if update_fields is None:
            update_fields = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key
            ]
        update_fields = [f for f in update_fields if f not in self._POSTER_OWNED_FIELDS]
        return super().save(*args, update_fields=update_fields, **kwargs)
