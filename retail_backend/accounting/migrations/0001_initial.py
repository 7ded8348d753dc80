import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("store", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("asset", "Asset"),
                            ("liability", "Liability"),
                            ("equity", "Equity"),
                            ("revenue", "Revenue"),
                            ("expense", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "sub_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("cash", "Cash"),
                            ("accounts_receivable", "Accounts Receivable"),
                            ("inventory", "Inventory"),
                            ("accounts_payable", "Accounts Payable"),
                            ("sales_tax_payable", "Sales Tax Payable"),
                            ("store_credit_payable", "Store Credit Payable"),
                            ("sales_revenue", "Sales Revenue"),
                            ("cogs", "Cost of Goods Sold"),
                            ("inventory_adjustment", "Inventory Adjustment"),
                        ],
                        max_length=40,
                        null=True,
                    ),
                ),
                ("is_debit_normal", models.BooleanField(default=True, editable=False)),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="store.store",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["number"],
                "indexes": [models.Index(fields=["store", "account_type"], name="acct_store_type_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("store", "number"), name="uniq_account_store_number"),
                    models.UniqueConstraint(
                        condition=models.Q(("sub_type__isnull", False)),
                        fields=("store", "sub_type"),
                        name="uniq_account_store_sub_type",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("number", ""), _negated=True),
                        name="chk_account_number_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("name", ""), _negated=True),
                        name="chk_account_name_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "date",
                    models.DateTimeField(default=django.utils.timezone.now, help_text="Accounting effective date"),
                ),
                ("description", models.TextField(help_text="Narrative description of the journal entry")),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("sale", "Sale"),
                            ("purchase", "Purchase"),
                            ("manual", "Manual"),
                            ("payment", "Payment"),
                            ("return", "Return"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "source_id",
                    models.CharField(
                        blank=True,
                        help_text="Id of the originating record (sale transaction id, PO id, ...)",
                        max_length=100,
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_entries",
                        to="store.store",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["store", "date"], name="je_store_date_idx"),
                    models.Index(fields=["source_type", "source_id"], name="je_source_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntryLine",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "entry_type",
                    models.CharField(choices=[("debit", "Debit"), ("credit", "Credit")], max_length=6),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("account_name", models.CharField(max_length=150)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                        to="accounting.account",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry Line",
                "verbose_name_plural": "Journal Entry Lines",
                "indexes": [models.Index(fields=["account", "entry_type"], name="jel_account_type_idx")],
            },
        ),
    ]
