# accounting/services/chart_seeding.py

"""
DEFAULT STORE CHART

Creates (or repairs) the accounts a store needs before any workflow can
post. Idempotent: existing accounts are matched by number and only their
name / sub_type are refreshed. Balances are never touched.
"""

import logging

from django.db import transaction

from accounting.models.account import Account

logger = logging.getLogger(__name__)

DEFAULT_CHART = [
    ("1010", "Cash on Hand", Account.ASSET, Account.CASH),
    ("1100", "Accounts Receivable", Account.ASSET, Account.ACCOUNTS_RECEIVABLE),
    ("1200", "Inventory", Account.ASSET, Account.INVENTORY),
    ("2010", "Accounts Payable", Account.LIABILITY, Account.ACCOUNTS_PAYABLE),
    ("2200", "Sales Tax Payable", Account.LIABILITY, Account.SALES_TAX_PAYABLE),
    ("2300", "Store Credit Payable", Account.LIABILITY, Account.STORE_CREDIT_PAYABLE),
    ("3010", "Owner's Equity", Account.EQUITY, None),
    ("4010", "Sales Revenue", Account.REVENUE, Account.SALES_REVENUE),
    ("5010", "Cost of Goods Sold", Account.EXPENSE, Account.COGS),
    ("6010", "Rent Expense", Account.EXPENSE, None),
    ("6020", "Inventory Adjustment Expense", Account.EXPENSE, Account.INVENTORY_ADJUSTMENT),
]


@transaction.atomic
def seed_default_chart(store) -> tuple[int, int]:
    """
    Returns (created_count, updated_count).
    """
    created_count = 0
    updated_count = 0

    for number, name, account_type, sub_type in DEFAULT_CHART:
        acc, created = Account.objects.get_or_create(
            store=store,
            number=number,
            defaults={
                "name": name,
                "account_type": account_type,
                "sub_type": sub_type,
            },
        )

        if created:
            created_count += 1
            continue

        update_fields = []
        if acc.name != name:
            acc.name = name
            update_fields.append("name")
        if sub_type and acc.sub_type != sub_type:
            acc.sub_type = sub_type
            update_fields.append("sub_type")

        if update_fields:
            acc.save(update_fields=update_fields)
            updated_count += 1

    logger.info(
        "Default chart seeded",
        extra={"store_id": str(store.pk), "created": created_count, "updated": updated_count},
    )
    return created_count, updated_count
