# accounting/tests/utils.py

"""
Shared fixtures for ledger-facing tests (used by every app's test suite).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from accounting.models import Account, JournalEntry, JournalEntryLine
from accounting.services.chart_seeding import seed_default_chart
from products.models import Category, Product
from store.models import Store
from store.services.context import Actor

ACTOR = Actor(id="1", name="Test Cashier")


def make_store(name: str = "Main Street") -> Store:
    return Store.objects.create(name=name, code=f"ST-{uuid.uuid4().hex[:6].upper()}")


def seed_chart(store) -> dict[str, Account]:
    """
    Seed the default chart and return {sub_type: Account}.
    """
    seed_default_chart(store)
    return {
        acc.sub_type: acc
        for acc in Account.objects.filter(store=store, sub_type__isnull=False)
    }


def make_product(store, *, sku="SKU-1", name="Widget", price="10.00", cost="4.00", stock=10, category=None):
    return Product.objects.create(
        store=store,
        sku=sku,
        name=name,
        price=Decimal(price),
        cost_price=Decimal(cost),
        stock=stock,
        category=category,
    )


def make_category(store, name="General", *, revenue_account=None, cogs_account=None):
    return Category.objects.create(
        store=store,
        name=name,
        revenue_account=revenue_account,
        cogs_account=cogs_account,
    )


def balance_of(account) -> Decimal:
    return Account.objects.get(pk=account.pk).balance


def entry_totals(entry: JournalEntry) -> tuple[Decimal, Decimal]:
    debits = Decimal("0.00")
    credits = Decimal("0.00")
    for line in entry.lines.all():
        if line.entry_type == JournalEntryLine.DEBIT:
            debits += line.amount
        else:
            credits += line.amount
    return debits, credits


def line_amount(entry: JournalEntry, account, entry_type: str) -> Decimal:
    return sum(
        (
            ln.amount
            for ln in entry.lines.filter(account=account, entry_type=entry_type)
        ),
        Decimal("0.00"),
    )
