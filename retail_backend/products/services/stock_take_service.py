# products/services/stock_take_service.py

"""
======================================================
PATH: products/services/stock_take_service.py
======================================================
STOCK TAKE SERVICE

Lifecycle:
    start -> (update counts)* -> finalize | cancel

- start: snapshot every active product's stock as `expected`
- update: record a `counted` value for one line (>= 0)
- cancel: discard the session (no stock or ledger effect)
- finalize: for every counted line that differs from expected, set the
  product's stock to the count; the value of all differences is posted as
  ONE consolidated inventory adjustment entry

Only one active session per store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models import Account
from accounting.services.account_resolver import load_account_map
from accounting.services.posting import post_consolidated_stock_adjustment
from audit.services import log_action
from products.models import Product, StockTake, StockTakeItem
from products.services.inventory import shift_stock

logger = logging.getLogger(__name__)


class StockTakeError(Exception):
    """Domain error for stock take failures."""


@dataclass(frozen=True)
class FinalizeResult:
    stock_take: StockTake
    adjusted_items: int
    total_adjustment_cost: Decimal
    journal_entry: object | None


def get_active_stock_take(store) -> StockTake | None:
    return StockTake.objects.filter(store=store, status=StockTake.STATUS_ACTIVE).first()


def _lock_active(store) -> StockTake:
    session = (
        StockTake.objects.select_for_update()
        .filter(store=store, status=StockTake.STATUS_ACTIVE)
        .first()
    )
    if session is None:
        raise StockTakeError("No active stock take")
    return session


@transaction.atomic
def start_stock_take(*, store, actor) -> StockTake:
    if get_active_stock_take(store) is not None:
        raise StockTakeError("A stock take is already in progress")

    try:
        with transaction.atomic():
            session = StockTake.objects.create(store=store)
    except IntegrityError as exc:
        raise StockTakeError("A stock take is already in progress") from exc

    products = Product.objects.filter(store=store, status=Product.STATUS_ACTIVE).order_by("name")
    StockTakeItem.objects.bulk_create(
        [
            StockTakeItem(
                stock_take=session,
                product=p,
                name=p.name,
                sku=p.sku,
                expected=int(p.stock),
                counted=None,
            )
            for p in products
        ]
    )

    log_action(
        store=store,
        actor=actor,
        action="Stock Take Started",
        details=f"Started stock take with {len(products)} products.",
    )
    return session


@transaction.atomic
def update_stock_take_count(*, store, item_id, counted) -> StockTakeItem:
    session = _lock_active(store)

    if counted is None or isinstance(counted, bool):
        raise StockTakeError("counted must be an integer")
    try:
        counted = int(counted)
    except (TypeError, ValueError):
        raise StockTakeError("counted must be an integer")
    if counted < 0:
        raise StockTakeError("counted cannot be negative")

    try:
        item = StockTakeItem.objects.get(pk=item_id, stock_take=session)
    except StockTakeItem.DoesNotExist:
        raise StockTakeError("Stock take item not found")

    item.counted = counted
    item.save(update_fields=["counted"])
    return item


@transaction.atomic
def cancel_stock_take(*, store, actor) -> None:
    session = _lock_active(store)
    session.delete()

    log_action(
        store=store,
        actor=actor,
        action="Stock Take Cancelled",
        details="Active stock take discarded.",
    )


@transaction.atomic
def finalize_stock_take(*, store, actor) -> FinalizeResult:
    accounts = load_account_map(store)
    accounts.require(Account.INVENTORY, Account.INVENTORY_ADJUSTMENT)

    session = _lock_active(store)

    items = list(
        session.items.select_related("product")
        .filter(counted__isnull=False)
        .order_by("name")
    )

    total_cost = Decimal("0.00")
    adjusted = 0

    for item in items:
        difference = int(item.counted) - int(item.expected)
        if difference == 0:
            continue

        product = Product.objects.select_for_update().get(pk=item.product_id)
        shift_stock(product_id=product.pk, delta=int(item.counted) - int(product.stock))

        total_cost += Decimal(difference) * Decimal(product.cost_price or 0)
        adjusted += 1

    entry = post_consolidated_stock_adjustment(
        store=store,
        total_adjustment_cost=total_cost,
        description=f"Stock take adjustment ({session.start_time:%Y-%m-%d})",
        accounts=accounts,
    )

    session.status = StockTake.STATUS_COMPLETED
    session.end_time = timezone.now()
    session.save(update_fields=["status", "end_time"])

    log_action(
        store=store,
        actor=actor,
        action="Stock Take Finalized",
        details=f"Finalized stock take. {adjusted} products adjusted. Total value change: {total_cost:.2f}.",
    )

    logger.info(
        "Stock take finalized",
        extra={
            "stock_take_id": str(session.pk),
            "store_id": str(store.pk),
            "adjusted_items": adjusted,
            "total_adjustment_cost": str(total_cost),
        },
    )

    return FinalizeResult(
        stock_take=session,
        adjusted_items=adjusted,
        total_adjustment_cost=total_cost,
        journal_entry=entry,
    )
