# products/services/stock_adjustments.py

"""
STOCK ADJUSTMENTS SERVICE

Purpose:
- Manually correct a product's on-hand stock.
- Keep the inventory account in step with the physical count.

Reasons:
- "Stock Count"       -> input is the new absolute level (must be >= 0)
- "Quick adjustment"  -> input is the new absolute level (must be >= 0)
- anything else       -> input is a signed delta; the result is clamped at 0

Each adjustment writes one audit row ("Stock Adjusted") and, when the
value moved by at least one cent, one journal entry
(Dr/Cr Inventory against Inventory Adjustment).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from accounting.models import Account
from accounting.services.account_resolver import load_account_map
from accounting.services.posting import post_stock_adjustment_to_ledger
from audit.services import log_action
from products.models import Product
from products.services.inventory import shift_stock

logger = logging.getLogger(__name__)

REASON_STOCK_COUNT = "Stock Count"
REASON_QUICK_ADJUSTMENT = "Quick adjustment"
ABSOLUTE_REASONS = {REASON_STOCK_COUNT, REASON_QUICK_ADJUSTMENT}


class StockAdjustmentError(Exception):
    """Domain error for adjustment failures."""


@dataclass(frozen=True)
class AdjustmentResult:
    product: Product
    old_quantity: int
    new_quantity: int
    journal_entry: object | None


def _to_int(value, *, field_name: str) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise StockAdjustmentError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise StockAdjustmentError(f"{field_name} must be an integer")


def target_quantity(*, current: int, value: int, reason: str) -> int:
    if reason in ABSOLUTE_REASONS:
        if value < 0:
            raise StockAdjustmentError("Stock level cannot be negative")
        return value
    return max(0, current + value)


@transaction.atomic
def adjust_product_stock(
    *,
    store,
    actor,
    product_id,
    new_quantity,
    reason: str,
) -> AdjustmentResult:
    reason = (reason or "").strip()
    if not reason:
        raise StockAdjustmentError("reason is required")

    value = _to_int(new_quantity, field_name="new_quantity")

    accounts = load_account_map(store)
    accounts.require(Account.INVENTORY, Account.INVENTORY_ADJUSTMENT)

    try:
        product = Product.objects.select_for_update().get(pk=product_id, store=store)
    except Product.DoesNotExist:
        raise StockAdjustmentError("Product not found")

    old_quantity = int(product.stock)
    new_level = target_quantity(current=old_quantity, value=value, reason=reason)

    shift_stock(product_id=product.pk, delta=new_level - old_quantity)
    product.refresh_from_db(fields=["stock"])

    log_action(
        store=store,
        actor=actor,
        action="Stock Adjusted",
        details=(
            f"Adjusted stock for {product.name} (SKU: {product.sku}) "
            f"from {old_quantity} to {product.stock}. Reason: {reason}."
        ),
    )

    entry = post_stock_adjustment_to_ledger(
        product=product,
        old_quantity=old_quantity,
        reason=reason,
        accounts=accounts,
    )

    logger.info(
        "Stock adjusted",
        extra={
            "product_id": str(product.pk),
            "old_quantity": old_quantity,
            "new_quantity": product.stock,
            "reason": reason,
        },
    )

    return AdjustmentResult(
        product=product,
        old_quantity=old_quantity,
        new_quantity=int(product.stock),
        journal_entry=entry,
    )
