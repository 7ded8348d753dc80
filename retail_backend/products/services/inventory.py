# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY CORE HELPERS

Every stock movement in the system goes through these two helpers so that
Product.stock is only ever changed with F() expressions inside the
caller's transaction.

Rules:
- Quantities are integer units.
- Stock never goes below zero: a decrement that would do so updates
  nothing and raises InsufficientStockError.
"""

from __future__ import annotations

from django.db.models import F

from products.models import Product


class InsufficientStockError(Exception):
    """Raised when a conditional stock decrement matches no row."""

    def __init__(self, product_id, requested: int):
        self.product_id = product_id
        self.requested = requested
        super().__init__(f"Insufficient stock for product {product_id} (requested {requested})")


def _to_int(value, *, field_name="quantity") -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer") from exc


def increment_stock(*, product_id, quantity) -> None:
    qty = _to_int(quantity)
    if qty < 0:
        raise ValueError("quantity cannot be negative")
    if qty == 0:
        return
    Product.objects.filter(pk=product_id).update(stock=F("stock") + qty)


def decrement_stock(*, product_id, quantity) -> None:
    qty = _to_int(quantity)
    if qty < 0:
        raise ValueError("quantity cannot be negative")
    if qty == 0:
        return

    updated = Product.objects.filter(pk=product_id, stock__gte=qty).update(stock=F("stock") - qty)
    if updated != 1:
        raise InsufficientStockError(product_id, qty)


def shift_stock(*, product_id, delta) -> None:
    """
    Signed change; used where the caller already holds the row lock and
    has validated the target level.
    """
    delta = _to_int(delta, field_name="delta")
    if delta > 0:
        increment_stock(product_id=product_id, quantity=delta)
    elif delta < 0:
        decrement_stock(product_id=product_id, quantity=-delta)
