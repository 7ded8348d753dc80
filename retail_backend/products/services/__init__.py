from .inventory import InsufficientStockError, decrement_stock, increment_stock

__all__ = [
    "InsufficientStockError",
    "decrement_stock",
    "increment_stock",
]
