from .product import ProductViewSet
from .stock_take import (
    ActiveStockTakeView,
    CancelStockTakeView,
    FinalizeStockTakeView,
    StartStockTakeView,
    StockTakeItemCountView,
)

__all__ = [
    "ProductViewSet",
    "ActiveStockTakeView",
    "CancelStockTakeView",
    "FinalizeStockTakeView",
    "StartStockTakeView",
    "StockTakeItemCountView",
]
