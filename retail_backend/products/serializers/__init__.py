from .product import ProductSerializer, StockAdjustmentInputSerializer
from .stock_take import (
    StockTakeCountSerializer,
    StockTakeItemSerializer,
    StockTakeSerializer,
)

__all__ = [
    "ProductSerializer",
    "StockAdjustmentInputSerializer",
    "StockTakeCountSerializer",
    "StockTakeItemSerializer",
    "StockTakeSerializer",
]
