# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register product domain routes under /api/products/
- Stock-take routes are declared before the router so "stock-takes" is
  never captured as a product pk.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import (
    ActiveStockTakeView,
    CancelStockTakeView,
    FinalizeStockTakeView,
    ProductViewSet,
    StartStockTakeView,
    StockTakeItemCountView,
)

router = SimpleRouter()
router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("stock-takes/active/", ActiveStockTakeView.as_view(), name="stock-take-active"),
    path("stock-takes/active/start/", StartStockTakeView.as_view(), name="stock-take-start"),
    path(
        "stock-takes/active/items/<uuid:item_id>/",
        StockTakeItemCountView.as_view(),
        name="stock-take-item-count",
    ),
    path("stock-takes/active/finalize/", FinalizeStockTakeView.as_view(), name="stock-take-finalize"),
    path("stock-takes/active/cancel/", CancelStockTakeView.as_view(), name="stock-take-cancel"),
    path("", include(router.urls)),
]
