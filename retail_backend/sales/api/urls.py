# sales/api/urls.py

"""
SALES API URLS

Provides (mounted at /api/sales/):
    GET  /                               sales history
    POST /                               create sale
    GET  /<transaction_id>/              receipt payload
    POST /<transaction_id>/payments/     payment on account
    POST /<transaction_id>/returns/      return / refund
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
