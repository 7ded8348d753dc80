# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Read-only product listing for the active store.
- Manual stock adjustment action (inventory + ledger move together).

Routes:
- GET  /api/products/                      list
- GET  /api/products/<uuid>/               retrieve
- POST /api/products/<uuid>/adjust-stock/  {"new_quantity": int, "reason": str}
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.services.exceptions import AccountingServiceError
from products.models import Product
from products.serializers import ProductSerializer, StockAdjustmentInputSerializer
from products.services.stock_adjustments import StockAdjustmentError, adjust_product_stock
from store.api.mixins import StoreScopedMixin

logger = logging.getLogger(__name__)


class ProductViewSet(StoreScopedMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "category"]
    search_fields = ["name", "sku"]

    def get_queryset(self):
        return (
            Product.objects.filter(store=self.get_store())
            .select_related("category")
            .order_by("name")
        )

    @extend_schema(
        tags=["products"],
        request=StockAdjustmentInputSerializer,
        responses=ProductSerializer,
    )
    @action(detail=True, methods=["post"], url_path="adjust-stock")
    def adjust_stock(self, request, pk=None):
        product = self.get_object()

        s = StockAdjustmentInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = adjust_product_stock(
                store=self.get_store(),
                actor=self.get_actor(),
                product_id=product.pk,
                new_quantity=s.validated_data["new_quantity"],
                reason=s.validated_data["reason"],
            )
        except StockAdjustmentError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except AccountingServiceError:
            logger.exception(
                "Stock adjustment ledger posting failed",
                extra={"product_id": str(product.pk)},
            )
            return Response(
                {"detail": "Failed to adjust stock"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(ProductSerializer(result.product).data, status=status.HTTP_200_OK)
