# products/views/stock_take.py

"""
STOCK TAKE API (one active session per store)

GET    /api/products/stock-takes/active/                current session (404 if none)
POST   /api/products/stock-takes/active/start/          open a session
PATCH  /api/products/stock-takes/active/items/<uuid>/   {"counted": int}
POST   /api/products/stock-takes/active/finalize/       apply counts + post ledger
POST   /api/products/stock-takes/active/cancel/         discard the session
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.services.exceptions import AccountingServiceError
from products.serializers import (
    StockTakeCountSerializer,
    StockTakeItemSerializer,
    StockTakeSerializer,
)
from products.services.stock_take_service import (
    StockTakeError,
    cancel_stock_take,
    finalize_stock_take,
    get_active_stock_take,
    start_stock_take,
    update_stock_take_count,
)
from store.api.mixins import StoreScopedMixin

logger = logging.getLogger(__name__)


def _session_payload(session):
    session = type(session).objects.prefetch_related("items").get(pk=session.pk)
    return StockTakeSerializer(session).data


class ActiveStockTakeView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockTakeSerializer

    @extend_schema(tags=["stock-takes"], responses=StockTakeSerializer)
    def get(self, request):
        session = get_active_stock_take(self.get_store())
        if session is None:
            return Response({"detail": "No active stock take"}, status=status.HTTP_404_NOT_FOUND)
        return Response(_session_payload(session), status=status.HTTP_200_OK)


class StartStockTakeView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockTakeSerializer

    @extend_schema(tags=["stock-takes"], request=None, responses={201: StockTakeSerializer})
    def post(self, request):
        try:
            session = start_stock_take(store=self.get_store(), actor=self.get_actor())
        except StockTakeError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(_session_payload(session), status=status.HTTP_201_CREATED)


class StockTakeItemCountView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockTakeCountSerializer

    @extend_schema(tags=["stock-takes"], request=StockTakeCountSerializer, responses=StockTakeItemSerializer)
    def patch(self, request, item_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            item = update_stock_take_count(
                store=self.get_store(),
                item_id=item_id,
                counted=s.validated_data["counted"],
            )
        except StockTakeError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(StockTakeItemSerializer(item).data, status=status.HTTP_200_OK)


class FinalizeStockTakeView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockTakeSerializer

    @extend_schema(tags=["stock-takes"], request=None, responses=StockTakeSerializer)
    def post(self, request):
        try:
            result = finalize_stock_take(store=self.get_store(), actor=self.get_actor())
        except StockTakeError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except AccountingServiceError:
            logger.exception("Stock take finalization failed")
            return Response(
                {"detail": "Failed to finalize stock take"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        payload = _session_payload(result.stock_take)
        payload["adjusted_items"] = result.adjusted_items
        payload["total_adjustment_cost"] = str(result.total_adjustment_cost)
        return Response(payload, status=status.HTTP_200_OK)


class CancelStockTakeView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockTakeSerializer

    @extend_schema(tags=["stock-takes"], request=None, responses={204: None})
    def post(self, request):
        try:
            cancel_stock_take(store=self.get_store(), actor=self.get_actor())
        except StockTakeError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
