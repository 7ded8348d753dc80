# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Sales history (list + retrieve by transaction_id).
- Sale creation: stock, customer balances, audit and ledger in one unit.
- Payments against unpaid / partially paid sales.
- Returns (partial or full, per line).

Routes (mounted at /api/sales/):
    GET  /                               list
    POST /                               create
    GET  /<transaction_id>/              retrieve
    POST /<transaction_id>/payments/     record a payment
    POST /<transaction_id>/returns/      process a return

Error rule:
- Business failures come back as {"detail": "..."} with 400 / 404 / 409.
  Ledger internals are logged by the services, never returned.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from sales.models import Sale
from sales.serializers import (
    ReturnCreateInputSerializer,
    ReturnSerializer,
    SaleCreateInputSerializer,
    SalePaymentInputSerializer,
    SaleSerializer,
)
from sales.services.exceptions import (
    ReturnProcessingError,
    SaleCreationError,
    SalePaymentError,
    StockValidationError,
)
from sales.services.payment_service import record_sale_payment
from sales.services.return_service import create_return
from sales.services.sale_service import create_sale
from store.api.mixins import StoreScopedMixin


class SaleViewSet(
    StoreScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = "transaction_id"
    lookup_value_regex = "[^/]+"
    filterset_fields = ["payment_status", "refund_status", "customer"]

    def get_queryset(self):
        return (
            Sale.objects.filter(store=self.get_store())
            .select_related("customer")
            .prefetch_related("items", "items__product", "payments")
            .order_by("-timestamp")
        )

    def _reload(self, sale):
        return self.get_queryset().get(pk=sale.pk)

    @extend_schema(
        tags=["sales"],
        request=SaleCreateInputSerializer,
        responses={201: SaleSerializer},
    )
    def create(self, request, *args, **kwargs):
        s = SaleCreateInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            sale = create_sale(
                store=self.get_store(),
                actor=self.get_actor(),
                items=data["items"],
                tax=data["tax"],
                discount=data["discount"],
                customer_id=data.get("customer_id"),
                payment_status=data["payment_status"],
                payments=data.get("payments"),
                store_credit_used=data["store_credit_used"],
                due_date=data.get("due_date"),
            )
        except StockValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except SaleCreationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SaleSerializer(self._reload(sale)).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["sales"],
        request=SalePaymentInputSerializer,
        responses=SaleSerializer,
    )
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, transaction_id=None):
        sale = self.get_object()

        s = SalePaymentInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            sale = record_sale_payment(
                store=self.get_store(),
                actor=self.get_actor(),
                transaction_id=sale.transaction_id,
                amount=data["amount"],
                method=data["method"],
                date=data.get("date"),
            )
        except SalePaymentError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SaleSerializer(self._reload(sale)).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["sales"],
        request=ReturnCreateInputSerializer,
        responses={201: ReturnSerializer},
    )
    @action(detail=True, methods=["post"], url_path="returns")
    def returns(self, request, transaction_id=None):
        sale = self.get_object()

        s = ReturnCreateInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            sale_return = create_return(
                store=self.get_store(),
                actor=self.get_actor(),
                transaction_id=sale.transaction_id,
                items=data["items"],
                refund_method=data["refund_method"],
            )
        except ReturnProcessingError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ReturnSerializer(sale_return).data, status=status.HTTP_201_CREATED)
