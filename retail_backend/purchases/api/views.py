# purchases/api/views.py

from decimal import Decimal

from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models.product import Product
from purchases.api.serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    ReceivePurchaseOrderSerializer,
    SupplierInvoiceSerializer,
    SupplierPaymentCreateSerializer,
    SupplierPaymentSerializer,
    SupplierSerializer,
)
from purchases.models import (
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierInvoice,
)
from purchases.services.payment_service import (
    SupplierPaymentError,
    record_supplier_payment,
)
from purchases.services.receiving_service import (
    PurchaseReceivingError,
    receive_purchase_order,
)
from store.api.mixins import StoreScopedMixin


def _order_queryset(store):
    return (
        PurchaseOrder.objects.filter(store=store)
        .select_related("supplier")
        .prefetch_related("items", "items__product")
    )


class SupplierListCreateView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer(many=True))
    def get(self, request):
        qs = Supplier.objects.filter(store=self.get_store(), is_active=True).order_by("name")
        return Response(
            SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = s.save(store=self.get_store())
        return Response(
            SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED
        )


class PurchaseOrderListCreateView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseOrderSerializer

    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer(many=True))
    def get(self, request):
        qs = _order_queryset(self.get_store()).order_by("-created_at")
        return Response(
            PurchaseOrderSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=PurchaseOrderCreateSerializer,
        responses={201: PurchaseOrderSerializer},
    )
    @transaction.atomic
    def post(self, request):
        store = self.get_store()
        s = PurchaseOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            supplier = Supplier.objects.get(id=data["supplier_id"], store=store, is_active=True)
        except Supplier.DoesNotExist:
            return Response(
                {"detail": "Supplier not found"}, status=status.HTTP_400_BAD_REQUEST
            )

        products = {
            str(p.id): p
            for p in Product.objects.filter(
                store=store, id__in=[line["product_id"] for line in data["items"]]
            )
        }

        subtotal = Decimal("0.00")
        for line in data["items"]:
            if str(line["product_id"]) not in products:
                return Response(
                    {"detail": f"Product not found: {line['product_id']}"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            subtotal += line["cost_price"] * line["quantity"]

        try:
            with transaction.atomic():
                po = PurchaseOrder.objects.create(
                    store=store,
                    supplier=supplier,
                    po_number=data["po_number"],
                    status=data["status"],
                    subtotal=subtotal,
                    shipping_cost=data["shipping_cost"],
                    tax=data["tax"],
                    total=subtotal + data["shipping_cost"] + data["tax"],
                    notes=data["notes"],
                    expected_at=data.get("expected_at"),
                )
        except IntegrityError:
            return Response(
                {"detail": "PO number already exists for this store"},
                status=status.HTTP_409_CONFLICT,
            )

        PurchaseOrderItem.objects.bulk_create(
            [
                PurchaseOrderItem(
                    purchase_order=po,
                    product=products[str(line["product_id"])],
                    quantity=line["quantity"],
                    cost_price=line["cost_price"],
                )
                for line in data["items"]
            ]
        )

        po = _order_queryset(store).get(id=po.id)
        return Response(
            PurchaseOrderSerializer(po).data, status=status.HTTP_201_CREATED
        )


class PurchaseOrderReceiveView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReceivePurchaseOrderSerializer

    @extend_schema(
        tags=["purchases"],
        request=ReceivePurchaseOrderSerializer,
        responses=PurchaseOrderSerializer,
    )
    def post(self, request, order_id):
        store = self.get_store()
        get_object_or_404(PurchaseOrder, id=order_id, store=store)

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            po = receive_purchase_order(
                store=store,
                actor=self.get_actor(),
                purchase_order_id=order_id,
                received_items=s.validated_data["items"],
            )
        except PurchaseReceivingError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        po = _order_queryset(store).get(id=po.id)
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_200_OK)


class SupplierInvoiceListCreateView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierInvoiceSerializer

    @extend_schema(tags=["purchases"], responses=SupplierInvoiceSerializer(many=True))
    def get(self, request):
        qs = (
            SupplierInvoice.objects.filter(store=self.get_store())
            .select_related("supplier")
            .order_by("-created_at")
        )
        return Response(
            SupplierInvoiceSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=SupplierInvoiceSerializer,
        responses={201: SupplierInvoiceSerializer},
    )
    def post(self, request):
        store = self.get_store()
        s = SupplierInvoiceSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        supplier = s.validated_data["supplier"]
        po = s.validated_data.get("purchase_order")
        if supplier.store_id != store.id or (po is not None and po.store_id != store.id):
            return Response(
                {"detail": "Supplier or purchase order not found"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            with transaction.atomic():
                invoice = s.save(store=store)
        except IntegrityError:
            return Response(
                {"detail": "Invoice number already exists for this supplier"},
                status=status.HTTP_409_CONFLICT,
            )

        return Response(
            SupplierInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED
        )


class SupplierInvoicePaymentView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierPaymentCreateSerializer

    @extend_schema(
        tags=["purchases"],
        request=SupplierPaymentCreateSerializer,
        responses={201: SupplierPaymentSerializer},
    )
    def post(self, request, invoice_id):
        store = self.get_store()
        get_object_or_404(SupplierInvoice, id=invoice_id, store=store)

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            payment = record_supplier_payment(
                store=store,
                actor=self.get_actor(),
                invoice_id=invoice_id,
                amount=data["amount"],
                method=data["method"],
                reference=data.get("reference", ""),
                date=data.get("date"),
            )
        except SupplierPaymentError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            SupplierPaymentSerializer(payment).data, status=status.HTTP_201_CREATED
        )
