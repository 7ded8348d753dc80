# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import (
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierInvoice,
    SupplierPayment,
)


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        exclude = ("store",)
        read_only_fields = ("id", "created_at")


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "cost_price",
            "received_quantity",
            "line_total",
        ]


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        exclude = ("store",)


class PurchaseOrderItemCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    cost_price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    po_number = serializers.CharField()
    status = serializers.ChoiceField(
        choices=[PurchaseOrder.STATUS_DRAFT, PurchaseOrder.STATUS_ORDERED],
        default=PurchaseOrder.STATUS_ORDERED,
    )
    shipping_cost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, default=0)
    tax = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    expected_at = serializers.DateTimeField(required=False, allow_null=True)
    items = PurchaseOrderItemCreateSerializer(many=True, allow_empty=False)


class ReceiveItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class ReceivePurchaseOrderSerializer(serializers.Serializer):
    items = ReceiveItemSerializer(many=True, allow_empty=False)


class SupplierInvoiceSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)

    class Meta:
        model = SupplierInvoice
        exclude = ("store",)
        read_only_fields = ("id", "amount_paid", "status", "created_at")


class SupplierPaymentCreateSerializer(serializers.Serializer):
    date = serializers.DateTimeField(required=False)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    method = serializers.CharField(default="cash")
    reference = serializers.CharField(required=False, allow_blank=True, default="")


class SupplierPaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = SupplierPayment
        fields = [
            "id",
            "invoice",
            "invoice_number",
            "date",
            "amount",
            "method",
            "reference",
            "created_at",
        ]
