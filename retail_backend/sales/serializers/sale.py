# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Payment, Sale, SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line item serializer (read-only).
    Designed for receipts + UI display.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "quantity",
            "price_at_sale",
            "cost_at_sale",
            "returned_quantity",
            "line_total",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ["id", "date", "amount", "method"]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)

    class Meta:
        model = Sale
        fields = [
            "id",
            "transaction_id",
            "timestamp",
            "customer",
            "customer_name",
            "subtotal",
            "tax",
            "discount",
            "total",
            "store_credit_used",
            "payment_status",
            "amount_paid",
            "due_date",
            "refund_status",
            "items",
            "payments",
        ]
        read_only_fields = fields


# ------------------------------------------------------------
# INPUT
# ------------------------------------------------------------

class SaleItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        help_text="Optional unit price override; defaults to the product's price.",
    )


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.CharField(default="cash")


class SaleCreateInputSerializer(serializers.Serializer):
    """
    Explicit sale input serializer.

    Totals are computed server-side:
      subtotal = sum(price * quantity) - discount
      total    = subtotal + tax
    """

    items = SaleItemInputSerializer(many=True, allow_empty=False)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    payment_status = serializers.ChoiceField(
        choices=[Sale.PAYMENT_PAID, Sale.PAYMENT_UNPAID, Sale.PAYMENT_PARTIAL],
        default=Sale.PAYMENT_PAID,
    )
    payments = PaymentInputSerializer(many=True, required=False)
    store_credit_used = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    due_date = serializers.DateField(required=False, allow_null=True)


class SalePaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.CharField(default="cash")
    date = serializers.DateTimeField(required=False)
