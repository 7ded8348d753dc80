# sales/serializers/sale_return.py

from rest_framework import serializers

from sales.models import Return, ReturnItem


class ReturnItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnItem
        fields = ["id", "sale_item", "product", "quantity", "reason", "add_to_stock"]
        read_only_fields = fields


class ReturnSerializer(serializers.ModelSerializer):
    transaction_id = serializers.CharField(source="sale.transaction_id", read_only=True)
    items = ReturnItemSerializer(many=True, read_only=True)

    class Meta:
        model = Return
        fields = ["id", "transaction_id", "timestamp", "refund_amount", "refund_method", "items"]
        read_only_fields = fields


class ReturnItemInputSerializer(serializers.Serializer):
    """
    A line is identified by sale_item_id, or by product_id when the
    product appears once on the sale.
    """

    sale_item_id = serializers.IntegerField(required=False)
    product_id = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    add_to_stock = serializers.BooleanField(default=True)

    def validate(self, attrs):
        if attrs.get("sale_item_id") is None and attrs.get("product_id") is None:
            raise serializers.ValidationError("sale_item_id or product_id is required")
        return attrs


class ReturnCreateInputSerializer(serializers.Serializer):
    refund_method = serializers.ChoiceField(
        choices=[
            Return.REFUND_CASH,
            Return.REFUND_CARD,
            Return.REFUND_STORE_CREDIT,
            Return.REFUND_ACCOUNT,
        ]
    )
    items = ReturnItemInputSerializer(many=True, allow_empty=False)
