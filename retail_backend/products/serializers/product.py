# products/serializers/product.py

"""
PRODUCT SERIALIZERS

Purpose:
- Read shape for store products (stock is the on-hand column).
- Input shape for manual stock adjustments.
"""

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "category",
            "category_name",
            "price",
            "cost_price",
            "stock",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class StockAdjustmentInputSerializer(serializers.Serializer):
    """
    new_quantity is an absolute level for "Stock Count" / "Quick adjustment"
    and a signed delta for any other reason.
    """

    new_quantity = serializers.IntegerField()
    reason = serializers.CharField(max_length=255)

    def validate_reason(self, value: str):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("reason cannot be blank")
        return v
