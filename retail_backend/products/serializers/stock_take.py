# products/serializers/stock_take.py

from rest_framework import serializers

from products.models import StockTake, StockTakeItem


class StockTakeItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockTakeItem
        fields = ["id", "product", "name", "sku", "expected", "counted"]
        read_only_fields = ["id", "product", "name", "sku", "expected"]


class StockTakeSerializer(serializers.ModelSerializer):
    items = StockTakeItemSerializer(many=True, read_only=True)

    class Meta:
        model = StockTake
        fields = ["id", "status", "start_time", "end_time", "items"]
        read_only_fields = fields


class StockTakeCountSerializer(serializers.Serializer):
    counted = serializers.IntegerField(min_value=0)
