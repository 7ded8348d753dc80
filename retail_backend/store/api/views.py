# store/api/views.py

"""
GET /api/store/mine/  stores the caller may act for (values usable as X-Store-Id)
"""

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from store.models import Store


class StoreSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = ["id", "name", "code", "address", "phone", "is_active"]
        read_only_fields = fields


class MyStoresView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StoreSerializer

    @extend_schema(tags=["store"], responses=StoreSerializer(many=True))
    def get(self, request):
        qs = Store.objects.filter(is_active=True)
        if not request.user.is_superuser:
            qs = qs.filter(memberships__user=request.user, memberships__is_active=True)
        return Response(
            StoreSerializer(qs.distinct().order_by("name"), many=True).data,
            status=status.HTTP_200_OK,
        )
