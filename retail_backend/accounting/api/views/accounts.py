# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

STORE CHART OF ACCOUNTS API

GET    /api/accounting/accounts/          list the store's accounts
POST   /api/accounting/accounts/          create an account
GET    /api/accounting/accounts/<id>/     retrieve
PATCH  /api/accounting/accounts/<id>/     rename / re-describe / re-tag
DELETE /api/accounting/accounts/<id>/     only when no journal line uses it

Store is resolved from the X-Store-Id header.
"""

import logging

from django.core.exceptions import ValidationError
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers.accounts import AccountSerializer
from accounting.models.account import Account
from store.api.mixins import StoreScopedMixin

logger = logging.getLogger(__name__)


def _validation_detail(exc: ValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return {"detail": exc.messages}


class AccountListCreateView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer

    def get_queryset(self):
        return Account.objects.filter(store=self.get_store()).order_by("number")

    @extend_schema(tags=["accounting"], responses=AccountSerializer(many=True))
    def get(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountSerializer, responses={201: AccountSerializer})
    def post(self, request, *args, **kwargs):
        serializer = AccountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            account = serializer.save(store=self.get_store())
        except ValidationError as exc:
            return Response(_validation_detail(exc), status=status.HTTP_400_BAD_REQUEST)

        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountDetailView(StoreScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer

    def get_object(self):
        return get_object_or_404(Account, pk=self.kwargs["pk"], store=self.get_store())

    @extend_schema(tags=["accounting"], responses=AccountSerializer)
    def get(self, request, *args, **kwargs):
        return Response(AccountSerializer(self.get_object()).data)

    @extend_schema(tags=["accounting"], request=AccountSerializer, responses=AccountSerializer)
    def patch(self, request, *args, **kwargs):
        account = self.get_object()
        serializer = AccountSerializer(account, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            account = serializer.save()
        except ValidationError as exc:
            return Response(_validation_detail(exc), status=status.HTTP_400_BAD_REQUEST)

        return Response(AccountSerializer(account).data)

    @extend_schema(tags=["accounting"], responses={204: None, 409: None})
    def delete(self, request, *args, **kwargs):
        account = self.get_object()
        try:
            account.delete()
        except ProtectedError:
            return Response(
                {"detail": "Account has journal lines and cannot be deleted."},
                status=status.HTTP_409_CONFLICT,
            )

        logger.info("Account deleted", extra={"account_id": kwargs["pk"], "store_id": str(account.store_id)})
        return Response(status=status.HTTP_204_NO_CONTENT)
