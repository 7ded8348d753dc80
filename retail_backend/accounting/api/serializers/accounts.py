# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountSerializer(serializers.ModelSerializer):
    """
    balance and is_debit_normal are owned by the journal poster and are
    never writable through the API.
    """

    class Meta:
        model = Account
        fields = (
            "id",
            "number",
            "name",
            "account_type",
            "sub_type",
            "is_debit_normal",
            "balance",
            "description",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "is_debit_normal", "balance", "created_at", "updated_at")
        # (store, number) / (store, sub_type) uniqueness is checked by the
        # model's full_clean() once the store is attached in the view.
        validators = []
