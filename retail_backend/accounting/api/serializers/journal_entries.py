# accounting/api/serializers/journal_entries.py

from decimal import Decimal

from rest_framework import serializers

from accounting.models.journal import JournalEntry, JournalEntryLine


class JournalEntryLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = JournalEntryLine
        fields = ("id", "account", "account_name", "entry_type", "amount")
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalEntryLineSerializer(many=True, read_only=True)

    class Meta:
        model = JournalEntry
        fields = ("id", "date", "description", "source_type", "source_id", "created_at", "lines")
        read_only_fields = fields


class ManualJournalLineInputSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))

    def validate(self, attrs):
        debit = attrs.get("debit") or Decimal("0.00")
        credit = attrs.get("credit") or Decimal("0.00")
        if debit < 0 or credit < 0:
            raise serializers.ValidationError("Debit or credit cannot be negative.")
        if debit > 0 and credit > 0:
            raise serializers.ValidationError("A line cannot have both debit and credit.")
        if debit == 0 and credit == 0:
            raise serializers.ValidationError("A line must have either debit or credit.")
        return attrs


class ManualJournalEntryInputSerializer(serializers.Serializer):
    date = serializers.DateTimeField(required=False)
    description = serializers.CharField()
    lines = ManualJournalLineInputSerializer(many=True)

    def validate_lines(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("A journal entry needs at least two lines.")
        return value
