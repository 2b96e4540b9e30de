# accounting/api/serializers/journal_entries.py

"""
Journal entry read + write serializers.

Writes never touch the models directly: validated data is handed to the
journal engine (create_journal_entry), which owns every accounting rule.
"""

from decimal import Decimal

from rest_framework import serializers

from accounting.api.serializers.ledger_entries import LedgerEntrySerializer
from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from branches.models import Branch


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = LedgerEntrySerializer(source="ledger_entries", many=True, read_only=True)
    reversed_by_id = serializers.SerializerMethodField()

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "reference",
            "description",
            "source_type",
            "branch",
            "posted_at",
            "created_by",
            "created_at",
            "reverses",
            "reversed_by_id",
            "lines",
        )
        read_only_fields = fields

    def get_reversed_by_id(self, obj):
        reversal = JournalEntry.objects.filter(reverses_id=obj.pk).values_list("id", flat=True).first()
        return reversal


class JournalLineInputSerializer(serializers.Serializer):
    account_id = serializers.PrimaryKeyRelatedField(queryset=Account.objects.all(), source="account")
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.all(), source="branch", required=False, allow_null=True
    )
    memo = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class JournalEntryCreateSerializer(serializers.Serializer):
    description = serializers.CharField()
    posted_at = serializers.DateTimeField(required=False, allow_null=True)
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.all(), source="branch", required=False, allow_null=True
    )
    reference = serializers.CharField(max_length=80, required=False, allow_blank=True)
    lines = JournalLineInputSerializer(many=True)

    def validate_lines(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("A journal entry needs at least two lines.")
        return value


class ReverseEntrySerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")


class ManualEntrySerializer(serializers.Serializer):
    account_id = serializers.PrimaryKeyRelatedField(queryset=Account.objects.filter(is_active=True), source="account")
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    type = serializers.ChoiceField(choices=[LedgerEntry.DEBIT, LedgerEntry.CREDIT])
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    entry_date = serializers.DateField(required=False, allow_null=True)
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.all(), source="branch", required=False, allow_null=True
    )
