# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account
from accounting.services.account_resolver import get_active_chart


class AccountSerializer(serializers.ModelSerializer):
    """
    Accounts of the active chart. The chart is fixed server-side; the type of
    an account with ledger history cannot change.
    """

    class Meta:
        model = Account
        fields = ("id", "code", "name", "account_type", "description", "is_active", "created_at")
        read_only_fields = ("id", "created_at")

    def validate_code(self, value):
        value = (value or "").strip()
        chart = get_active_chart()
        qs = Account.objects.filter(chart=chart, code=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("An account with this code already exists in the active chart.")
        return value

    def validate(self, attrs):
        new_type = attrs.get("account_type")
        if (
            self.instance is not None
            and new_type
            and new_type != self.instance.account_type
            and self.instance.ledger_entries.exists()
        ):
            raise serializers.ValidationError(
                {"account_type": "Cannot change the type of an account with ledger history."}
            )
        return attrs

    def create(self, validated_data):
        validated_data["chart"] = get_active_chart()
        return super().create(validated_data)


class MappingItemSerializer(serializers.Serializer):
    event_key = serializers.CharField(max_length=50)
    account_id = serializers.IntegerField(min_value=1)


class MappingUpdateSerializer(serializers.Serializer):
    mappings = MappingItemSerializer(many=True)
