# payroll/serializers.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from branches.models import Branch
from payroll.models import PayrollTransaction

User = get_user_model()


class PayrollTransactionSerializer(serializers.ModelSerializer):
    employee_email = serializers.EmailField(source="employee.email", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)

    class Meta:
        model = PayrollTransaction
        fields = (
            "id",
            "employee",
            "employee_email",
            "employee_name",
            "branch",
            "total_hours",
            "hourly_rate",
            "final_amount",
            "period_start",
            "period_end",
            "reference",
            "status",
            "gl_status",
            "journal_entry",
            "payment_journal_entry",
            "notes",
            "error_message",
            "approved_by",
            "approved_at",
            "paid_at",
            "created_at",
        )
        read_only_fields = fields


class PayrollInitiateSerializer(serializers.Serializer):
    employee_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True), source="employee")
    total_hours = serializers.DecimalField(
        max_digits=8, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    hourly_rate = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    period_start = serializers.DateField(required=False)
    period_end = serializers.DateField(required=False)
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.all(), source="branch", required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        start, end = attrs.get("period_start"), attrs.get("period_end")
        if start and end and end < start:
            raise serializers.ValidationError({"period_end": "period_end must be on or after period_start"})
        return attrs


class PayrollPostSerializer(serializers.Serializer):
    payroll_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class PayrollRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class PayrollFailSerializer(serializers.Serializer):
    error = serializers.CharField(max_length=255)
