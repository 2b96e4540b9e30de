# recipes/serializers/sales.py

from rest_framework import serializers

from branches.models import Branch
from recipes.models import SalesReport


class SalesImportSerializer(serializers.Serializer):
    file = serializers.FileField()
    execute = serializers.BooleanField(required=False, default=False)
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True),
        source="branch",
        required=False,
        allow_null=True,
    )

    def validate(self, attrs):
        if attrs.get("execute") and not attrs.get("branch"):
            raise serializers.ValidationError({"branch_id": "Branch is required for execution"})
        return attrs


class SalesReportSerializer(serializers.ModelSerializer):
    branch_name = serializers.CharField(source="branch.name", read_only=True)

    class Meta:
        model = SalesReport
        fields = (
            "id",
            "branch",
            "branch_name",
            "file_name",
            "report_date",
            "net_revenue",
            "expected_revenue",
            "revenue_variance",
            "total_cogs",
            "row_count",
            "status",
            "audit",
            "uploaded_by",
            "uploaded_at",
        )
        read_only_fields = fields
