# branches/serializers.py

from rest_framework import serializers

from branches.models import Branch


class BranchSerializer(serializers.ModelSerializer):
    class Meta:
        model = Branch
        fields = (
            "id",
            "name",
            "code",
            "branch_type",
            "address",
            "latitude",
            "longitude",
            "geo_radius",
            "is_active",
            "created_at",
        )
        read_only_fields = ("id", "created_at")


class SelectBranchesSerializer(serializers.Serializer):
    branch_ids = serializers.ListField(
        child=serializers.CharField(),
        allow_empty=False,
        help_text='Branch ids to scope reports to, or ["all"].',
    )
