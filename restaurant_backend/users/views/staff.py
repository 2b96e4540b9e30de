"""
PATH: users/views/staff.py

STAFF DIRECTORY

Managers use this to pick employees for shifts and payroll, and to maintain
hourly rates + branch assignments.
"""

from rest_framework import mixins, serializers, viewsets
from rest_framework.permissions import IsAuthenticated

from branches.models import Branch
from permissions.roles import IsManagerOrAdmin
from users.models import User


class StaffSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    branches = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.all(), many=True, required=False
    )

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "hourly_rate",
            "cliq_alias",
            "branches",
            "default_branch",
            "is_active",
        ]
        read_only_fields = ("id", "email", "username", "full_name")


class StaffViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, IsManagerOrAdmin]
    serializer_class = StaffSerializer
    queryset = User.objects.prefetch_related("branches").order_by("first_name", "email")
    filterset_fields = ["role", "is_active", "branches"]
