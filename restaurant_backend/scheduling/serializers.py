# scheduling/serializers.py

from django.contrib.auth import get_user_model
from rest_framework import serializers

from branches.models import Branch
from scheduling.models import Shift, TimeEntry

User = get_user_model()


class ShiftUserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ("id", "username", "full_name", "role")
        read_only_fields = fields


class ShiftSerializer(serializers.ModelSerializer):
    user = ShiftUserSerializer(read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    duration_hours = serializers.DecimalField(max_digits=6, decimal_places=2, read_only=True)

    class Meta:
        model = Shift
        fields = (
            "id",
            "user",
            "branch",
            "branch_name",
            "date",
            "start_time",
            "end_time",
            "duration_hours",
            "role",
            "notes",
            "status",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class ShiftInputSerializer(serializers.Serializer):
    user_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True), source="user")
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True), source="branch", required=False, allow_null=True
    )
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    role = serializers.CharField(max_length=50)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["end_time"] <= attrs["start_time"]:
            raise serializers.ValidationError({"end_time": "end_time must be after start_time"})
        return attrs


class ShiftUpdateSerializer(serializers.Serializer):
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True), source="branch", required=False
    )
    date = serializers.DateField(required=False)
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    role = serializers.CharField(max_length=50, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Shift.Status.choices, required=False)


class BulkShiftSerializer(serializers.Serializer):
    shifts = ShiftInputSerializer(many=True, allow_empty=False)


# ---------------------------
# ATTENDANCE
# ---------------------------


class TimeEntrySerializer(serializers.ModelSerializer):
    user = ShiftUserSerializer(read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True)
    is_open = serializers.BooleanField(read_only=True)

    class Meta:
        model = TimeEntry
        fields = (
            "id",
            "user",
            "branch",
            "branch_name",
            "clock_in_at",
            "clock_in_latitude",
            "clock_in_longitude",
            "clock_in_source",
            "clock_out_at",
            "clock_out_latitude",
            "clock_out_longitude",
            "clock_out_source",
            "total_hours",
            "is_open",
        )
        read_only_fields = fields


class ClockActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=[("in", "Clock in"), ("out", "Clock out")])
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.all(), source="branch", required=False, allow_null=True
    )
    latitude = serializers.DecimalField(max_digits=12, decimal_places=8, required=False, allow_null=True)
    longitude = serializers.DecimalField(max_digits=12, decimal_places=8, required=False, allow_null=True)
    source = serializers.ChoiceField(choices=TimeEntry.Source.choices, required=False)

    def validate(self, attrs):
        if attrs["action"] == "in" and attrs.get("branch") is None:
            raise serializers.ValidationError({"branch_id": "branch_id is required to clock in"})
        return attrs
