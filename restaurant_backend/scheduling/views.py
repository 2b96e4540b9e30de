# scheduling/views.py

"""
PATH: scheduling/views.py

SHIFT ENDPOINTS

GET    /api/scheduling/shifts/              list (?user, ?status, ?start_date, ?end_date)
POST   /api/scheduling/shifts/              create (409 on overlap)
PATCH  /api/scheduling/shifts/<id>/         update (409 on overlap)
DELETE /api/scheduling/shifts/<id>/         cancel (kept for payroll history)
POST   /api/scheduling/shifts/<id>/complete/
POST   /api/scheduling/shifts/bulk/         all-or-nothing
GET    /api/scheduling/shifts/week/?date=   Monday-based week view

POST   /api/scheduling/clock/              {"action": "in"|"out", branch_id, latitude, longitude}
GET    /api/scheduling/clock/              time entries (?user, ?branch, ?start_date, ?end_date, ?active_only)
GET    /api/scheduling/clock/status/       caller's clock status

Lists follow the caller's branch selection. Staff without schedule.manage
only see their own shifts and time entries. Everyone clocks themselves in.
"""

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import SAFE_METHODS, IsAuthenticated
from rest_framework.response import Response

from accounting.api.params import date_param, date_window
from branches.context import has_access_to_branch, resolve_branch_ids
from permissions.roles import CAP_SCHEDULE_MANAGE, HasCapability, user_has_capability
from scheduling.models import Shift, TimeEntry
from scheduling.serializers import (
    BulkShiftSerializer,
    ClockActionSerializer,
    ShiftInputSerializer,
    ShiftSerializer,
    ShiftUpdateSerializer,
    TimeEntrySerializer,
)
from scheduling.services.attendance_service import (
    AttendanceError,
    OutsideGeofenceError,
    clock_in,
    clock_out,
    clock_status,
)
from scheduling.services.shift_service import (
    ScheduleError,
    ShiftConflictError,
    bulk_create_shifts,
    cancel_shift,
    complete_shift,
    create_shift,
    update_shift,
    week_schedule,
)


def _error(exc) -> Response:
    if isinstance(exc, ShiftConflictError):
        body = {"detail": str(exc)}
        if exc.conflicting is not None:
            body["conflicting_shift_id"] = exc.conflicting.id
        return Response(body, status=status.HTTP_409_CONFLICT)
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    tags=["scheduling"],
    parameters=[
        OpenApiParameter(name="start_date", type=str, required=False),
        OpenApiParameter(name="end_date", type=str, required=False),
    ],
)
class ShiftViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = ShiftSerializer
    filterset_fields = ["user", "status", "branch"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    required_capabilities = {
        "POST": CAP_SCHEDULE_MANAGE,
        "PATCH": CAP_SCHEDULE_MANAGE,
        "DELETE": CAP_SCHEDULE_MANAGE,
    }

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [IsAuthenticated()]
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Shift.objects.select_related("user", "branch").order_by("date", "start_time")
        user = self.request.user

        if not user_has_capability(user, CAP_SCHEDULE_MANAGE):
            return qs.filter(user=user)

        branch_ids = resolve_branch_ids(self.request)
        if branch_ids is not None:
            qs = qs.filter(branch_id__in=branch_ids)

        start, end = date_window(self.request)
        if start:
            qs = qs.filter(date__gte=start)
        if end:
            qs = qs.filter(date__lte=end)
        return qs

    def _check_branch(self, branch):
        if branch is not None and not has_access_to_branch(self.request.user, branch.id):
            raise PermissionDenied("You do not have access to this branch.")

    @extend_schema(request=ShiftInputSerializer, responses={201: ShiftSerializer, 400: dict, 409: dict})
    def create(self, request, *args, **kwargs):
        s = ShiftInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        self._check_branch(data.get("branch"))

        try:
            shift = create_shift(
                user=data["user"],
                on=data["date"],
                start_time=data["start_time"],
                end_time=data["end_time"],
                role=data["role"],
                branch=data.get("branch"),
                notes=data.get("notes", ""),
                created_by=request.user,
            )
        except ScheduleError as exc:
            return _error(exc)

        return Response(ShiftSerializer(shift).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ShiftUpdateSerializer, responses={200: ShiftSerializer, 400: dict, 409: dict})
    def partial_update(self, request, *args, **kwargs):
        shift = self.get_object()
        s = ShiftUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        self._check_branch(s.validated_data.get("branch"))

        try:
            shift = update_shift(shift, **s.validated_data)
        except ScheduleError as exc:
            return _error(exc)

        return Response(ShiftSerializer(shift).data)

    @extend_schema(request=None, responses={200: ShiftSerializer, 400: dict})
    def destroy(self, request, *args, **kwargs):
        try:
            shift = cancel_shift(self.get_object())
        except ScheduleError as exc:
            return _error(exc)
        return Response(ShiftSerializer(shift).data)

    @extend_schema(request=None, responses={200: ShiftSerializer, 400: dict})
    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        try:
            shift = complete_shift(self.get_object())
        except ScheduleError as exc:
            return _error(exc)
        return Response(ShiftSerializer(shift).data)

    @extend_schema(request=BulkShiftSerializer, responses={201: dict, 400: dict, 409: dict})
    @action(detail=False, methods=["post"])
    def bulk(self, request):
        s = BulkShiftSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        items = s.validated_data["shifts"]
        for item in items:
            self._check_branch(item.get("branch"))

        try:
            created = bulk_create_shifts(items, created_by=request.user)
        except ScheduleError as exc:
            return _error(exc)

        return Response(
            {
                "message": f"Successfully created {len(created)} shifts",
                "shifts": ShiftSerializer(created, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        parameters=[OpenApiParameter(name="date", type=str, required=False)],
        responses={200: dict},
    )
    @action(detail=False, methods=["get"])
    def week(self, request):
        on = date_param(request, "date") or timezone.localdate()

        branch_ids = resolve_branch_ids(request)
        schedule = week_schedule(on, branch_ids=branch_ids)

        days = []
        for day, shifts in schedule.days.items():
            if not user_has_capability(request.user, CAP_SCHEDULE_MANAGE):
                shifts = [s for s in shifts if s.user_id == request.user.id]
            days.append(
                {
                    "date": day.isoformat(),
                    "weekday": day.strftime("%A"),
                    "shifts": ShiftSerializer(shifts, many=True).data,
                }
            )

        employee_hours = schedule.employee_hours
        if not user_has_capability(request.user, CAP_SCHEDULE_MANAGE):
            employee_hours = {k: v for k, v in employee_hours.items() if k == str(request.user.id)}

        return Response(
            {
                "start_date": schedule.start_date.isoformat(),
                "end_date": schedule.end_date.isoformat(),
                "days": days,
                "employee_hours": {k: float(v) for k, v in employee_hours.items()},
            }
        )


# ---------------------------
# ATTENDANCE
# ---------------------------


def _attendance_error(exc: AttendanceError) -> Response:
    if isinstance(exc, OutsideGeofenceError):
        return Response(
            {"detail": str(exc), "distance": exc.distance, "allowed_radius": exc.allowed_radius},
            status=status.HTTP_403_FORBIDDEN,
        )
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    tags=["scheduling"],
    parameters=[
        OpenApiParameter(name="start_date", type=str, required=False),
        OpenApiParameter(name="end_date", type=str, required=False),
        OpenApiParameter(name="active_only", type=bool, required=False),
    ],
)
class TimeEntryViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = TimeEntrySerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["user", "branch"]
    http_method_names = ["get", "post", "head", "options"]

    def get_queryset(self):
        qs = TimeEntry.objects.select_related("user", "branch").order_by("-clock_in_at")
        user = self.request.user

        if not user_has_capability(user, CAP_SCHEDULE_MANAGE):
            qs = qs.filter(user=user)
        else:
            branch_ids = resolve_branch_ids(self.request)
            if branch_ids is not None:
                qs = qs.filter(branch_id__in=branch_ids)

        start, end = date_window(self.request)
        if start:
            qs = qs.filter(clock_in_at__date__gte=start)
        if end:
            qs = qs.filter(clock_in_at__date__lte=end)
        if (self.request.query_params.get("active_only") or "").lower() == "true":
            qs = qs.filter(clock_out_at__isnull=True)
        return qs

    @extend_schema(
        request=ClockActionSerializer,
        responses={200: TimeEntrySerializer, 201: TimeEntrySerializer, 400: dict, 403: dict},
    )
    def create(self, request, *args, **kwargs):
        s = ClockActionSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            if data["action"] == "in":
                branch = data["branch"]
                if not has_access_to_branch(request.user, branch.id):
                    raise PermissionDenied("You do not have access to this branch.")
                entry = clock_in(
                    user=request.user,
                    branch=branch,
                    latitude=data.get("latitude"),
                    longitude=data.get("longitude"),
                    source=data.get("source"),
                )
                code = status.HTTP_201_CREATED
            else:
                entry = clock_out(
                    user=request.user,
                    latitude=data.get("latitude"),
                    longitude=data.get("longitude"),
                    source=data.get("source"),
                )
                code = status.HTTP_200_OK
        except AttendanceError as exc:
            return _attendance_error(exc)

        return Response(TimeEntrySerializer(entry).data, status=code)

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="status")
    def current(self, request):
        data = clock_status(request.user)
        return Response(
            {
                "is_clocked_in": data["is_clocked_in"],
                "entry": TimeEntrySerializer(data["entry"]).data if data["entry"] else None,
                "elapsed_hours": float(data["elapsed_hours"]) if data["elapsed_hours"] is not None else None,
                "last_entry": TimeEntrySerializer(data["last_entry"]).data if data["last_entry"] else None,
            }
        )
