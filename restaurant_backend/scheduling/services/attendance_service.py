# scheduling/services/attendance_service.py

"""
======================================================
PATH: scheduling/services/attendance_service.py
======================================================
ATTENDANCE (CLOCK IN / CLOCK OUT)

clock_in()                 opens a TimeEntry; refused while one is open
clock_out()                closes the open entry and stores total_hours
clock_status()             open entry + elapsed hours, or the last entry
hours_from_time_entries()  worked hours for payroll (closed entries only)

Geofence: when the branch has coordinates, the caller must send a location
within branch.geo_radius metres (great-circle distance). Branches without
coordinates accept clock events from anywhere.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from accounting.services.money import end_of_day_exclusive, q2, start_of_day
from scheduling.models import TimeEntry

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000
COORD_PLACES = Decimal("0.000001")


class AttendanceError(ValueError):
    """Invalid clock request (400)."""


class OutsideGeofenceError(AttendanceError):
    """Clock event too far from the branch (403)."""

    def __init__(self, branch, distance: float):
        self.distance = round(distance)
        self.allowed_radius = branch.geo_radius
        super().__init__(
            f"You are too far from {branch.name}. "
            f"Please move within {branch.geo_radius}m of the branch."
        )


def distance_metres(lat1, lng1, lat2, lng2) -> float:
    phi1 = math.radians(float(lat1))
    phi2 = math.radians(float(lat2))
    d_phi = math.radians(float(lat2) - float(lat1))
    d_lambda = math.radians(float(lng2) - float(lng1))

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _coordinate(value, field: str) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise AttendanceError(f"{field} must be a number")
    if not d.is_finite():
        raise AttendanceError(f"{field} must be a number")
    if abs(d) > 180:
        raise AttendanceError(f"{field} is out of range")
    return d.quantize(COORD_PLACES)


def _source(value) -> str:
    source = (value or TimeEntry.Source.APP).strip().lower()
    if source not in TimeEntry.Source.values:
        raise AttendanceError(f"source must be one of {', '.join(TimeEntry.Source.values)}")
    return source


def check_geofence(branch, latitude, longitude) -> float | None:
    """Distance from the branch in metres, or None when the branch has no location."""
    if branch.latitude is None or branch.longitude is None:
        return None
    if latitude is None or longitude is None:
        raise AttendanceError("Location is required for this branch. Please enable location services.")

    distance = distance_metres(latitude, longitude, branch.latitude, branch.longitude)
    if distance > branch.geo_radius:
        raise OutsideGeofenceError(branch, distance)
    return distance


def _open_entry(user):
    return TimeEntry.objects.select_for_update().filter(user=user, clock_out_at__isnull=True).first()


@transaction.atomic
def clock_in(
    *,
    user,
    branch,
    latitude=None,
    longitude=None,
    source: str | None = None,
    at: datetime | None = None,
) -> TimeEntry:
    if branch is None or not branch.is_active:
        raise AttendanceError("Branch not found or inactive")

    lat = _coordinate(latitude, "latitude")
    lng = _coordinate(longitude, "longitude")
    check_geofence(branch, lat, lng)

    if _open_entry(user) is not None:
        raise AttendanceError("You are already clocked in. Please clock out first.")

    entry = TimeEntry.objects.create(
        user=user,
        branch=branch,
        clock_in_at=at or timezone.now(),
        clock_in_latitude=lat,
        clock_in_longitude=lng,
        clock_in_source=_source(source),
    )
    logger.info("Clock in user=%s branch=%s entry=%s", user.pk, branch.pk, entry.pk)
    return entry


@transaction.atomic
def clock_out(
    *,
    user,
    latitude=None,
    longitude=None,
    source: str | None = None,
    at: datetime | None = None,
) -> TimeEntry:
    entry = _open_entry(user)
    if entry is None:
        raise AttendanceError("You are not clocked in. Please clock in first.")

    lat = _coordinate(latitude, "latitude")
    lng = _coordinate(longitude, "longitude")
    check_geofence(entry.branch, lat, lng)

    clock_out_at = at or timezone.now()
    if clock_out_at < entry.clock_in_at:
        raise AttendanceError("Clock-out time is before clock-in time")

    seconds = (clock_out_at - entry.clock_in_at).total_seconds()
    entry.clock_out_at = clock_out_at
    entry.clock_out_latitude = lat
    entry.clock_out_longitude = lng
    entry.clock_out_source = _source(source)
    entry.total_hours = q2(Decimal(seconds) / Decimal(3600))
    entry.save()

    logger.info("Clock out user=%s entry=%s hours=%s", user.pk, entry.pk, entry.total_hours)
    return entry


def clock_status(user, *, now: datetime | None = None) -> dict:
    open_entry = TimeEntry.objects.filter(user=user, clock_out_at__isnull=True).select_related("branch").first()
    if open_entry is not None:
        elapsed = ((now or timezone.now()) - open_entry.clock_in_at).total_seconds()
        return {
            "is_clocked_in": True,
            "entry": open_entry,
            "elapsed_hours": q2(Decimal(elapsed) / Decimal(3600)),
            "last_entry": None,
        }

    last_entry = (
        TimeEntry.objects.filter(user=user)
        .select_related("branch")
        .order_by("-clock_out_at")
        .first()
    )
    return {
        "is_clocked_in": False,
        "entry": None,
        "elapsed_hours": None,
        "last_entry": last_entry,
    }


def hours_from_time_entries(employee, period_start: date, period_end: date) -> Decimal | None:
    """Sum of closed entries clocked in during the period; None when there are none."""
    entries = TimeEntry.objects.filter(
        user=employee,
        clock_out_at__isnull=False,
        clock_in_at__gte=start_of_day(period_start),
        clock_in_at__lt=end_of_day_exclusive(period_end),
    )
    hours = list(entries.values_list("total_hours", flat=True))
    if not hours:
        return None
    return q2(sum(hours, Decimal("0")))
