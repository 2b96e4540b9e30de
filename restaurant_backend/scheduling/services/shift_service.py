# scheduling/services/shift_service.py

"""
======================================================
PATH: scheduling/services/shift_service.py
======================================================
SHIFT SERVICE

Conflict rule: two non-cancelled shifts of the same user on the same date
conflict when start < other_end and end > other_start. Touching shifts
(09:00-13:00 and 13:00-17:00) do not conflict.

create_shift()       single shift, conflict checked
update_shift()       re-checks against every other shift of that user/date
cancel_shift()       status -> CANCELLED (frees the slot)
complete_shift()     status -> COMPLETED (counts towards payroll hours)
bulk_create_shifts() all-or-nothing, including conflicts inside the batch
week_schedule()      Monday-based week grouped per day + hours per employee
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from scheduling.models import Shift

logger = logging.getLogger(__name__)


class ScheduleError(ValueError):
    """Invalid shift request (400)."""


class ShiftConflictError(ScheduleError):
    """Overlapping shift for the same employee (409)."""

    def __init__(self, message: str, conflicting: Shift | None = None):
        super().__init__(message)
        self.conflicting = conflicting


EDITABLE_FIELDS = ("branch", "date", "start_time", "end_time", "role", "notes")


def week_start(on: date) -> date:
    return on - timedelta(days=on.weekday())


def find_conflict(*, user, on: date, start_time, end_time, exclude_id=None) -> Shift | None:
    qs = (
        Shift.objects.select_for_update()
        .filter(user=user, date=on)
        .exclude(status=Shift.Status.CANCELLED)
    )
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)

    for other in qs:
        if other.overlaps(start_time, end_time):
            return other
    return None


def _check_times(start_time, end_time):
    if start_time is None or end_time is None:
        raise ScheduleError("start_time and end_time are required")
    if end_time <= start_time:
        raise ScheduleError("end_time must be after start_time")


def _resolve_branch(user, branch):
    branch = branch or getattr(user, "default_branch", None)
    if branch is None:
        raise ScheduleError(f"User {user.pk} has no default branch and no branch was provided")
    return branch


def _save(shift: Shift) -> Shift:
    try:
        shift.save()
    except ValidationError as exc:
        raise ScheduleError("; ".join(exc.messages))
    return shift


@transaction.atomic
def create_shift(*, user, on: date, start_time, end_time, role: str, branch=None, notes: str = "", created_by=None) -> Shift:
    _check_times(start_time, end_time)
    branch = _resolve_branch(user, branch)

    conflict = find_conflict(user=user, on=on, start_time=start_time, end_time=end_time)
    if conflict:
        raise ShiftConflictError("Shift conflicts with an existing shift for this employee", conflict)

    shift = _save(
        Shift(
            user=user,
            branch=branch,
            date=on,
            start_time=start_time,
            end_time=end_time,
            role=role,
            notes=notes or "",
            created_by=created_by,
        )
    )
    logger.info("Shift %s created for %s on %s", shift.id, user.pk, on)
    return shift


@transaction.atomic
def update_shift(shift: Shift, **changes) -> Shift:
    locked = Shift.objects.select_for_update().get(pk=shift.pk)

    unknown = set(changes) - set(EDITABLE_FIELDS) - {"status"}
    if unknown:
        raise ScheduleError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

    for name, value in changes.items():
        setattr(locked, name, value)

    _check_times(locked.start_time, locked.end_time)

    if locked.status != Shift.Status.CANCELLED:
        conflict = find_conflict(
            user=locked.user,
            on=locked.date,
            start_time=locked.start_time,
            end_time=locked.end_time,
            exclude_id=locked.pk,
        )
        if conflict:
            raise ShiftConflictError("Updated shift conflicts with an existing shift", conflict)

    return _save(locked)


def cancel_shift(shift: Shift) -> Shift:
    if shift.status == Shift.Status.COMPLETED:
        raise ScheduleError("Completed shifts cannot be cancelled")
    return update_shift(shift, status=Shift.Status.CANCELLED)


def complete_shift(shift: Shift) -> Shift:
    if shift.status == Shift.Status.CANCELLED:
        raise ScheduleError("Cancelled shifts cannot be completed")
    return update_shift(shift, status=Shift.Status.COMPLETED)


@transaction.atomic
def bulk_create_shifts(items: list[dict], *, created_by=None) -> list[Shift]:
    """
    items: [{"user", "date", "start_time", "end_time", "role", "branch"?, "notes"?}]

    Every row is validated against the database and against the rows before
    it in the batch; any failure rolls the whole batch back.
    """
    if not items:
        raise ScheduleError("No shifts provided")

    pending: dict[tuple, list[tuple]] = defaultdict(list)
    created: list[Shift] = []

    for idx, item in enumerate(items, start=1):
        user = item["user"]
        on = item["date"]
        start_time, end_time = item["start_time"], item["end_time"]

        try:
            _check_times(start_time, end_time)
        except ScheduleError as exc:
            raise ScheduleError(f"Shift {idx}: {exc}")

        key = (user.pk, on)
        for other_start, other_end in pending[key]:
            if start_time < other_end and end_time > other_start:
                raise ShiftConflictError(f"Shift {idx} overlaps another shift in the same batch")
        pending[key].append((start_time, end_time))

        try:
            created.append(
                create_shift(
                    user=user,
                    on=on,
                    start_time=start_time,
                    end_time=end_time,
                    role=item.get("role", ""),
                    branch=item.get("branch"),
                    notes=item.get("notes", ""),
                    created_by=created_by,
                )
            )
        except ShiftConflictError as exc:
            raise ShiftConflictError(f"Shift {idx}: {exc}", exc.conflicting)
        except ScheduleError as exc:
            raise ScheduleError(f"Shift {idx}: {exc}")

    logger.info("Bulk created %s shifts", len(created))
    return created


@dataclass
class WeekSchedule:
    start_date: date
    end_date: date
    days: dict[date, list[Shift]] = field(default_factory=dict)
    employee_hours: dict[str, Decimal] = field(default_factory=dict)


def week_schedule(on: date, *, branch_ids: list[int] | None = None) -> WeekSchedule:
    start = week_start(on)
    end = start + timedelta(days=6)

    qs = (
        Shift.objects.select_related("user", "branch")
        .filter(date__gte=start, date__lte=end)
        .order_by("date", "start_time")
    )
    if branch_ids is not None:
        qs = qs.filter(branch_id__in=branch_ids)

    result = WeekSchedule(
        start_date=start,
        end_date=end,
        days={start + timedelta(days=i): [] for i in range(7)},
    )

    hours: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for shift in qs:
        result.days[shift.date].append(shift)
        if shift.status != Shift.Status.CANCELLED:
            hours[str(shift.user_id)] += shift.duration_hours

    result.employee_hours = dict(hours)
    return result
