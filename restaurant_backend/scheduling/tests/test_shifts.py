# scheduling/tests/test_shifts.py

from datetime import date, time
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from branches.models import Branch
from scheduling.models import Shift
from scheduling.services.shift_service import (
    ScheduleError,
    ShiftConflictError,
    bulk_create_shifts,
    cancel_shift,
    complete_shift,
    create_shift,
    update_shift,
    week_schedule,
    week_start,
)

User = get_user_model()

# Wednesday
DAY = date(2024, 5, 8)


class ShiftServiceTests(TestCase):
    """
    GUARANTEES:
    - Overlapping shifts for one employee on one day are refused
    - Touching shifts are allowed
    - Cancelled shifts free their slot
    - Bulk creation is all-or-nothing
    """

    def setUp(self):
        self.branch = Branch.objects.create(name="Downtown", code="DT")
        self.cook = User.objects.create_user(email="cook@example.com", password="pass", default_branch=self.branch)
        self.waiter = User.objects.create_user(email="waiter@example.com", password="pass", default_branch=self.branch)

    def _shift(self, user, start, end, on=DAY):
        return create_shift(user=user, on=on, start_time=time(start), end_time=time(end), role="Line")

    # --------------------------------------------------
    # Conflicts
    # --------------------------------------------------
    def test_overlap_rejected_with_conflicting_shift(self):
        first = self._shift(self.cook, 9, 13)

        with self.assertRaises(ShiftConflictError) as ctx:
            self._shift(self.cook, 12, 16)

        self.assertEqual(ctx.exception.conflicting, first)

    def test_touching_shifts_allowed(self):
        self._shift(self.cook, 9, 13)
        self._shift(self.cook, 13, 17)

        self.assertEqual(Shift.objects.filter(user=self.cook).count(), 2)

    def test_other_employee_and_other_day_do_not_conflict(self):
        self._shift(self.cook, 9, 13)
        self._shift(self.waiter, 9, 13)
        self._shift(self.cook, 9, 13, on=date(2024, 5, 9))

        self.assertEqual(Shift.objects.count(), 3)

    def test_cancelled_shift_frees_slot(self):
        first = self._shift(self.cook, 9, 13)
        cancel_shift(first)

        self._shift(self.cook, 10, 12)

    def test_branch_required(self):
        drifter = User.objects.create_user(email="drifter@example.com", password="pass")

        with self.assertRaises(ScheduleError):
            self._shift(drifter, 9, 13)

    def test_end_before_start(self):
        with self.assertRaises(ScheduleError):
            self._shift(self.cook, 13, 9)

    # --------------------------------------------------
    # Update + lifecycle
    # --------------------------------------------------
    def test_update_excludes_itself(self):
        shift = self._shift(self.cook, 9, 13)

        shift = update_shift(shift, end_time=time(14))

        self.assertEqual(shift.end_time, time(14))

    def test_update_into_conflict(self):
        self._shift(self.cook, 9, 13)
        later = self._shift(self.cook, 14, 18)

        with self.assertRaises(ShiftConflictError):
            update_shift(later, start_time=time(12))

    def test_update_rejects_unknown_fields(self):
        shift = self._shift(self.cook, 9, 13)

        with self.assertRaises(ScheduleError):
            update_shift(shift, user=self.waiter)

    def test_complete_and_cancel_rules(self):
        done = complete_shift(self._shift(self.cook, 9, 13))
        self.assertEqual(done.status, Shift.Status.COMPLETED)
        with self.assertRaises(ScheduleError):
            cancel_shift(done)

        cancelled = cancel_shift(self._shift(self.cook, 14, 18))
        with self.assertRaises(ScheduleError):
            complete_shift(cancelled)

    # --------------------------------------------------
    # Bulk
    # --------------------------------------------------
    def _item(self, user, start, end, on=DAY):
        return {"user": user, "date": on, "start_time": time(start), "end_time": time(end), "role": "Floor"}

    def test_bulk_creates_all(self):
        created = bulk_create_shifts(
            [self._item(self.cook, 9, 13), self._item(self.waiter, 9, 13)],
        )
        self.assertEqual(len(created), 2)

    def test_bulk_overlap_inside_batch_rolls_back(self):
        with self.assertRaises(ShiftConflictError) as ctx:
            bulk_create_shifts([self._item(self.cook, 9, 13), self._item(self.cook, 12, 15)])

        self.assertIn("Shift 2", str(ctx.exception))
        self.assertEqual(Shift.objects.count(), 0)

    def test_bulk_conflict_with_existing_rolls_back(self):
        self._shift(self.waiter, 9, 13)

        with self.assertRaises(ShiftConflictError):
            bulk_create_shifts([self._item(self.cook, 9, 13), self._item(self.waiter, 10, 11)])

        self.assertEqual(Shift.objects.count(), 1)

    # --------------------------------------------------
    # Week view
    # --------------------------------------------------
    def test_week_grouping_and_hours(self):
        self.assertEqual(week_start(DAY), date(2024, 5, 6))

        self._shift(self.cook, 9, 13, on=date(2024, 5, 6))
        self._shift(self.cook, 9, 12, on=date(2024, 5, 12))
        cancel_shift(self._shift(self.cook, 14, 18, on=date(2024, 5, 12)))
        self._shift(self.cook, 9, 17, on=date(2024, 5, 13))

        week = week_schedule(DAY)

        self.assertEqual(week.start_date, date(2024, 5, 6))
        self.assertEqual(week.end_date, date(2024, 5, 12))
        self.assertEqual(len(week.days), 7)
        self.assertEqual(len(week.days[date(2024, 5, 12)]), 2)
        self.assertEqual(week.employee_hours, {str(self.cook.id): Decimal("7.00")})


class ShiftApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.branch = Branch.objects.create(name="Downtown", code="DT")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.manager.branches.add(self.branch)
        self.cook = User.objects.create_user(
            email="cook@example.com", password="pass", role="chef", default_branch=self.branch
        )
        self.waiter = User.objects.create_user(
            email="waiter@example.com", password="pass", role="employee", default_branch=self.branch
        )

    def _create(self, user, start, end):
        return self.client.post(
            "/api/scheduling/shifts/",
            {
                "user_id": str(user.pk),
                "branch_id": self.branch.id,
                "date": DAY.isoformat(),
                "start_time": start,
                "end_time": end,
                "role": "Line",
            },
            format="json",
        )

    def test_conflict_returns_409(self):
        self.client.force_authenticate(self.manager)

        first = self._create(self.cook, "09:00", "13:00")
        self.assertEqual(first.status_code, 201, first.data)

        res = self._create(self.cook, "12:00", "15:00")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["conflicting_shift_id"], first.data["id"])

    def test_delete_cancels(self):
        self.client.force_authenticate(self.manager)
        shift_id = self._create(self.cook, "09:00", "13:00").data["id"]

        res = self.client.delete(f"/api/scheduling/shifts/{shift_id}/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(Shift.objects.get(id=shift_id).status, Shift.Status.CANCELLED)

    def test_staff_read_only_and_own_shifts(self):
        create_shift(user=self.cook, on=DAY, start_time=time(9), end_time=time(13), role="Line")
        create_shift(user=self.waiter, on=DAY, start_time=time(9), end_time=time(13), role="Floor")
        self.client.force_authenticate(self.waiter)

        res = self.client.get("/api/scheduling/shifts/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

        res = self._create(self.waiter, "14:00", "18:00")
        self.assertEqual(res.status_code, 403)

    def test_bulk_endpoint(self):
        self.client.force_authenticate(self.manager)
        row = {"branch_id": self.branch.id, "date": DAY.isoformat(), "role": "Line"}

        res = self.client.post(
            "/api/scheduling/shifts/bulk/",
            {
                "shifts": [
                    {**row, "user_id": str(self.cook.pk), "start_time": "09:00", "end_time": "13:00"},
                    {**row, "user_id": str(self.waiter.pk), "start_time": "09:00", "end_time": "13:00"},
                ]
            },
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(len(res.data["shifts"]), 2)

    def test_week_endpoint(self):
        create_shift(user=self.cook, on=DAY, start_time=time(9), end_time=time(13), role="Line")
        self.client.force_authenticate(self.manager)

        res = self.client.get("/api/scheduling/shifts/week/", {"date": DAY.isoformat()})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["start_date"], "2024-05-06")
        self.assertEqual([d["weekday"] for d in res.data["days"]][0], "Monday")
        self.assertEqual(res.data["employee_hours"], {str(self.cook.id): 4.0})
