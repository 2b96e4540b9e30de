# scheduling/tests/test_attendance.py

from datetime import datetime, time, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from branches.models import Branch
from scheduling.models import TimeEntry
from scheduling.services.attendance_service import (
    AttendanceError,
    OutsideGeofenceError,
    clock_in,
    clock_out,
    clock_status,
    distance_metres,
    hours_from_time_entries,
)

User = get_user_model()

# Branch pin and two points roughly 35 m and 1.4 km north of it.
PIN = (Decimal("25.276987"), Decimal("55.296249"))
NEAR = (Decimal("25.277300"), Decimal("55.296249"))
FAR = (Decimal("25.290000"), Decimal("55.296249"))


class DistanceTests(SimpleTestCase):
    def test_same_point_is_zero(self):
        self.assertEqual(distance_metres(*PIN, *PIN), 0)

    def test_short_and_long_distances(self):
        self.assertAlmostEqual(distance_metres(*PIN, *NEAR), 34.8, delta=1)
        self.assertAlmostEqual(distance_metres(*PIN, *FAR), 1447, delta=5)


class AttendanceServiceTests(TestCase):
    """
    GUARANTEES:
    - One open entry per employee
    - Geofenced branches require a location within geo_radius
    - Clock-out stores worked hours rounded to cents
    - Only closed entries count towards worked hours
    """

    def setUp(self):
        self.branch = Branch.objects.create(
            name="Marina",
            code="MR",
            latitude=PIN[0],
            longitude=PIN[1],
            geo_radius=100,
        )
        self.open_branch = Branch.objects.create(name="Depot", code="DP")
        self.cook = User.objects.create_user(email="cook@example.com", password="pass", default_branch=self.branch)
        self.tz = timezone.get_current_timezone()

    def _at(self, day, hour, minute=0):
        return timezone.make_aware(datetime.combine(day, time(hour, minute)), self.tz)

    # --------------------------------------------------
    # Clock in / out
    # --------------------------------------------------
    def test_clock_in_and_out_records_hours(self):
        day = timezone.localdate() - timedelta(days=1)

        entry = clock_in(user=self.cook, branch=self.branch, latitude=NEAR[0], longitude=NEAR[1], at=self._at(day, 8))
        self.assertTrue(entry.is_open)
        self.assertEqual(entry.clock_in_source, TimeEntry.Source.APP)

        entry = clock_out(user=self.cook, latitude=NEAR[0], longitude=NEAR[1], source="kiosk", at=self._at(day, 16, 30))

        self.assertFalse(entry.is_open)
        self.assertEqual(entry.total_hours, Decimal("8.50"))
        self.assertEqual(entry.clock_out_source, "kiosk")

    def test_second_clock_in_is_refused(self):
        clock_in(user=self.cook, branch=self.open_branch)

        with self.assertRaises(AttendanceError):
            clock_in(user=self.cook, branch=self.open_branch)

        self.assertEqual(TimeEntry.objects.filter(user=self.cook).count(), 1)

    def test_clock_out_without_open_entry_is_refused(self):
        with self.assertRaises(AttendanceError):
            clock_out(user=self.cook)

    def test_unknown_source_is_rejected(self):
        with self.assertRaises(AttendanceError):
            clock_in(user=self.cook, branch=self.open_branch, source="carrier-pigeon")

    # --------------------------------------------------
    # Geofence
    # --------------------------------------------------
    def test_geofenced_branch_requires_location(self):
        with self.assertRaises(AttendanceError) as ctx:
            clock_in(user=self.cook, branch=self.branch)

        self.assertNotIsInstance(ctx.exception, OutsideGeofenceError)

    def test_too_far_is_refused_with_distance(self):
        with self.assertRaises(OutsideGeofenceError) as ctx:
            clock_in(user=self.cook, branch=self.branch, latitude=FAR[0], longitude=FAR[1])

        self.assertEqual(ctx.exception.allowed_radius, 100)
        self.assertGreater(ctx.exception.distance, 1000)
        self.assertFalse(TimeEntry.objects.exists())

    def test_clock_out_is_checked_against_entry_branch(self):
        clock_in(user=self.cook, branch=self.branch, latitude=NEAR[0], longitude=NEAR[1])

        with self.assertRaises(OutsideGeofenceError):
            clock_out(user=self.cook, latitude=FAR[0], longitude=FAR[1])

        self.assertTrue(TimeEntry.objects.get(user=self.cook).is_open)

    def test_branch_without_pin_accepts_any_location(self):
        entry = clock_in(user=self.cook, branch=self.open_branch, latitude=FAR[0], longitude=FAR[1])
        self.assertTrue(entry.is_open)

    # --------------------------------------------------
    # Status + hours
    # --------------------------------------------------
    def test_status_reports_open_entry_then_last_entry(self):
        start = timezone.now() - timedelta(hours=2)
        clock_in(user=self.cook, branch=self.open_branch, at=start)

        status = clock_status(self.cook, now=start + timedelta(hours=2, minutes=15))
        self.assertTrue(status["is_clocked_in"])
        self.assertEqual(status["elapsed_hours"], Decimal("2.25"))

        entry = clock_out(user=self.cook)
        status = clock_status(self.cook)
        self.assertFalse(status["is_clocked_in"])
        self.assertEqual(status["last_entry"], entry)

    def test_hours_count_closed_entries_in_period_only(self):
        day = timezone.localdate() - timedelta(days=3)
        clock_in(user=self.cook, branch=self.open_branch, at=self._at(day, 9))
        clock_out(user=self.cook, at=self._at(day, 12))
        clock_in(user=self.cook, branch=self.open_branch, at=self._at(day, 14))
        clock_out(user=self.cook, at=self._at(day, 15, 30))

        # Different day, and a still-open entry.
        clock_in(user=self.cook, branch=self.open_branch, at=self._at(day + timedelta(days=1), 9))
        clock_out(user=self.cook, at=self._at(day + timedelta(days=1), 10))
        clock_in(user=self.cook, branch=self.open_branch, at=self._at(day, 20))

        self.assertEqual(hours_from_time_entries(self.cook, day, day), Decimal("4.50"))
        self.assertIsNone(hours_from_time_entries(self.cook, day - timedelta(days=7), day - timedelta(days=6)))


class AttendanceApiTests(TestCase):
    def setUp(self):
        self.branch = Branch.objects.create(
            name="Marina",
            code="MR",
            latitude=PIN[0],
            longitude=PIN[1],
            geo_radius=100,
        )
        self.other = Branch.objects.create(name="Airport", code="AP")
        self.cook = User.objects.create_user(email="cook@example.com", password="pass", default_branch=self.branch)
        self.waiter = User.objects.create_user(email="waiter@example.com", password="pass", default_branch=self.branch)
        self.manager = User.objects.create_user(email="boss@example.com", password="pass", role="manager")
        self.manager.branches.add(self.branch)
        self.client = APIClient()

    def _clock(self, user, payload):
        self.client.force_authenticate(user)
        return self.client.post("/api/scheduling/clock/", payload, format="json")

    def test_clock_in_status_and_out(self):
        res = self._clock(
            self.cook,
            {"action": "in", "branch_id": self.branch.id, "latitude": str(NEAR[0]), "longitude": str(NEAR[1])},
        )
        self.assertEqual(res.status_code, 201)
        self.assertTrue(res.data["is_open"])

        res = self.client.get("/api/scheduling/clock/status/")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["is_clocked_in"])

        res = self._clock(self.cook, {"action": "out", "latitude": str(NEAR[0]), "longitude": str(NEAR[1])})
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["is_open"])

    def test_too_far_is_403_with_distance(self):
        res = self._clock(
            self.cook,
            {"action": "in", "branch_id": self.branch.id, "latitude": str(FAR[0]), "longitude": str(FAR[1])},
        )

        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["allowed_radius"], 100)
        self.assertIn("distance", res.data)

    def test_unassigned_branch_is_403(self):
        res = self._clock(self.cook, {"action": "in", "branch_id": self.other.id})
        self.assertEqual(res.status_code, 403)

    def test_clock_in_requires_branch(self):
        res = self._clock(self.cook, {"action": "in"})
        self.assertEqual(res.status_code, 400)

    def test_double_clock_in_is_400(self):
        payload = {"action": "in", "branch_id": self.branch.id, "latitude": str(NEAR[0]), "longitude": str(NEAR[1])}
        self._clock(self.cook, payload)

        res = self._clock(self.cook, payload)
        self.assertEqual(res.status_code, 400)

    def test_staff_see_own_entries_and_manager_sees_all(self):
        clock_in(user=self.cook, branch=self.branch, latitude=NEAR[0], longitude=NEAR[1])
        clock_in(user=self.waiter, branch=self.branch, latitude=NEAR[0], longitude=NEAR[1])

        self.client.force_authenticate(self.cook)
        res = self.client.get("/api/scheduling/clock/")
        self.assertEqual(res.data["count"], 1)

        self.client.force_authenticate(self.manager)
        res = self.client.get("/api/scheduling/clock/?active_only=true")
        self.assertEqual(res.data["count"], 2)
