# branches/tests/test_branch_context.py

from django.contrib.auth import get_user_model
from django.test import RequestFactory, SimpleTestCase, TestCase
from rest_framework.test import APIClient

from branches.context import (
    ALL_BRANCHES,
    build_branch_filter,
    has_access_to_branch,
    parse_branch_selection,
    resolve_branch_ids,
)
from branches.models import Branch

User = get_user_model()


class BranchSelectionParsingTests(SimpleTestCase):
    def test_cookie_list(self):
        self.assertEqual(parse_branch_selection('["1", "3", "1"]'), ["1", "3"])

    def test_url_encoded_cookie(self):
        self.assertEqual(parse_branch_selection("%5B%222%22%5D"), ["2"])

    def test_scalar_and_empty(self):
        self.assertEqual(parse_branch_selection("4"), ["4"])
        self.assertEqual(parse_branch_selection(""), [ALL_BRANCHES])
        self.assertEqual(parse_branch_selection("[]"), [ALL_BRANCHES])

    def test_malformed_falls_back_to_all(self):
        self.assertEqual(parse_branch_selection("not json"), [ALL_BRANCHES])
        self.assertEqual(parse_branch_selection('{"a": 1}'), [ALL_BRANCHES])

    def test_filter_kwargs(self):
        self.assertEqual(build_branch_filter([ALL_BRANCHES]), {})
        self.assertEqual(build_branch_filter(["1", "x", "2"]), {"branch_id__in": [1, 2]})
        self.assertEqual(build_branch_filter(["5"], field="from_branch_id"), {"from_branch_id__in": [5]})


class BranchVisibilityTests(TestCase):
    """
    GUARANTEES:
    - Admins see whatever they select; "all" means no restriction (None)
    - Everyone else is clamped to their assigned branches
    """

    def setUp(self):
        self.factory = RequestFactory()
        self.downtown = Branch.objects.create(name="Downtown", code="DT")
        self.airport = Branch.objects.create(name="Airport", code="AP")
        self.kitchen = Branch.objects.create(name="Central Kitchen", code="CK", branch_type="KITCHEN")

        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.manager = User.objects.create_user(
            email="manager@example.com", password="pass", role="manager", default_branch=self.kitchen
        )
        self.manager.branches.add(self.downtown)

    def _request(self, user, header=None):
        extra = {"HTTP_X_BRANCH_IDS": header} if header else {}
        request = self.factory.get("/", **extra)
        request.user = user
        return request

    def test_admin_unrestricted(self):
        self.assertIsNone(resolve_branch_ids(self._request(self.admin)))
        self.assertEqual(
            resolve_branch_ids(self._request(self.admin, f"{self.airport.id}")),
            [self.airport.id],
        )

    def test_staff_clamped_to_assignment(self):
        self.assertEqual(
            resolve_branch_ids(self._request(self.manager)),
            sorted([self.downtown.id, self.kitchen.id]),
        )
        self.assertEqual(
            resolve_branch_ids(self._request(self.manager, f"{self.downtown.id},{self.airport.id}")),
            [self.downtown.id],
        )

    def test_cookie_wins_over_header(self):
        request = self._request(self.admin, f"{self.downtown.id}")
        request.COOKIES["selectedBranches"] = f'["{self.airport.id}"]'

        self.assertEqual(resolve_branch_ids(request), [self.airport.id])

    def test_has_access(self):
        self.assertTrue(has_access_to_branch(self.admin, self.airport.id))
        self.assertTrue(has_access_to_branch(self.manager, self.kitchen.id))
        self.assertFalse(has_access_to_branch(self.manager, self.airport.id))
        self.assertFalse(has_access_to_branch(self.manager, "abc"))


class BranchApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.downtown = Branch.objects.create(name="Downtown", code="DT")
        self.airport = Branch.objects.create(name="Airport", code="AP")
        self.cook = User.objects.create_user(email="cook@example.com", password="pass", role="chef")
        self.cook.branches.add(self.downtown)

    def test_list_shows_assigned_only(self):
        self.client.force_authenticate(self.cook)

        res = self.client.get("/api/branches/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual([b["code"] for b in res.data["results"]], ["DT"])

    def test_select_sets_cookie(self):
        self.client.force_authenticate(self.cook)

        res = self.client.post("/api/branches/select/", {"branch_ids": [str(self.downtown.id)]}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertIn("selectedBranches", res.cookies)

    def test_select_denied_branch(self):
        self.client.force_authenticate(self.cook)

        res = self.client.post("/api/branches/select/", {"branch_ids": [str(self.airport.id)]}, format="json")

        self.assertEqual(res.status_code, 403)

    def test_only_admin_creates(self):
        self.client.force_authenticate(self.cook)

        res = self.client.post("/api/branches/", {"name": "Mall", "code": "ML"}, format="json")

        self.assertEqual(res.status_code, 403)
