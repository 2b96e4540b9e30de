# users/tests/test_auth.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from branches.models import Branch

User = get_user_model()


class AuthFlowTests(TestCase):
    """
    GUARANTEES:
    - Self-registration always creates a plain employee
    - Login accepts email or username and returns a JWT pair
    - /me exposes branches and effective capabilities
    """

    def setUp(self):
        self.client = APIClient()

    def test_register_forces_employee_role(self):
        res = self.client.post(
            "/api/auth/register/",
            {"email": "new@example.com", "password": "secret123", "role": "admin"},
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        user = User.objects.get(email="new@example.com")
        self.assertEqual(user.role, "employee")
        self.assertEqual(user.username, "new")

    def test_register_duplicate_email(self):
        User.objects.create_user(email="taken@example.com", password="pass")

        res = self.client.post(
            "/api/auth/register/",
            {"email": "TAKEN@example.com", "password": "secret123"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_login_with_email_or_username(self):
        User.objects.create_user(email="chef@example.com", username="chef", password="secret123", role="chef")

        for identifier in ("chef@example.com", "CHEF"):
            res = self.client.post(
                "/api/auth/login/",
                {"identifier": identifier, "password": "secret123"},
                format="json",
            )
            self.assertEqual(res.status_code, 200, res.data)
            self.assertEqual(res.data["role"], "chef")
            self.assertIn("access", res.data)

    def test_login_bad_password(self):
        User.objects.create_user(email="chef@example.com", password="secret123")

        res = self.client.post(
            "/api/auth/login/",
            {"identifier": "chef@example.com", "password": "wrong"},
            format="json",
        )
        self.assertEqual(res.status_code, 401)

    def test_me(self):
        branch = Branch.objects.create(name="Downtown", code="DT")
        user = User.objects.create_user(email="boss@example.com", password="pass", role="manager")
        user.branches.add(branch)
        self.client.force_authenticate(user)

        res = self.client.get("/api/auth/me/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["branches"], [branch.id])
        self.assertIn("payroll.manage", res.data["capabilities"])
        self.assertNotIn("accounting.close", res.data["capabilities"])


class StaffDirectoryTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.manager = User.objects.create_user(email="boss@example.com", password="pass", role="manager")
        self.cook = User.objects.create_user(email="cook@example.com", password="pass", role="chef")

    def test_employee_forbidden(self):
        self.client.force_authenticate(self.cook)
        self.assertEqual(self.client.get("/api/auth/staff/").status_code, 403)

    def test_manager_sets_hourly_rate(self):
        self.client.force_authenticate(self.manager)

        res = self.client.patch(f"/api/auth/staff/{self.cook.pk}/", {"hourly_rate": "11.75"}, format="json")

        self.assertEqual(res.status_code, 200, res.data)
        self.cook.refresh_from_db()
        self.assertEqual(self.cook.hourly_rate, Decimal("11.75"))
