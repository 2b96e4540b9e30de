# inventory/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.services.chart_seed import seed_restaurant_chart
from branches.models import Branch
from inventory.models import InventoryLevel, InventoryTransaction, Product
from inventory.services.stock_service import apply_stock_change

User = get_user_model()


class InventoryApiTests(TestCase):
    """
    GUARANTEES:
    - Stock adjustments require the adjust capability
    - Staff can only act on branches they are assigned to
    - Domain errors come back as 400 with a detail message
    """

    def setUp(self):
        seed_restaurant_chart()
        self.client = APIClient()
        self.downtown = Branch.objects.create(name="Downtown", code="DT")
        self.airport = Branch.objects.create(name="Airport", code="AP")

        self.chef = User.objects.create_user(email="chef@example.com", password="pass", role="chef")
        self.chef.branches.add(self.downtown)
        self.cashier = User.objects.create_user(email="till@example.com", password="pass", role="cashier")
        self.cashier.branches.add(self.downtown)

        self.milk = Product.objects.create(sku="MILK", name="Milk", unit="l", cost=Decimal("1.5000"))
        apply_stock_change(
            product=self.milk,
            branch=self.downtown,
            delta="10",
            transaction_type=InventoryTransaction.Type.ADJUSTMENT,
        )

    def _waste(self, branch, quantity="1"):
        return self.client.post(
            "/api/inventory/waste/",
            {"product_id": self.milk.id, "branch_id": branch.id, "quantity": quantity, "reason": "EXPIRED"},
            format="json",
        )

    def test_chef_records_waste(self):
        self.client.force_authenticate(self.chef)

        res = self._waste(self.downtown)

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(
            InventoryLevel.objects.get(product=self.milk, branch=self.downtown).quantity_on_hand,
            Decimal("9"),
        )

    def test_unassigned_branch_forbidden(self):
        self.client.force_authenticate(self.chef)
        self.assertEqual(self._waste(self.airport).status_code, 403)

    def test_cashier_cannot_adjust(self):
        self.client.force_authenticate(self.cashier)
        self.assertEqual(self._waste(self.downtown).status_code, 403)

    def test_insufficient_stock_is_400(self):
        self.client.force_authenticate(self.chef)

        res = self._waste(self.downtown, quantity="50")

        self.assertEqual(res.status_code, 400)
        self.assertIn("Insufficient stock", res.data["detail"])

    def test_levels_are_branch_scoped(self):
        apply_stock_change(
            product=self.milk,
            branch=self.airport,
            delta="3",
            transaction_type=InventoryTransaction.Type.ADJUSTMENT,
        )
        self.client.force_authenticate(self.cashier)

        res = self.client.get("/api/inventory/levels/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual([row["branch"] for row in res.data["results"]], [self.downtown.id])
