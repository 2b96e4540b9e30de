# inventory/tests/test_food_cost.py

from datetime import date, datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from branches.models import Branch
from inventory.models import InventoryTransaction, Product, WasteLog
from inventory.services.exceptions import InventoryError
from inventory.services.food_cost_service import food_cost_analytics
from inventory.services.stock_service import apply_stock_change
from recipes.models import SalesReport

User = get_user_model()

DAY_1 = date(2024, 3, 4)
DAY_2 = date(2024, 3, 5)


def noon(day):
    return timezone.make_aware(datetime(day.year, day.month, day.day, 12), timezone.get_current_timezone())


class FoodCostTests(TestCase):
    """
    GUARANTEES:
    - Cost = purchases at their receipt cost + waste cost impact
    - Sales come from SUCCESS / THEORETICAL_ONLY sales reports only
    - Percentages are None when there are no sales
    - The branch filter applies to costs and sales alike
    """

    def setUp(self):
        self.downtown = Branch.objects.create(name="Downtown", code="DT")
        self.airport = Branch.objects.create(name="Airport", code="AP")
        self.flour = Product.objects.create(sku="FLOUR", name="Flour", unit="kg", cost=Decimal("2.0000"))

        self.purchase(self.downtown, "10", DAY_1)
        self.purchase(self.airport, "5", DAY_1)
        self.purchase(self.downtown, "100", date(2024, 3, 10))

        WasteLog.objects.create(
            product=self.flour,
            branch=self.downtown,
            quantity=Decimal("2.5"),
            reason=WasteLog.Reason.SPOILAGE,
            cost_impact=Decimal("5.00"),
            occurred_at=noon(DAY_2),
        )

        self.report(DAY_1, "50.00", SalesReport.Status.SUCCESS)
        self.report(DAY_2, "50.00", SalesReport.Status.THEORETICAL_ONLY)
        self.report(DAY_2, "999.00", SalesReport.Status.FAILED)

    def purchase(self, branch, qty, day):
        apply_stock_change(
            product=self.flour,
            branch=branch,
            delta=qty,
            transaction_type=InventoryTransaction.Type.PURCHASE,
            unit_cost=Decimal("2.0000"),
            occurred_at=noon(day),
        )

    def report(self, day, net, status):
        SalesReport.objects.create(branch=self.downtown, report_date=day, net_revenue=Decimal(net), status=status)

    def test_branch_summary_and_trend(self):
        data = food_cost_analytics(start_date=DAY_1, end_date=DAY_2, branch_ids=[self.downtown.id])

        self.assertEqual(
            data["summary"],
            {
                "total_purchase_cost": 20.0,
                "total_waste_cost": 5.0,
                "total_cost": 25.0,
                "total_sales": 100.0,
                "food_cost_pct": 25.0,
                "target_food_cost_pct": 30.0,
                "variance": -5.0,
            },
        )
        self.assertEqual(
            data["daily_trend"],
            [
                {"date": "2024-03-04", "purchase_cost": 20.0, "waste_cost": 0.0, "sales": 50.0, "food_cost_pct": 40.0},
                {"date": "2024-03-05", "purchase_cost": 0.0, "waste_cost": 5.0, "sales": 50.0, "food_cost_pct": 10.0},
            ],
        )

    def test_all_branches_and_custom_target(self):
        data = food_cost_analytics(start_date=DAY_1, end_date=DAY_2, target_pct=Decimal("40"))

        self.assertEqual(data["summary"]["total_purchase_cost"], 30.0)
        self.assertEqual(data["summary"]["food_cost_pct"], 35.0)
        self.assertEqual(data["summary"]["variance"], -5.0)

    def test_no_sales_leaves_percentages_empty(self):
        data = food_cost_analytics(start_date=DAY_1, end_date=DAY_2, branch_ids=[self.airport.id])

        self.assertEqual(data["summary"]["total_cost"], 10.0)
        self.assertIsNone(data["summary"]["food_cost_pct"])
        self.assertIsNone(data["summary"]["variance"])
        self.assertIsNone(data["daily_trend"][0]["food_cost_pct"])

    def test_dates_are_required(self):
        with self.assertRaises(InventoryError):
            food_cost_analytics(start_date=DAY_1, end_date=None)


class FoodCostApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.downtown = Branch.objects.create(name="Downtown", code="DT")
        self.manager = User.objects.create_user(email="boss@example.com", password="pass", role="manager")
        self.manager.branches.add(self.downtown)
        self.chef = User.objects.create_user(email="chef@example.com", password="pass", role="chef")
        self.chef.branches.add(self.downtown)

    def test_manager_gets_report(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get(
            "/api/inventory/analytics/food-cost/",
            {"start_date": "2024-03-01", "end_date": "2024-03-31", "branch_id": self.downtown.id},
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["period"], {"start_date": "2024-03-01", "end_date": "2024-03-31"})
        self.assertEqual(res.data["summary"]["total_cost"], 0.0)

    def test_missing_dates_is_400(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get("/api/inventory/analytics/food-cost/", {"start_date": "2024-03-01"})
        self.assertEqual(res.status_code, 400)

    def test_chef_cannot_view_report(self):
        self.client.force_authenticate(self.chef)
        res = self.client.get(
            "/api/inventory/analytics/food-cost/",
            {"start_date": "2024-03-01", "end_date": "2024-03-31"},
        )
        self.assertEqual(res.status_code, 403)
