# recipes/tests/test_sales_import.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.journal import JournalEntry
from branches.models import Branch
from inventory.models import InventoryLevel, InventoryTransaction, Product
from recipes.models import PosMenuItem, ProductMapping, SalesReport
from recipes.services.sales_import import (
    AUDIT_MISSING_RECIPE,
    AUDIT_OK,
    AUDIT_ZERO_COST,
    SalesImportError,
    analyze_sales_file,
    analyze_sales_rows,
    execute_sales_import,
    parse_money,
)

User = get_user_model()

SALES_CSV = (
    b"Date,Order Items,Order Value\n"
    b'2024-03-05,"2 Burger [1 Add Cheese]",$18.00\n'
    b"2024-03-05,1 Fries,3.00\n"
)


def sales_upload(content=SALES_CSV, name="pos_export.csv"):
    return SimpleUploadedFile(name, content, content_type="text/csv")


class SalesImportTests(TestCase):
    """
    GUARANTEES:
    - Analysis never writes anything
    - Expected revenue multiplies modifier prices by item quantity
    - Execution writes one report and one SALE movement per product
    - Sales deductions may drive stock negative
    - The import does not touch the ledger
    """

    def setUp(self):
        self.branch = Branch.objects.create(name="Downtown", code="DT")
        self.user = User.objects.create_user(email="till@example.com", password="pass", role="cashier")
        self.user.branches.add(self.branch)

        self.patty = Product.objects.create(sku="PATTY", name="Patty", cost=Decimal("2.0000"))
        self.cheese = Product.objects.create(sku="CHEESE", name="Cheese Slice", cost=Decimal("0.3000"))

        ProductMapping.objects.create(pos_string="Burger", product=self.patty, quantity=Decimal("1"))
        ProductMapping.objects.create(pos_string="Add Cheese", product=self.cheese, quantity=Decimal("1"))

        PosMenuItem.objects.create(pos_string="Burger", selling_price=Decimal("8.00"))
        PosMenuItem.objects.create(pos_string="Add Cheese", selling_price=Decimal("1.00"))
        PosMenuItem.objects.create(pos_string="Fries", selling_price=Decimal("3.00"))

    # --------------------------------------------------
    # Analysis
    # --------------------------------------------------
    def test_analysis_figures(self):
        analysis = analyze_sales_file(sales_upload())

        self.assertEqual(analysis.report_date, date(2024, 3, 5))
        self.assertEqual(analysis.row_count, 2)
        self.assertEqual(analysis.declared_revenue, Decimal("21.00"))
        self.assertEqual(analysis.expected_revenue, Decimal("21.00"))
        self.assertEqual(analysis.revenue_variance, Decimal("0.00"))
        self.assertEqual(analysis.total_cogs, Decimal("4.60"))
        self.assertEqual(analysis.deductions, {self.patty.id: Decimal("2"), self.cheese.id: Decimal("2")})

        statuses = {a["pos_name"]: a["status"] for a in analysis.audit}
        self.assertEqual(
            statuses,
            {"Burger": AUDIT_OK, "Add Cheese": AUDIT_OK, "Fries": AUDIT_MISSING_RECIPE},
        )

        self.assertEqual(SalesReport.objects.count(), 0)
        self.assertEqual(InventoryTransaction.objects.count(), 0)

    def test_zero_cost_product_flagged(self):
        self.cheese.cost = Decimal("0")
        self.cheese.save()

        analysis = analyze_sales_rows([{"order_items": "1 Burger [1 Add Cheese]", "order_value": "9"}])

        statuses = {a["pos_name"]: a["status"] for a in analysis.audit}
        self.assertEqual(statuses["Add Cheese"], AUDIT_ZERO_COST)

    def test_date_falls_back_to_today(self):
        analysis = analyze_sales_rows([{"order_items": "1 Fries"}])
        self.assertEqual(analysis.date_source, "System today")

    def test_file_without_sales_rows(self):
        with self.assertRaises(SalesImportError):
            analyze_sales_rows([{"order_items": "", "order_value": "3"}])

    def test_parse_money(self):
        self.assertEqual(parse_money("JOD 1,250.50"), Decimal("1250.50"))
        self.assertEqual(parse_money(""), Decimal("0"))
        self.assertEqual(parse_money("n/a"), Decimal("0"))
        self.assertEqual(parse_money(4), Decimal("4"))

    # --------------------------------------------------
    # Execution
    # --------------------------------------------------
    def test_execute_deducts_stock_and_records_report(self):
        analysis = analyze_sales_file(sales_upload())

        report = execute_sales_import(analysis, branch=self.branch, user=self.user, file_name="pos_export.csv")

        self.assertEqual(report.status, SalesReport.Status.SUCCESS)
        self.assertEqual(report.net_revenue, Decimal("21.00"))
        self.assertEqual(report.total_cogs, Decimal("4.60"))

        level = InventoryLevel.objects.get(product=self.patty, branch=self.branch)
        self.assertEqual(level.quantity_on_hand, Decimal("-2"))

        sales = InventoryTransaction.objects.filter(reference=f"SALES:{report.id}")
        self.assertEqual(sales.count(), 2)
        self.assertTrue(all(t.transaction_type == InventoryTransaction.Type.SALE for t in sales))
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_unmapped_sales_are_theoretical_only(self):
        analysis = analyze_sales_rows([{"order_items": "2 Fries", "order_value": "6"}])

        report = execute_sales_import(analysis, branch=self.branch)

        self.assertEqual(report.status, SalesReport.Status.THEORETICAL_ONLY)
        self.assertEqual(InventoryTransaction.objects.count(), 0)

    # --------------------------------------------------
    # API
    # --------------------------------------------------
    def test_api_analyze_then_execute(self):
        client = APIClient()
        client.force_authenticate(self.user)

        res = client.post("/api/recipes/sales-import/", {"file": sales_upload()}, format="multipart")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertFalse(res.data["executed"])
        self.assertEqual(res.data["financials"]["total_cogs"], 4.6)

        res = client.post(
            "/api/recipes/sales-import/",
            {"file": sales_upload(), "execute": "true", "branch_id": self.branch.id},
            format="multipart",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertTrue(SalesReport.objects.filter(id=res.data["report_id"]).exists())

    def test_api_rejects_bad_file(self):
        client = APIClient()
        client.force_authenticate(self.user)

        res = client.post(
            "/api/recipes/sales-import/",
            {"file": sales_upload(b"x", name="export.pdf")},
            format="multipart",
        )

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["detail"], "File Parse Error")
