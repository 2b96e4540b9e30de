# inventory/tests/test_stock_workflows.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings

from accounting.models.journal import JournalEntry
from accounting.models.vendor import Vendor
from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_account
from accounting.services.balance_service import get_account_balance
from accounting.services.chart_seed import seed_restaurant_chart
from branches.models import Branch
from inventory.models import InventoryLevel, InventoryTransaction, Product, PurchaseInvoice, TransferRequest
from inventory.services.exceptions import InsufficientStockError, InventoryError
from inventory.services.par_service import par_suggestions
from inventory.services.product_import import import_products
from inventory.services.purchasing_service import (
    create_purchase_invoice,
    receive_purchase_invoice,
    weighted_average_cost,
)
from inventory.services.stock_count_service import submit_stock_count
from inventory.services.stock_service import apply_stock_change
from inventory.services.transfer_service import cancel_transfer, create_transfer, receive_transfer, send_transfer
from inventory.services.waste_service import record_waste, waste_summary

User = get_user_model()


class InventoryTestMixin:
    def setUp(self):
        seed_restaurant_chart()
        self.user = User.objects.create_user(email="chef@example.com", password="pass", role="chef")
        self.downtown = Branch.objects.create(name="Downtown", code="DT")
        self.airport = Branch.objects.create(name="Airport", code="AP")
        self.flour = Product.objects.create(sku="FLOUR", name="Flour", unit="kg", cost=Decimal("2.0000"))
        self.vendor = Vendor.objects.create(name="Mill Co")

    def stock(self, product, branch, qty):
        return apply_stock_change(
            product=product,
            branch=branch,
            delta=qty,
            transaction_type=InventoryTransaction.Type.ADJUSTMENT,
        )

    def on_hand(self, product, branch):
        return InventoryLevel.objects.get(product=product, branch=branch).quantity_on_hand


class StockChangeTests(InventoryTestMixin, TestCase):
    """
    GUARANTEES:
    - Every change writes one movement row
    - Stock cannot go negative unless explicitly allowed
    - Zero deltas are rejected
    """

    def test_change_creates_level_and_movement(self):
        result = self.stock(self.flour, self.downtown, "10")

        self.assertEqual(result.quantity_before, Decimal("0"))
        self.assertEqual(result.quantity_after, Decimal("10"))
        self.assertEqual(self.on_hand(self.flour, self.downtown), Decimal("10"))
        self.assertEqual(InventoryTransaction.objects.count(), 1)

    def test_negative_blocked_by_default(self):
        self.stock(self.flour, self.downtown, "2")

        with self.assertRaises(InsufficientStockError) as ctx:
            self.stock(self.flour, self.downtown, "-3")

        self.assertEqual(ctx.exception.available, Decimal("2.000"))
        self.assertEqual(self.on_hand(self.flour, self.downtown), Decimal("2"))

    def test_negative_allowed_for_sales(self):
        result = apply_stock_change(
            product=self.flour,
            branch=self.downtown,
            delta="-1.5",
            transaction_type=InventoryTransaction.Type.SALE,
            allow_negative=True,
        )
        self.assertEqual(result.quantity_after, Decimal("-1.5"))

    def test_zero_delta_rejected(self):
        with self.assertRaises(InventoryError):
            self.stock(self.flour, self.downtown, "0")


class PurchaseReceivingTests(InventoryTestMixin, TestCase):
    """
    GUARANTEES:
    - Receiving adds stock and blends cost into a weighted average
    - Dr Inventory / Cr Accounts Payable for the invoice total
    - An invoice can only be received once
    """

    def test_weighted_average_cost(self):
        cost = weighted_average_cost(
            on_hand=Decimal("10"),
            current_cost=Decimal("2"),
            quantity=Decimal("10"),
            unit_cost=Decimal("4"),
        )
        self.assertEqual(cost, Decimal("3.0000"))

    def test_negative_on_hand_counts_as_zero(self):
        cost = weighted_average_cost(
            on_hand=Decimal("-5"),
            current_cost=Decimal("2"),
            quantity=Decimal("10"),
            unit_cost=Decimal("4"),
        )
        self.assertEqual(cost, Decimal("4.0000"))

    def test_receive_updates_stock_cost_and_ledger(self):
        self.stock(self.flour, self.downtown, "10")
        invoice = create_purchase_invoice(
            vendor=self.vendor,
            branch=self.downtown,
            invoice_number="INV-1",
            items=[{"product": self.flour, "quantity": "10", "unit_cost": "4.00"}],
            user=self.user,
        )

        result = receive_purchase_invoice(invoice, user=self.user)

        self.flour.refresh_from_db()
        self.assertEqual(self.flour.cost, Decimal("3.0000"))
        self.assertEqual(self.on_hand(self.flour, self.downtown), Decimal("20"))
        self.assertEqual(result.total_amount, Decimal("40.00"))

        entry = result.journal_entry
        self.assertEqual(entry.reference, f"PURCHASE:{invoice.id}")
        self.assertEqual(get_account_balance(resolve_account(keys.INVENTORY)), Decimal("40.00"))
        self.assertEqual(get_account_balance(resolve_account(keys.ACCOUNTS_PAYABLE)), Decimal("40.00"))

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, PurchaseInvoice.Status.RECEIVED)
        with self.assertRaises(InventoryError):
            receive_purchase_invoice(invoice, user=self.user)

    @override_settings(ACCOUNTING_POSTING_ENABLED=False)
    def test_receive_without_posting(self):
        invoice = create_purchase_invoice(
            vendor=self.vendor,
            branch=self.downtown,
            invoice_number="INV-2",
            items=[{"product": self.flour, "quantity": "1", "unit_cost": "2"}],
        )

        result = receive_purchase_invoice(invoice)

        self.assertIsNone(result.journal_entry)
        self.assertEqual(JournalEntry.objects.count(), 0)
        self.assertEqual(self.on_hand(self.flour, self.downtown), Decimal("1"))

    def test_duplicate_invoice_number_rejected(self):
        items = [{"product": self.flour, "quantity": "1", "unit_cost": "2"}]
        create_purchase_invoice(vendor=self.vendor, branch=self.downtown, invoice_number="INV-3", items=items)

        with self.assertRaises(InventoryError):
            create_purchase_invoice(vendor=self.vendor, branch=self.downtown, invoice_number="INV-3", items=items)


class WasteTests(InventoryTestMixin, TestCase):
    """
    GUARANTEES:
    - Waste reduces stock and posts its cost
    - Staff meals post to their own expense account
    - Insufficient stock leaves nothing behind
    """

    def test_waste_posts_at_cost(self):
        self.stock(self.flour, self.downtown, "5")

        log = record_waste(product=self.flour, branch=self.downtown, quantity="2", reason="SPOILAGE", user=self.user)

        self.assertEqual(log.cost_impact, Decimal("4.00"))
        self.assertEqual(self.on_hand(self.flour, self.downtown), Decimal("3"))
        debit = log.journal_entry.ledger_entries.get(entry_type="DEBIT")
        self.assertEqual(debit.account, resolve_account(keys.WASTE_EXPENSE))

    def test_staff_meal_uses_staff_meal_account(self):
        self.stock(self.flour, self.downtown, "5")

        log = record_waste(product=self.flour, branch=self.downtown, quantity="1", reason="STAFF_MEAL")

        debit = log.journal_entry.ledger_entries.get(entry_type="DEBIT")
        self.assertEqual(debit.account, resolve_account(keys.STAFF_MEAL_EXPENSE))

    def test_insufficient_stock_rolls_back(self):
        self.stock(self.flour, self.downtown, "1")

        with self.assertRaises(InsufficientStockError):
            record_waste(product=self.flour, branch=self.downtown, quantity="2", reason="DAMAGE")

        self.assertEqual(self.flour.waste_logs.count(), 0)
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_invalid_reason(self):
        with self.assertRaises(InventoryError):
            record_waste(product=self.flour, branch=self.downtown, quantity="1", reason="LOST")

    def test_summary_groups_by_reason(self):
        self.stock(self.flour, self.downtown, "10")
        record_waste(product=self.flour, branch=self.downtown, quantity="1", reason="SPOILAGE")
        record_waste(product=self.flour, branch=self.downtown, quantity="2", reason="SPOILAGE")

        summary = waste_summary()

        self.assertEqual(summary["by_reason"]["SPOILAGE"]["count"], 2)
        self.assertEqual(summary["by_reason"]["SPOILAGE"]["cost"], 6.0)
        self.assertEqual(summary["summary"]["total_cost"], 6.0)


class TransferTests(InventoryTestMixin, TestCase):
    """
    GUARANTEES:
    - Send removes stock at the source; receive adds it at the destination
    - Receiving moves inventory value between branch slices
    - Only requested transfers can be cancelled
    """

    def setUp(self):
        super().setUp()
        self.stock(self.flour, self.downtown, "10")

    def test_send_and_receive(self):
        transfer = create_transfer(
            from_branch=self.downtown,
            to_branch=self.airport,
            items=[{"product": self.flour, "quantity": "4"}],
            user=self.user,
        )

        send_transfer(transfer, user=self.user)
        self.assertEqual(self.on_hand(self.flour, self.downtown), Decimal("6"))

        transfer = receive_transfer(transfer, user=self.user)
        self.assertEqual(transfer.status, TransferRequest.Status.RECEIVED)
        self.assertEqual(self.on_hand(self.flour, self.airport), Decimal("4"))

        inventory = resolve_account(keys.INVENTORY)
        self.assertEqual(get_account_balance(inventory, branch_ids=[self.airport.id]), Decimal("8.00"))
        self.assertEqual(get_account_balance(inventory, branch_ids=[self.downtown.id]), Decimal("-8.00"))
        self.assertEqual(get_account_balance(inventory), Decimal("0.00"))

    def test_same_branch_rejected(self):
        with self.assertRaises(InventoryError):
            create_transfer(
                from_branch=self.downtown,
                to_branch=self.downtown,
                items=[{"product": self.flour, "quantity": "1"}],
            )

    def test_receive_requires_send(self):
        transfer = create_transfer(
            from_branch=self.downtown,
            to_branch=self.airport,
            items=[{"product": self.flour, "quantity": "1"}],
        )
        with self.assertRaises(InventoryError):
            receive_transfer(transfer)

    def test_cancel_only_when_requested(self):
        transfer = create_transfer(
            from_branch=self.downtown,
            to_branch=self.airport,
            items=[{"product": self.flour, "quantity": "1"}],
        )
        send_transfer(transfer)

        with self.assertRaises(InventoryError):
            cancel_transfer(transfer)


class StockCountTests(InventoryTestMixin, TestCase):
    """
    GUARANTEES:
    - Counted quantity becomes the new on-hand
    - Shrinkage posts Dr Shrinkage / Cr Inventory; overage the reverse
    """

    def test_shrinkage(self):
        self.stock(self.flour, self.downtown, "10")

        result = submit_stock_count(
            branch=self.downtown,
            counts=[{"product": self.flour, "counted_quantity": "7"}],
            user=self.user,
        )

        self.assertEqual(result.lines_adjusted, 1)
        self.assertEqual(result.net_value, Decimal("6.00"))
        self.assertEqual(self.on_hand(self.flour, self.downtown), Decimal("7"))

        entry = result.stock_count.journal_entry
        debit = entry.ledger_entries.get(entry_type="DEBIT")
        self.assertEqual(debit.account, resolve_account(keys.INVENTORY_SHRINKAGE))

    def test_overage(self):
        self.stock(self.flour, self.downtown, "1")

        result = submit_stock_count(
            branch=self.downtown,
            counts=[{"product": self.flour, "counted_quantity": "2"}],
        )

        self.assertEqual(result.net_value, Decimal("-2.00"))
        debit = result.stock_count.journal_entry.ledger_entries.get(entry_type="DEBIT")
        self.assertEqual(debit.account, resolve_account(keys.INVENTORY))

    def test_matching_count_posts_nothing(self):
        self.stock(self.flour, self.downtown, "3")

        result = submit_stock_count(
            branch=self.downtown,
            counts=[{"product": self.flour, "counted_quantity": "3"}],
        )

        self.assertEqual(result.lines_adjusted, 0)
        self.assertIsNone(result.stock_count.journal_entry)

    def test_duplicate_product_rejected(self):
        with self.assertRaises(InventoryError):
            submit_stock_count(
                branch=self.downtown,
                counts=[
                    {"product": self.flour, "counted_quantity": "1"},
                    {"product": self.flour, "counted_quantity": "2"},
                ],
            )


class ParAndImportTests(InventoryTestMixin, TestCase):
    def test_par_suggestions_top_up_to_par(self):
        self.stock(self.flour, self.downtown, "2")
        InventoryLevel.objects.filter(product=self.flour, branch=self.downtown).update(
            reorder_point=Decimal("5"),
            par_level=Decimal("12"),
        )

        data = par_suggestions()

        self.assertEqual(data["summary"]["total_suggestions"], 1)
        line = data["suggestions"][0]
        self.assertEqual(line["suggested_order_quantity"], 10.0)
        self.assertEqual(line["priority"], "MEDIUM")
        self.assertEqual(data["summary"]["total_estimated_cost"], 20.0)

    def test_out_of_stock_is_high_priority(self):
        InventoryLevel.objects.create(product=self.flour, branch=self.airport, reorder_point=Decimal("4"))

        line = par_suggestions()["suggestions"][0]

        self.assertTrue(line["is_critical"])
        self.assertEqual(line["suggested_order_quantity"], 8.0)

    def test_product_import_upserts_by_sku(self):
        upload = SimpleUploadedFile(
            "products.csv",
            b"SKU,Name,Unit,Initial Cost,Category\n"
            b"flour,Bread Flour,kg,2.50,food\n"
            b"SUGAR,Sugar,kg,1.20,\n"
            b",Nameless,kg,1,\n",
            content_type="text/csv",
        )

        result = import_products(upload)

        self.assertEqual((result.created, result.updated), (1, 1))
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0]["row"], 4)

        self.flour.refresh_from_db()
        self.assertEqual(self.flour.name, "Bread Flour")
        self.assertEqual(self.flour.cost, Decimal("2.5000"))
