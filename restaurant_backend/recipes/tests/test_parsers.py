# recipes/tests/test_parsers.py

import io

import openpyxl
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from recipes.services.file_parser import normalize_header, parse_upload
from recipes.services.order_parser import Modifier, OrderItem, parse_order_line


class OrderLineParserTests(SimpleTestCase):
    """
    GUARANTEES:
    - Commas inside brackets never split top-level items
    - Missing quantities default to 1
    - Garbage input yields an empty list, never an exception
    """

    def test_items_with_modifiers(self):
        items = parse_order_line("2 Burger [1 Add Cheese, 1 Extra Patty], 1 Fries")

        self.assertEqual(
            items,
            [
                OrderItem(2, "Burger", [Modifier(1, "Add Cheese"), Modifier(1, "Extra Patty")]),
                OrderItem(1, "Fries", []),
            ],
        )

    def test_missing_quantities_default_to_one(self):
        items = parse_order_line("Espresso, 3 Latte [Oat Milk]")

        self.assertEqual(items[0], OrderItem(1, "Espresso", []))
        self.assertEqual(items[1].qty, 3)
        self.assertEqual(items[1].modifiers, [Modifier(1, "Oat Milk")])

    def test_blank_chunks_ignored(self):
        self.assertEqual(parse_order_line("1 Tea, , "), [OrderItem(1, "Tea", [])])

    def test_non_string_input(self):
        self.assertEqual(parse_order_line(None), [])
        self.assertEqual(parse_order_line(42), [])
        self.assertEqual(parse_order_line(""), [])


class UploadParserTests(SimpleTestCase):
    def test_normalize_header(self):
        self.assertEqual(normalize_header("Initial Cost"), "initial_cost")
        self.assertEqual(normalize_header("  Order-Items "), "order_items")
        self.assertEqual(normalize_header(None), "")

    def test_csv_rows(self):
        upload = SimpleUploadedFile("sales.csv", b"Order Items,Order Value\n1 Tea,2.50\n,\n")

        parsed = parse_upload(upload)

        self.assertTrue(parsed.ok)
        self.assertEqual(parsed.rows, [{"order_items": "1 Tea", "order_value": "2.50"}])

    def test_xlsx_rows(self):
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.append(["SKU", "Name", "Cost"])
        sheet.append(["RICE", "Rice", 1.25])
        buffer = io.BytesIO()
        workbook.save(buffer)

        parsed = parse_upload(SimpleUploadedFile("products.xlsx", buffer.getvalue()))

        self.assertTrue(parsed.ok)
        self.assertEqual(parsed.rows[0]["sku"], "RICE")
        self.assertEqual(parsed.rows[0]["cost"], 1.25)

    def test_unsupported_extension(self):
        parsed = parse_upload(SimpleUploadedFile("notes.txt", b"hello"))

        self.assertFalse(parsed.ok)
        self.assertIn("Unsupported file type", parsed.errors[0])

    def test_corrupt_workbook(self):
        parsed = parse_upload(SimpleUploadedFile("broken.xlsx", b"not a zip"))

        self.assertFalse(parsed.ok)
        self.assertIn("Failed to parse file", parsed.errors[0])

    def test_header_only_file_is_empty(self):
        parsed = parse_upload(SimpleUploadedFile("empty.csv", b"sku,name\n"))
        self.assertEqual(parsed.errors, ["Sheet is empty"])
