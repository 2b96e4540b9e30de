# recipes/services/file_parser.py

"""
UPLOAD PARSER

Turns an uploaded spreadsheet (.xlsx via openpyxl, or .csv) into a list of
dict rows keyed by snake_case headers:

    "Initial Cost" -> "initial_cost"
    "SKU"          -> "sku"
    "Order Items"  -> "order_items"

Problems are returned in `errors`, never raised, so callers can show them.
"""

from __future__ import annotations

import csv
import io
import re
import zipfile
from dataclasses import dataclass, field

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

EXCEL_EXTENSIONS = ("xlsx", "xlsm")
CSV_EXTENSIONS = ("csv",)

_NON_WORD = re.compile(r"[\s\W]+")


@dataclass
class ParsedUpload:
    rows: list[dict] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def normalize_header(header) -> str:
    if header is None:
        return ""
    return _NON_WORD.sub("_", str(header).strip().lower()).strip("_")


def _normalize_row(raw: dict) -> dict:
    row = {}
    for key, value in raw.items():
        clean = normalize_header(key)
        if not clean:
            continue
        row[clean] = value.strip() if isinstance(value, str) else ("" if value is None else value)
    return row


def _is_blank(row: dict) -> bool:
    return all(v is None or str(v).strip() == "" for v in row.values())


def _read_csv(content: bytes) -> list[dict]:
    text = content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))
    return [dict(r) for r in reader]


def _read_xlsx(content: bytes) -> list[dict]:
    workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0] if workbook.worksheets else None
        if sheet is None:
            return []

        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            return []

        headers = [h if h is not None else f"column_{i}" for i, h in enumerate(header)]
        out = []
        for values in rows:
            out.append({headers[i]: v for i, v in enumerate(values) if i < len(headers)})
        return out
    finally:
        workbook.close()


def parse_upload(uploaded_file, filename: str | None = None) -> ParsedUpload:
    """
    uploaded_file: a Django UploadedFile (or any object with .read()).
    """
    name = (filename or getattr(uploaded_file, "name", "") or "").lower()
    extension = name.rsplit(".", 1)[-1] if "." in name else ""

    if extension not in EXCEL_EXTENSIONS + CSV_EXTENSIONS:
        return ParsedUpload(errors=[f"Unsupported file type: .{extension or '?'} (expected .xlsx or .csv)"])

    content = uploaded_file.read()
    if isinstance(content, str):
        content = content.encode("utf-8")

    try:
        raw_rows = _read_xlsx(content) if extension in EXCEL_EXTENSIONS else _read_csv(content)
    except (InvalidFileException, zipfile.BadZipFile, UnicodeDecodeError, csv.Error, KeyError, OSError, ValueError) as exc:
        return ParsedUpload(errors=[f"Failed to parse file: {exc}. Please upload a valid Excel or CSV file."])

    rows = [_normalize_row(r) for r in raw_rows]
    rows = [r for r in rows if r and not _is_blank(r)]

    if not rows:
        return ParsedUpload(errors=["Sheet is empty"])

    return ParsedUpload(rows=rows)
