"""Unit tests for the spreadsheet exporter.

Exported bytes are loaded back with openpyxl to check layout and styles.
"""

import io
import re
from datetime import date
from unittest.mock import patch

import pytest
from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from orderscan.export.service import (
    SHEET_TITLE,
    ExportResult,
    SpreadsheetExporter,
    build_filename,
)
from orderscan.extraction.fallback import build_fallback_order
from orderscan.extraction.schema import OrderData, OrderItem
from orderscan.shared.config import Settings


@pytest.fixture
def exporter() -> SpreadsheetExporter:
    return SpreadsheetExporter(Settings(_env_file=None))


@pytest.fixture
def simple_order() -> OrderData:
    return OrderData(
        order_number="PO-1",
        order_date="2024/01/15",
        supplier="Acme",
        items=[OrderItem(name="A", quantity=2, unit_price=100, amount=200)],
        total_amount=200,
    )


def load_sheet(result: ExportResult) -> Worksheet:
    assert result.content is not None
    workbook = load_workbook(io.BytesIO(result.content))
    return workbook[SHEET_TITLE]


def test_export_success(exporter: SpreadsheetExporter, simple_order: OrderData) -> None:
    result = exporter.export(simple_order)

    assert result.success is True
    assert result.error is None
    assert result.filename == "purchase_order_PO-1.xlsx"
    assert result.content is not None
    assert result.content[:2] == b"PK"


def test_row_layout(exporter: SpreadsheetExporter, simple_order: OrderData) -> None:
    sheet = load_sheet(exporter.export(simple_order))

    assert sheet["A1"].value == "Purchase Order Information"
    assert (sheet["A2"].value, sheet["B2"].value) == ("Order Number", "PO-1")
    assert (sheet["A3"].value, sheet["B3"].value) == ("Order Date", "2024/01/15")
    assert (sheet["A4"].value, sheet["B4"].value) == ("Supplier", "Acme")
    assert sheet["A5"].value is None
    assert sheet["A6"].value == "Item List"
    assert [c.value for c in sheet[7]] == ["Item Name", "Quantity", "Unit Price", "Amount"]
    assert [c.value for c in sheet[8]] == ["A", 2, 100, 200]
    assert sheet["C9"].value == "Total"
    assert sheet["D9"].value == 200
    assert sheet.max_row == 9


def test_header_style(exporter: SpreadsheetExporter, simple_order: OrderData) -> None:
    sheet = load_sheet(exporter.export(simple_order))

    for cell in sheet[7]:
        assert cell.font.bold is True
        assert cell.font.color.rgb.endswith("FFFFFF")
        assert cell.fill.fill_type == "solid"
        assert cell.fill.fgColor.rgb.endswith("4472C4")
        assert cell.border.top.style == "thin"
        assert cell.border.left.style == "thin"
        assert cell.border.bottom.style == "thin"
        assert cell.border.right.style == "thin"
        assert cell.alignment.horizontal == "center"
        assert cell.alignment.vertical == "center"


def test_money_cells_are_currency_formatted(
    exporter: SpreadsheetExporter, simple_order: OrderData
) -> None:
    """Item amount and total use a no-decimals currency format, right-aligned."""
    sheet = load_sheet(exporter.export(simple_order))

    for cell in (sheet["C8"], sheet["D8"], sheet["D9"]):
        assert cell.number_format == "¥#,##0"
        assert "." not in cell.number_format
        assert cell.alignment.horizontal == "right"
    assert sheet["B8"].value == 2
    assert sheet["D8"].value == 200
    assert sheet["C9"].font.bold is True
    assert sheet["D9"].font.bold is True


def test_missing_values(exporter: SpreadsheetExporter) -> None:
    """Absent header fields and prices render as empty cells."""
    order = OrderData(items=[OrderItem(name="Widget", quantity="three")])

    sheet = load_sheet(exporter.export(order))

    assert sheet["B2"].value in (None, "")
    assert sheet["B3"].value in (None, "")
    assert sheet["B4"].value in (None, "")
    assert sheet["B8"].value == "three"
    assert sheet["C8"].value in (None, "")
    assert sheet["C8"].number_format == "General"
    assert sheet["D9"].value in (None, "")
    assert sheet["D9"].number_format == "General"


def test_empty_items(exporter: SpreadsheetExporter) -> None:
    sheet = load_sheet(exporter.export(OrderData(order_number="PO-2")))

    assert sheet["C8"].value == "Total"
    assert sheet.max_row == 8


def test_items_keep_document_order(exporter: SpreadsheetExporter) -> None:
    sheet = load_sheet(exporter.export(build_fallback_order()))

    names = [sheet.cell(row=row, column=1).value for row in range(8, 11)]
    assert names == ["Laptop", "24-inch Monitor", "Wireless Mouse"]
    assert sheet["D11"].value == 330000


def test_column_widths(exporter: SpreadsheetExporter) -> None:
    order = OrderData(
        supplier="Supplier With A Very Long Company Name",
        items=[OrderItem(name="Pen", quantity=1, unit_price=5, amount=5)],
    )

    sheet = load_sheet(exporter.export(order))

    assert sheet.column_dimensions["A"].width == len("Purchase Order Information") + 2
    assert sheet.column_dimensions["B"].width == len(order.supplier or "") + 2
    assert sheet.column_dimensions["C"].width == len("Unit Price") + 2
    assert sheet.column_dimensions["D"].width == 10


def test_export_is_byte_identical(exporter: SpreadsheetExporter, simple_order: OrderData) -> None:
    """Exporting the same record twice yields identical bytes."""
    first = exporter.export(simple_order)
    second = exporter.export(simple_order)

    assert first.content == second.content


def test_custom_currency_format(simple_order: OrderData) -> None:
    exporter = SpreadsheetExporter(Settings(_env_file=None, export_currency_format="$#,##0"))

    sheet = load_sheet(exporter.export(simple_order))

    assert sheet["D8"].number_format == "$#,##0"


def test_build_filename_from_order_number() -> None:
    assert build_filename(OrderData(order_number="PO-2023-0001")) == (
        "purchase_order_PO-2023-0001.xlsx"
    )


def test_build_filename_sanitizes() -> None:
    assert build_filename(OrderData(order_number="PO 12/34")) == "purchase_order_PO_12_34.xlsx"


def test_build_filename_uses_date_without_order_number() -> None:
    assert build_filename(OrderData(), today=date(2024, 3, 15)) == (
        "purchase_order_2024-03-15.xlsx"
    )


def test_export_filename_defaults_to_today(exporter: SpreadsheetExporter) -> None:
    result = exporter.export(OrderData())

    assert result.filename is not None
    assert re.fullmatch(r"purchase_order_\d{4}-\d{2}-\d{2}\.xlsx", result.filename)


def test_export_failure_returns_error(
    exporter: SpreadsheetExporter, simple_order: OrderData
) -> None:
    """Serialization errors are reported, nothing is returned partially."""
    with patch("orderscan.export.service.ExcelWriter", side_effect=OSError("disk full")):
        result = exporter.export(simple_order)

    assert result.success is False
    assert result.content is None
    assert result.filename is None
    assert "Failed to generate the Excel file" in str(result.error)
    assert "disk full" in str(result.error)
