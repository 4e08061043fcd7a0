"""Spreadsheet export of extracted purchase orders.

Builds a single-sheet OOXML workbook with openpyxl entirely in memory and
returns its bytes together with a download filename.

Based on openpyxl documentation:
https://openpyxl.readthedocs.io/en/stable/styles.html
"""

import io
import logging
import re
import zipfile
from datetime import date, datetime

from openpyxl import Workbook
from openpyxl.cell import Cell
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet
from openpyxl.writer.excel import ExcelWriter
from pydantic import BaseModel

from orderscan.extraction.schema import OrderData
from orderscan.shared.config import Settings
from orderscan.shared.errors import ExportError

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SHEET_TITLE = "Purchase Order Data"
FILENAME_PREFIX = "purchase_order"
COLUMN_HEADERS = ("Item Name", "Quantity", "Unit Price", "Amount")

MIN_COLUMN_WIDTH = 10
COLUMN_PADDING = 2

# Pinned so identical records serialize to identical bytes
_DOCUMENT_TIMESTAMP = datetime(1980, 1, 1)
_ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

_THIN = Side(style="thin")
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="4472C4")
HEADER_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")
RIGHT_ALIGNMENT = Alignment(horizontal="right")
BOLD_FONT = Font(bold=True)

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\s]+')


class ExportResult(BaseModel):
    """Result of spreadsheet export.

    Attributes:
        success: Whether operation succeeded
        content: Serialized .xlsx bytes
        filename: Suggested download filename
        error: Error message if operation failed
    """

    success: bool
    content: bytes | None = None
    filename: str | None = None
    error: str | None = None


def build_filename(data: OrderData, today: date | None = None) -> str:
    """Derive the download filename from the order number or today's date.

    Args:
        data: Order being exported
        today: Date used when the order has no number (defaults to today)

    Returns:
        Filename ending in .xlsx
    """
    if data.order_number:
        stem = _UNSAFE_FILENAME_CHARS.sub("_", data.order_number.strip()) or "order"
    else:
        stem = (today or date.today()).isoformat()
    return f"{FILENAME_PREFIX}_{stem}.xlsx"


class SpreadsheetExporter:
    """Renders OrderData into a styled .xlsx workbook."""

    def __init__(self, settings: Settings) -> None:
        """Initialize exporter.

        Args:
            settings: Application settings (currency number format)
        """
        self.settings = settings

    def export(self, data: OrderData) -> ExportResult:
        """Export order data to a spreadsheet.

        Args:
            data: Extracted order data

        Returns:
            ExportResult with workbook bytes and filename, or error
        """
        try:
            workbook = self.build_workbook(data)
            content = self.serialize(workbook)
        except Exception as e:
            logger.exception(f"Excel export failed: {e}")
            return ExportResult(success=False, error=f"Failed to generate the Excel file: {e}")

        filename = build_filename(data)
        logger.info(f"Exported order to {filename} ({len(content)} bytes)")
        return ExportResult(success=True, content=content, filename=filename)

    def build_workbook(self, data: OrderData) -> Workbook:
        """Lay out the order on a single worksheet.

        Args:
            data: Extracted order data

        Returns:
            Populated openpyxl Workbook
        """
        currency_format = self.settings.export_currency_format

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_TITLE

        sheet.append(["Purchase Order Information"])
        sheet.append(["Order Number", data.order_number or ""])
        sheet.append(["Order Date", data.order_date or ""])
        sheet.append(["Supplier", data.supplier or ""])
        sheet.append([])

        sheet.append(["Item List"])
        sheet.append(list(COLUMN_HEADERS))
        for cell in sheet[sheet.max_row]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.border = HEADER_BORDER
            cell.alignment = HEADER_ALIGNMENT

        for item in data.items:
            sheet.append([item.name, item.quantity, item.unit_price or "", item.amount or ""])
            row = sheet.max_row
            if item.unit_price:
                self._format_money(sheet.cell(row=row, column=3), currency_format)
            if item.amount:
                self._format_money(sheet.cell(row=row, column=4), currency_format)

        sheet.append(["", "", "Total", data.total_amount or ""])
        row = sheet.max_row
        sheet.cell(row=row, column=3).font = BOLD_FONT
        if data.total_amount:
            total_cell = sheet.cell(row=row, column=4)
            self._format_money(total_cell, currency_format)
            total_cell.font = BOLD_FONT

        self._fit_columns(sheet)
        return workbook

    def serialize(self, workbook: Workbook) -> bytes:
        """Write the workbook to .xlsx bytes.

        Raises:
            ExportError: If the workbook cannot be written
        """
        workbook.properties.created = _DOCUMENT_TIMESTAMP
        workbook.properties.modified = _DOCUMENT_TIMESTAMP

        buffer = io.BytesIO()
        try:
            archive = zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED, allowZip64=True)
            ExcelWriter(workbook, archive).save()
        except Exception as e:
            raise ExportError(f"Could not serialize workbook: {e}") from e

        return _pin_archive_timestamps(buffer.getvalue())

    @staticmethod
    def _format_money(cell: Cell, number_format: str) -> None:
        cell.number_format = number_format
        cell.alignment = RIGHT_ALIGNMENT

    @staticmethod
    def _fit_columns(sheet: Worksheet) -> None:
        """Size columns to their longest value, with a floor."""
        for index, column in enumerate(
            sheet.iter_cols(min_col=1, max_col=len(COLUMN_HEADERS), values_only=True), start=1
        ):
            lengths = [len(str(value)) for value in column if value not in (None, "")]
            longest = max(lengths, default=0)
            width = MIN_COLUMN_WIDTH if longest < MIN_COLUMN_WIDTH else longest + COLUMN_PADDING
            sheet.column_dimensions[get_column_letter(index)].width = width


def _pin_archive_timestamps(content: bytes) -> bytes:
    """Rewrite zip entries with a fixed modification time."""
    output = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(content)) as source, zipfile.ZipFile(
        output, "w", zipfile.ZIP_DEFLATED
    ) as target:
        for info in source.infolist():
            pinned = zipfile.ZipInfo(info.filename, date_time=_ZIP_TIMESTAMP)
            pinned.compress_type = zipfile.ZIP_DEFLATED
            pinned.external_attr = info.external_attr
            target.writestr(pinned, source.read(info.filename))
    return output.getvalue()
