"""Serialize reviewed rows to CSV text or an XLSX workbook."""

import io
import logging
from dataclasses import dataclass

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from errors import ValidationError
from extraction import stringify_value
from models import ExtractedRow, SchemaField

logger = logging.getLogger(__name__)

SHEET_TITLE = "Extracted Data"
HEADER_FILL = "6366F1"
MIN_COLUMN_WIDTH = 15

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass
class ExportPayload:
    content: str | bytes
    media_type: str
    filename: str


def export_rows(rows: list[ExtractedRow], fields: list[SchemaField], fmt: str) -> ExportPayload:
    if fmt == "csv":
        return ExportPayload(export_to_csv(rows, fields), CSV_MEDIA_TYPE, "extracted_data.csv")
    if fmt == "xlsx":
        return ExportPayload(export_to_xlsx(rows, fields), XLSX_MEDIA_TYPE, "extracted_data.xlsx")
    raise ValidationError("Invalid format. Supported formats: csv, xlsx")


def export_to_csv(rows: list[ExtractedRow], fields: list[SchemaField]) -> str:
    """Header line of field names, then one line per row; no trailing newline."""
    lines = [",".join(f.name for f in fields)]
    for row in rows:
        lines.append(",".join(_csv_cell(row.get(f.name)) for f in fields))
    return "\n".join(lines)


def _csv_cell(value) -> str:
    if value is None:
        return ""
    text = stringify_value(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def export_to_xlsx(rows: list[ExtractedRow], fields: list[SchemaField]) -> bytes:
    """Single-sheet workbook; numbers and booleans stay native cell values."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    headers = [f.name for f in fields]
    ws.append(headers)
    bold = Font(bold=True)
    fill = PatternFill(start_color=HEADER_FILL, end_color=HEADER_FILL, fill_type="solid")
    for cell in ws[1]:
        cell.font = bold
        cell.fill = fill

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, name in enumerate(headers, start=1):
            value = _xlsx_cell(row.get(name))
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if isinstance(value, str) and value.startswith("="):
                # extracted text, never a formula
                cell.data_type = "s"

    for col, header in enumerate(headers, start=1):
        ws.column_dimensions[get_column_letter(col)].width = max(len(header) + 2, MIN_COLUMN_WIDTH)

    buf = io.BytesIO()
    wb.save(buf)
    logger.info("Exported %d rows x %d columns to xlsx (%d bytes)", len(rows), len(headers), buf.tell())
    return buf.getvalue()


def _xlsx_cell(value):
    if value is None:
        return None
    if isinstance(value, (bool, int, float, str)):
        return value
    return stringify_value(value)
