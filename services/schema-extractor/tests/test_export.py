"""Tests for CSV and XLSX export."""

import csv
import io
import sys
from pathlib import Path

import pytest
from openpyxl import load_workbook

sys.path.insert(0, str(Path(__file__).parent.parent))

from errors import ValidationError
from export import CSV_MEDIA_TYPE, XLSX_MEDIA_TYPE, export_rows, export_to_csv, export_to_xlsx
from models import SchemaField

FIELDS = [
    SchemaField(name="item", type="text", required=True),
    SchemaField(name="quantity", type="number"),
    SchemaField(name="paid", type="boolean"),
]


class TestExportToCSV:
    def test_header_only(self):
        assert export_to_csv([], FIELDS) == "item,quantity,paid"

    def test_plain_values(self):
        rows = [{"item": "Bolt", "quantity": 3, "paid": True}, {"item": "Nut", "quantity": 1.5, "paid": False}]
        assert export_to_csv(rows, FIELDS) == "item,quantity,paid\nBolt,3,true\nNut,1.5,false"

    def test_null_and_missing_are_empty(self):
        rows = [{"item": None, "quantity": None}]
        assert export_to_csv(rows, FIELDS) == "item,quantity,paid\n,,"

    def test_columns_follow_schema_order(self):
        rows = [{"paid": True, "quantity": 2, "item": "x", "extra": "ignored"}]
        assert export_to_csv(rows, FIELDS).splitlines()[1] == "x,2,true"

    def test_quoting(self):
        rows = [{"item": 'He said "hi", then left', "quantity": 1, "paid": None}]
        line = export_to_csv(rows, FIELDS).split("\n", 1)[1]
        assert line == '"He said ""hi"", then left",1,'

    def test_no_trailing_newline(self):
        assert not export_to_csv([{"item": "a"}], FIELDS).endswith("\n")

    @pytest.mark.parametrize("value", ["a,b", 'quote " inside', "multi\nline", 'all, "three"\nhere', "plain"])
    def test_reparse_reproduces_values(self, value: str):
        rows = [{"item": value, "quantity": 7, "paid": None}]
        parsed = list(csv.reader(io.StringIO(export_to_csv(rows, FIELDS))))
        assert parsed[0] == ["item", "quantity", "paid"]
        assert parsed[1] == [value, "7", ""]

    def test_spaced_mixed_case_names(self):
        fields = [SchemaField(name="Vendor Name"), SchemaField(name="Amount", type="number")]
        rows = [{"Vendor Name": "ACME", "Amount": 12}]
        assert export_to_csv(rows, fields) == "Vendor Name,Amount\nACME,12"


class TestExportToXLSX:
    def _load(self, data: bytes):
        return load_workbook(io.BytesIO(data))

    def test_sheet_and_header(self):
        wb = self._load(export_to_xlsx([], FIELDS))
        assert wb.sheetnames == ["Extracted Data"]
        ws = wb["Extracted Data"]
        assert [c.value for c in ws[1]] == ["item", "quantity", "paid"]
        assert all(c.font.bold for c in ws[1])

    def test_native_values(self):
        rows = [{"item": "Bolt", "quantity": 3, "paid": True}, {"item": "Nut", "quantity": 2.5, "paid": None}]
        ws = self._load(export_to_xlsx(rows, FIELDS))["Extracted Data"]
        assert [c.value for c in ws[2]] == ["Bolt", 3, True]
        assert ws.cell(row=3, column=2).value == 2.5
        assert ws.cell(row=3, column=3).value is None
        assert ws.max_row == 3

    def test_column_widths(self):
        fields = [SchemaField(name="id"), SchemaField(name="a_very_long_column_name")]
        ws = self._load(export_to_xlsx([], fields))["Extracted Data"]
        assert ws.column_dimensions["A"].width == 15
        assert ws.column_dimensions["B"].width == len("a_very_long_column_name") + 2

    def test_formula_like_text_stays_text(self):
        ws = self._load(export_to_xlsx([{"item": "=1+1"}], FIELDS))["Extracted Data"]
        assert ws.cell(row=2, column=1).value == "=1+1"
        assert ws.cell(row=2, column=1).data_type == "s"

    def test_spaced_mixed_case_names(self):
        fields = [SchemaField(name="Vendor Name"), SchemaField(name="Amount", type="number")]
        ws = self._load(export_to_xlsx([{"Vendor Name": "ACME", "Amount": 12}], fields))["Extracted Data"]
        assert [c.value for c in ws[1]] == ["Vendor Name", "Amount"]
        assert [c.value for c in ws[2]] == ["ACME", 12]


class TestExportRows:
    def test_csv_payload(self):
        payload = export_rows([{"item": "a"}], FIELDS, "csv")
        assert payload.media_type == CSV_MEDIA_TYPE
        assert payload.filename == "extracted_data.csv"
        assert isinstance(payload.content, str)

    def test_xlsx_payload(self):
        payload = export_rows([{"item": "a"}], FIELDS, "xlsx")
        assert payload.media_type == XLSX_MEDIA_TYPE
        assert payload.filename == "extracted_data.xlsx"
        assert payload.content[:2] == b"PK"

    def test_invalid_format(self):
        with pytest.raises(ValidationError, match="Supported formats: csv, xlsx"):
            export_rows([], FIELDS, "pdf")
