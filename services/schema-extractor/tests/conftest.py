"""Shared test fixtures for schema extractor tests."""

import io
import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import ExtractionSchema, SchemaField


@pytest.fixture
def invoice_schema() -> ExtractionSchema:
    """Invoice line items: three required fields, one optional."""
    return ExtractionSchema(fields=[
        SchemaField(name="item", description="Item or product name", type="text", required=True),
        SchemaField(name="quantity", description="Number of items", type="number", required=True),
        SchemaField(name="price", description="Unit price", type="number", required=True),
        SchemaField(name="paid", description="Whether the line is paid", type="boolean", required=False),
    ])


@pytest.fixture
def amount_schema() -> ExtractionSchema:
    return ExtractionSchema(fields=[
        SchemaField(name="amount", type="number", required=True),
    ])


@pytest.fixture
def optional_schema() -> ExtractionSchema:
    """No required fields at all."""
    return ExtractionSchema(fields=[
        SchemaField(name="note", description="Any note", type="text"),
        SchemaField(name="website", description="Homepage", type="url"),
    ])


@pytest.fixture
def mock_invoice_response() -> str:
    """Mock model reply for two invoice lines."""
    return json.dumps([
        {"item": "Widget", "quantity": 3, "price": "9.50", "paid": True},
        {"item": "Gadget, large", "quantity": "2", "price": 120, "paid": False},
    ])


@pytest.fixture
def mock_markdown_response(mock_invoice_response: str) -> str:
    """Mock model reply wrapped in a json-tagged code fence."""
    return f"```json\n{mock_invoice_response}\n```"


@pytest.fixture
def mock_preamble_response(mock_invoice_response: str) -> str:
    """Mock model reply with prose around the array."""
    return f"Here are the extracted rows:\n\n{mock_invoice_response}\n\nLet me know if you need more."


@pytest.fixture
def pdf_bytes() -> bytes:
    """Single-page PDF with one line of text, built with a valid xref table."""
    stream = b"BT /F1 12 Tf 72 720 Td (Invoice 42 total 99.50) Tj ET"
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % num + body + b"\nendobj\n")

    xref_at = out.tell()
    out.write(b"xref\n0 %d\n" % (len(objects) + 1))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(b"%010d 00000 n \n" % offset)
    out.write(b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1))
    out.write(b"startxref\n%d\n%%%%EOF\n" % xref_at)
    return out.getvalue()


@pytest.fixture
def docx_bytes() -> bytes:
    from docx import Document

    doc = Document()
    doc.add_paragraph("Contact: Jane Doe")
    doc.add_paragraph("Email: jane@example.com")
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def csv_bytes() -> bytes:
    return b"name,email\nJane Doe,jane@example.com\n\nJohn Roe,john@example.com\n"
