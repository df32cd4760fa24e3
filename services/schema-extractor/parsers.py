"""Document text extraction for uploaded PDF, DOCX, CSV and TXT files.

Everything happens in memory; uploads are never written to disk.
"""

import csv
import io
import json
import logging

from docx import Document
from pypdf import PdfReader

from errors import UpstreamError, ValidationError
from models import DocumentMetadata, ParsedDocument

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".csv", ".txt")


def get_file_extension(filename: str) -> str:
    """Lower-cased extension without the dot, or "" when there is none."""
    name = filename.lower()
    dot = name.rfind(".")
    return name[dot + 1:] if dot > 0 else ""


def is_supported_file(filename: str) -> bool:
    return filename.lower().endswith(SUPPORTED_EXTENSIONS)


def parse_file(filename: str, data: bytes) -> ParsedDocument:
    """Route raw upload bytes to the parser for the file's extension."""
    ext = get_file_extension(filename)
    parser = _PARSERS.get(ext)
    if parser is None:
        raise ValidationError(f"Unsupported file type: {filename.lower()}")

    try:
        parsed = parser(data)
    except UnicodeDecodeError as e:
        raise UpstreamError(f"Failed to parse {ext} file: not valid UTF-8 text") from e
    except Exception as e:
        logger.error("Parsing %s upload failed: %s", ext, e)
        raise UpstreamError(f"Failed to parse {ext} file: {e}") from e

    logger.info("Parsed %s upload: %d bytes -> %d chars", ext, len(data), len(parsed.text))
    return parsed


def parse_pdf(data: bytes) -> ParsedDocument:
    reader = PdfReader(io.BytesIO(data))
    chunks: list[str] = []
    for page in reader.pages:
        page_text = page.extract_text() or ""
        if page_text:
            chunks.append(page_text)
    return ParsedDocument(
        text="\n".join(chunks),
        type="pdf",
        metadata=DocumentMetadata(pages=len(reader.pages)),
    )


def parse_docx(data: bytes) -> ParsedDocument:
    doc = Document(io.BytesIO(data))
    text = "\n".join(p.text for p in doc.paragraphs)
    return ParsedDocument(text=text, type="docx")


def parse_csv(data: bytes) -> ParsedDocument:
    """Flatten CSV rows into a readable listing the model can follow."""
    text = _decode_text(data)
    reader = csv.DictReader(io.StringIO(text))
    columns = list(reader.fieldnames or [])
    # DictReader already skips blank lines
    rows = list(reader)

    lines = [
        f"CSV Data with {len(rows)} rows and {len(columns)} columns",
        "",
        f"Columns: {', '.join(columns)}",
        "",
        "Data:",
    ]
    for index, row in enumerate(rows, start=1):
        record = {col: row.get(col) or "" for col in columns}
        lines.append(f"Row {index}: {json.dumps(record, ensure_ascii=False)}")

    return ParsedDocument(
        text="\n".join(lines) + "\n",
        type="csv",
        metadata=DocumentMetadata(rows=len(rows), columns=columns),
    )


def parse_txt(data: bytes) -> ParsedDocument:
    return ParsedDocument(text=_decode_text(data), type="txt")


def _decode_text(data: bytes) -> str:
    # utf-8-sig drops a BOM some spreadsheet exports prepend
    return data.decode("utf-8-sig")


_PARSERS = {
    "pdf": parse_pdf,
    "docx": parse_docx,
    "csv": parse_csv,
    "txt": parse_txt,
}
