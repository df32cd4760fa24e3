"""Extraction orchestrator: build prompt, call the model, coerce the reply into rows.

The coercer tolerates the framing of a reply (markdown fences, explanatory
prose) but not its content: anything that is not a JSON array discards the
whole attempt with a ParseError.
"""

import json
import logging
import math
import re
import time

from config import settings
from errors import ParseError, ValidationError
from llm_client import LLMClient
from models import (
    CellValue,
    ExtractedRow,
    ExtractionResponse,
    ExtractionResult,
    ExtractionSchema,
    SchemaField,
)
from prompts import build_extraction_prompt

logger = logging.getLogger(__name__)

_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
# Plain decimal literal with optional sign and exponent
_DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_RADIX_PATTERN = re.compile(r"^0([xob])([0-9a-f]+)$", re.IGNORECASE)
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


def extract_data(
    content: str,
    schema: ExtractionSchema | None,
    llm_client: LLMClient,
) -> ExtractionResponse:
    """Run the extraction pipeline: validate -> prompt -> model -> coerce.

    Raises ValidationError for bad input, UpstreamError subclasses from the
    model client, and ParseError for an unusable reply.
    """
    if not content or not content.strip():
        raise ValidationError("No content provided")
    validate_schema(schema)

    start = time.monotonic()
    prompt = build_extraction_prompt(schema, content)
    logger.info(
        "Requesting extraction: fields=%d content=%d chars prompt=%d chars",
        len(schema.fields), len(content), len(prompt),
    )

    raw_text = llm_client.complete(
        prompt,
        temperature=settings.LLM_TEMPERATURE,
        max_tokens=settings.LLM_MAX_TOKENS,
    )
    logger.info("Model reply received (%d chars)", len(raw_text))

    result = parse_extraction_response(raw_text, schema)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    logger.info(
        "Extracted %d rows, confidence=%d%%, warnings=%d in %dms",
        len(result.rows), result.confidence, len(result.warnings or []), elapsed_ms,
    )

    return ExtractionResponse(
        rows=result.rows,
        confidence=result.confidence,
        warnings=result.warnings,
        processing_time_ms=elapsed_ms,
    )


def validate_schema(schema: ExtractionSchema | None) -> None:
    if schema is None or not schema.fields:
        raise ValidationError("Schema with at least one field is required")
    if any(not f.name.strip() for f in schema.fields):
        raise ValidationError("All fields must have a name")


def parse_extraction_response(raw: str, schema: ExtractionSchema) -> ExtractionResult:
    """Coerce a raw model reply into typed rows, warnings and a confidence score."""
    parsed = try_parse_json_array(raw)

    if not isinstance(parsed, list):
        raise ParseError("Response is not an array")

    warnings: list[str] = []
    rows: list[ExtractedRow] = []

    for index, item in enumerate(parsed):
        record = item if isinstance(item, dict) else {}
        row: ExtractedRow = {}

        for field in schema.fields:
            value = record.get(field.name)
            if value is None:
                if field.required:
                    warnings.append(f'Row {index + 1}: Missing required field "{field.name}"')
                row[field.name] = None
                continue
            row[field.name] = coerce_value(value, field)

        rows.append(row)

    return ExtractionResult(
        rows=rows,
        confidence=compute_confidence(rows, schema),
        warnings=warnings or None,
    )


def strip_code_fence(raw: str) -> str:
    """Drop a leading ```json / ``` marker and a trailing ``` marker."""
    cleaned = raw.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def try_parse_json_array(raw: str):
    """Two-stage parse: strict JSON first, then the widest [...] substring.

    Returns whatever JSON value was found; the caller checks it is an array.
    """
    cleaned = strip_code_fence(raw)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    return _parse_bracketed(cleaned)


def _parse_bracketed(text: str):
    match = _ARRAY_PATTERN.search(text)
    if match is None:
        logger.warning("No JSON array in model reply: %s", text[:200])
        raise ParseError("No valid JSON array found in response")

    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("Bracketed model reply is not valid JSON: %s", text[:200])
        raise ParseError("Failed to parse AI response as JSON") from e


def coerce_value(value, field: SchemaField) -> CellValue:
    if field.type == "number":
        return to_number(value)
    if field.type == "boolean":
        return to_bool(value)
    return stringify_value(value)


def to_number(value) -> int | float | None:
    """Lenient numeric cast: strings are trimmed, "" is 0, 0x/0o/0b literals parse.

    Returns None for anything that is not a finite number.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        number = _parse_numeric_string(value)
    else:
        return None

    if number is None:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def _parse_numeric_string(text: str) -> int | float | None:
    text = text.strip()
    if not text:
        return 0

    radix_match = _RADIX_PATTERN.match(text)
    if radix_match:
        base = _RADIX_BASES[radix_match.group(1).lower()]
        try:
            return int(radix_match.group(2), base)
        except ValueError:
            return None

    if _DECIMAL_PATTERN.match(text):
        return float(text)
    return None


def to_bool(value) -> bool:
    """Truthiness cast: empty string, zero and NaN are false; any object is true."""
    if isinstance(value, (list, dict)):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def stringify_value(value) -> str:
    """String cast using JSON spellings for booleans, numbers and containers."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False)


def compute_confidence(rows: list[ExtractedRow], schema: ExtractionSchema) -> int:
    """Percentage of required-field slots that hold a value, rounded half up.

    Defined as 100 when there are no rows or no required fields.
    """
    required = schema.required_fields()
    total = len(rows) * len(required)
    if total == 0:
        return 100

    filled = sum(
        1 for row in rows for f in required if row.get(f.name) is not None
    )
    return math.floor(filled * 100 / total + 0.5)


def coerce_cell_edit(raw: str, field: SchemaField) -> CellValue:
    """Coerce a value typed into the review table for the given column."""
    if field.type == "number":
        return None if raw == "" else to_number(raw)
    if field.type == "boolean":
        return raw.lower() == "true"
    return raw or None


def apply_cell_edit(
    rows: list[ExtractedRow],
    fields: list[SchemaField],
    row_index: int,
    field_name: str,
    raw: str,
) -> list[ExtractedRow]:
    """Return a copy of rows with one cell replaced by the coerced edit."""
    if not 0 <= row_index < len(rows):
        raise ValidationError(f"Row index out of range: {row_index}")

    field = next((f for f in fields if f.name == field_name), None)
    if field is None:
        raise ValidationError(f"Unknown field: {field_name}")

    updated = [dict(row) for row in rows]
    updated[row_index][field_name] = coerce_cell_edit(raw, field)
    return updated
