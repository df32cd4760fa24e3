"""Extraction prompt built from a user-defined schema and the document text.

The model is asked for a bare JSON array; the coercer in extraction.py still
tolerates fences and surrounding prose when it does not comply.
"""

from models import ExtractionSchema, SchemaField

TYPE_HINTS: dict[str, str] = {
    "date": " (format: YYYY-MM-DD)",
    "boolean": " (true/false)",
    "number": " (numeric value only)",
    "email": " (valid email format)",
    "phone": " (phone number format)",
    "url": " (valid URL format)",
}

_INSTRUCTIONS = """## Important Instructions:
1. Extract ALL matching records/rows from the document
2. Return data as a valid JSON array of objects
3. Use null for missing optional fields
4. For required fields that are missing, make your best guess or use empty string
5. Maintain consistent data types as specified in the schema
6. If no data can be extracted, return an empty array []
7. Do NOT include any markdown formatting, code blocks, or explanations - ONLY return the raw JSON array"""


def get_type_hint(field_type: str) -> str:
    return TYPE_HINTS.get(field_type, "")


def describe_field(field: SchemaField) -> str:
    flag = "required" if field.required else "optional"
    return f'- "{field.name}" ({field.type}, {flag}): {field.description}{get_type_hint(field.type)}'


def build_extraction_prompt(schema: ExtractionSchema, content: str) -> str:
    """Render the full instruction string. Content is included verbatim, untruncated."""
    field_descriptions = "\n".join(describe_field(f) for f in schema.fields)

    return f"""You are a data extraction expert. Your task is to extract structured data from the provided document content based on the specified schema.

## Schema Fields to Extract:
{field_descriptions}

{_INSTRUCTIONS}

## Document Content:
{content}

## Response (JSON array only):"""
