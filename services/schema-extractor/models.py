"""Pydantic models for schemas, extracted rows and API payloads."""

import re
import secrets
import string
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

FieldType = Literal["text", "number", "date", "boolean", "email", "phone", "url"]
DocumentType = Literal["pdf", "docx", "csv", "txt"]

CellValue = str | int | float | bool | None
ExtractedRow = dict[str, CellValue]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_field_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


def normalize_field_name(name: str) -> str:
    """Trim, collapse whitespace runs to underscores, lower-case.

    Used for preset templates; names sent by callers are kept as given.
    """
    return re.sub(r"\s+", "_", name.strip()).lower()


class SchemaField(BaseModel):
    id: str = Field(default_factory=generate_field_id)
    name: str
    description: str = ""
    type: FieldType = "text"
    required: bool = False


class ExtractionSchema(BaseModel):
    fields: list[SchemaField] = []

    def required_fields(self) -> list[SchemaField]:
        return [f for f in self.fields if f.required]


class ExtractionResult(BaseModel):
    rows: list[ExtractedRow]
    confidence: int = Field(ge=0, le=100)
    warnings: list[str] | None = None


class ExtractionResponse(ExtractionResult):
    success: bool = True
    processing_time_ms: int = 0


class ExtractionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str = ""
    extraction_schema: ExtractionSchema | None = Field(default=None, alias="schema")


class DocumentMetadata(BaseModel):
    pages: int | None = None
    rows: int | None = None
    columns: list[str] | None = None


class ParsedDocument(BaseModel):
    text: str
    type: DocumentType
    metadata: DocumentMetadata | None = None


class ParseResponse(BaseModel):
    success: bool = True
    filename: str
    content: str
    type: DocumentType
    metadata: DocumentMetadata | None = None


class ExportRequest(BaseModel):
    rows: list[ExtractedRow] = Field(validation_alias=AliasChoices("rows", "data"))
    fields: list[SchemaField]
    format: str = "csv"


class CellEditRequest(BaseModel):
    rows: list[ExtractedRow]
    fields: list[SchemaField]
    row_index: int
    field_name: str
    value: str = ""


class CellEditResponse(BaseModel):
    rows: list[ExtractedRow]


class SchemaTemplate(BaseModel):
    name: str
    fields: list[SchemaField]


class FieldTypeInfo(BaseModel):
    value: FieldType
    label: str
    description: str
