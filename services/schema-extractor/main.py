"""FastAPI schema extractor service: parse uploads, extract rows with a hosted model, export.

Handles document parsing, prompt building, reply coercion and export.
Delegates inference to an OpenAI-compatible model API (OpenRouter by default).
Privacy: document text and prompts are never logged, only their sizes.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from config import settings
from errors import ParseError, UpstreamError, ValidationError
from export import export_rows
from extraction import apply_cell_edit, extract_data
from llm_client import LLMClient, LLMServiceUnavailable
from models import (
    CellEditRequest,
    CellEditResponse,
    ExportRequest,
    ExtractionRequest,
    ExtractionResponse,
    FieldTypeInfo,
    ParseResponse,
    SchemaTemplate,
)
from parsers import is_supported_file, parse_file
from templates import FIELD_TYPES, list_templates

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_llm_client: LLMClient | None = None
_llm_available: bool = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the model client on startup if an API key is configured."""
    global _llm_client, _llm_available

    if not settings.OPENROUTER_API_KEY:
        logger.info("Model API not configured (OPENROUTER_API_KEY is empty); extraction disabled")
        _llm_available = False
    else:
        logger.info("Using model %s at %s", settings.LLM_MODEL, settings.OPENROUTER_BASE_URL)
        _llm_client = LLMClient()
        _llm_available = True

    yield

    if _llm_client is not None:
        _llm_client.close()


app = FastAPI(title=settings.APP_TITLE, version="1.0.0", lifespan=lifespan)


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


@app.post("/api/v1/parse", response_model=ParseResponse)
async def parse(file: UploadFile | None = File(None)):
    """Extract plain text from an uploaded PDF, DOCX, CSV or TXT file."""
    if file is None or not file.filename:
        return _error(400, "No file provided")

    if not is_supported_file(file.filename):
        return _error(400, "Invalid file type. Supported types: PDF, DOCX, CSV, TXT")

    data = await file.read()
    if not data:
        return _error(400, "Empty file uploaded")

    # log byte count only, never document content
    logger.info("Processing upload: size=%d bytes", len(data))

    try:
        parsed = await run_in_threadpool(parse_file, file.filename, data)
    except ValidationError as e:
        return _error(400, str(e))
    except UpstreamError as e:
        return _error(502, str(e))

    return ParseResponse(
        filename=file.filename,
        content=parsed.text,
        type=parsed.type,
        metadata=parsed.metadata,
    )


# Blocking model calls and file work run in the threadpool, off the event loop
@app.post("/api/v1/extract", response_model=ExtractionResponse)
def extract(req: ExtractionRequest):
    """Extract rows matching the schema from document text."""
    if not _llm_available or _llm_client is None:
        return _error(503, "AI extraction is not available - no model API configured")

    try:
        return extract_data(req.content, req.extraction_schema, _llm_client)
    except ValidationError as e:
        logger.warning("Rejected extraction request: %s", e)
        return _error(400, str(e))
    except ParseError as e:
        logger.error("Model reply could not be parsed: %s", e)
        return _error(502, str(e))
    except LLMServiceUnavailable as e:
        logger.error("Model API unavailable: %s", e)
        return _error(503, f"Model API unavailable: {e}")
    except UpstreamError as e:
        logger.error("Model API error: %s", e)
        return _error(502, str(e))


@app.post("/api/v1/rows/edit", response_model=CellEditResponse)
async def edit_row(req: CellEditRequest):
    """Apply a single cell edit from the review table, coerced to the column type."""
    try:
        rows = apply_cell_edit(req.rows, req.fields, req.row_index, req.field_name, req.value)
    except ValidationError as e:
        return _error(400, str(e))
    return CellEditResponse(rows=rows)


@app.post("/api/v1/export")
def export(req: ExportRequest):
    """Download rows as CSV or XLSX."""
    try:
        payload = export_rows(req.rows, req.fields, req.format)
    except ValidationError as e:
        return _error(400, str(e))

    logger.info("Exporting %d rows as %s", len(req.rows), req.format)
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'},
    )


@app.get("/api/v1/templates", response_model=list[SchemaTemplate])
async def templates():
    """Preset schemas for common extraction jobs."""
    return list_templates()


@app.get("/api/v1/field-types", response_model=list[FieldTypeInfo])
async def field_types():
    return FIELD_TYPES


@app.get("/health")
def health():
    """Return service status and model API availability."""
    base = {
        "status": "healthy",
        "llm_available": _llm_available,
    }

    if _llm_available and _llm_client is not None:
        base["llm_health"] = _llm_client.health()

    return base


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
