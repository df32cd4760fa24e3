"""Error kinds surfaced by the extractor and mapped to HTTP status codes in main."""


class ExtractorError(Exception):
    """Base class for all errors reported to the caller."""


class ValidationError(ExtractorError):
    """Bad caller input: missing content, empty schema, unknown format or file type."""


class ParseError(ExtractorError):
    """The model reply contained no usable JSON array."""


class UpstreamError(ExtractorError):
    """The model invocation or a file-parsing library failed."""
