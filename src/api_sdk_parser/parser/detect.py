"""Auto-detect API description format and pick the matching parser."""

from pathlib import Path

from api_sdk_parser.config import ParseOptions
from api_sdk_parser.errors import UnsupportedFormatError
from .base import Endpoint, Parser
from .loader import as_openapi, as_postman, load_document
from .openapi import OpenApiParser
from .postman import PostmanCollectionParser


def detect_format(file_path: Path) -> str:
    """Detect the format of an API description file.

    Returns: 'openapi' or 'postman'.
    """
    return detect_document_format(load_document(file_path))


def detect_document_format(data: dict) -> str:
    if "openapi" in data or "swagger" in data:
        return "openapi"

    info = data.get("info") if isinstance(data.get("info"), dict) else {}
    if "_postman_id" in info or "postman" in str(info.get("schema", "")):
        return "postman"
    if isinstance(data.get("item"), list):
        return "postman"

    raise UnsupportedFormatError("Document is neither an OpenAPI description nor a Postman collection")


def parser_for(fmt: str, options: ParseOptions | None = None) -> Parser:
    options = options or ParseOptions()
    if fmt == "openapi":
        return OpenApiParser()
    if fmt == "postman":
        return PostmanCollectionParser(placeholders_only=options.placeholders_only)
    raise UnsupportedFormatError(f"Unknown format: {fmt}")


def parse_file(file_path: Path, fmt: str = "auto", options: ParseOptions | None = None) -> list[Endpoint]:
    """Load, detect and parse an API description file in one go."""
    data = load_document(file_path)
    if fmt == "auto":
        fmt = detect_document_format(data)

    parser = parser_for(fmt, options)
    document = as_openapi(data, file_path) if fmt == "openapi" else as_postman(data)
    return parser.parse(document)
