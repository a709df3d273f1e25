"""Read and decode API description files.

All file I/O and $ref resolution happens here, before any parser runs.
"""

import logging
from pathlib import Path

import yaml
from prance.util.resolver import RESOLVE_FILES, RESOLVE_INTERNAL, RefResolver
from prance.util.url import ResolutionError

from api_sdk_parser.errors import SpecLoadError
from .postman import PostmanCollection

logger = logging.getLogger(__name__)


def load_document(file_path: Path) -> dict:
    """Decode a JSON or YAML file into a mapping."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(f"Cannot read {file_path}: {e}") from e

    if not text.strip():
        raise SpecLoadError(f"{file_path} is empty")

    # YAML is a superset of JSON, so one loader covers both
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecLoadError(f"{file_path} is not valid JSON or YAML: {e}") from e

    if not isinstance(data, dict):
        raise SpecLoadError(f"{file_path} does not contain a top-level object")
    return data


def load_postman(file_path: Path) -> PostmanCollection:
    return as_postman(load_document(file_path))


def load_openapi(file_path: Path) -> dict:
    return as_openapi(load_document(file_path), file_path)


def as_postman(document: dict) -> PostmanCollection:
    if not isinstance(document.get("item"), list):
        raise SpecLoadError("Postman collection has no 'item' list")
    return PostmanCollection.from_json(document)


def as_openapi(document: dict, file_path: Path | None = None) -> dict:
    if not isinstance(document.get("paths"), dict):
        raise SpecLoadError("OpenAPI document has no 'paths' object")
    return resolve_refs(document, file_path)


def resolve_refs(document: dict, file_path: Path | None = None) -> dict:
    """Return a copy of the document with internal and local-file $refs inlined.

    Relative file references are looked up next to ``file_path`` (the current
    directory when omitted). Remote references are left as-is, and a circular
    reference is kept as a {"$ref": ...} mapping where the cycle closes.
    """
    base = Path(file_path) if file_path is not None else Path.cwd() / "openapi.yaml"
    resolver = RefResolver(
        document,
        str(base.resolve()),
        resolve_types=RESOLVE_INTERNAL | RESOLVE_FILES,
        recursion_limit=0,
        recursion_limit_handler=_keep_circular_ref,
        strict=False,
    )
    try:
        resolver.resolve_references()
    except ResolutionError as e:
        raise SpecLoadError(f"Cannot resolve references in {base.name}: {e}") from e
    return resolver.specs


def _keep_circular_ref(limit, ref_url, recursions=()):
    # Last recursion entry is (url resource, object path) of the ref being followed
    _, obj_path = recursions[-1]
    pointer = "/".join(str(t).replace("~", "~0").replace("/", "~1") for t in obj_path)
    logger.debug("Leaving circular reference #/%s unresolved", pointer)
    return {"$ref": f"#/{pointer}"}
