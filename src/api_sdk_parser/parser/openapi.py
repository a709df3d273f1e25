"""OpenAPI / Swagger document parser.

Parses dereferenced OpenAPI 3.x and Swagger 2.0 documents into Endpoint
models, one per operation, in path declaration order.
"""

import logging
from typing import Any

from .base import Endpoint, Parameter, ParamType, Parser

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

_SCHEMA_TYPES = {t.value: t for t in ParamType}


class OpenApiParser(Parser):
    """Flattens the paths of an OpenAPI document into endpoints."""

    def parse(self, document: dict) -> list[Endpoint]:
        endpoints = []
        paths = document.get("paths")
        if not isinstance(paths, dict):
            return endpoints

        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                logger.debug("Skipping path %s: path item is not a mapping", path)
                continue
            shared_params = path_item.get("parameters") or []

            for method, operation in path_item.items():
                if str(method).lower() not in HTTP_METHODS or not isinstance(operation, dict):
                    continue
                endpoints.append(self._parse_operation(str(path), str(method).upper(), operation, shared_params))

        return endpoints

    def _parse_operation(self, path: str, method: str, operation: dict, shared_params: list) -> Endpoint:
        params = _merge_parameters(shared_params, operation.get("parameters") or [])
        summary = _text(operation.get("summary"))

        return Endpoint(
            name=_text(operation.get("operationId")) or summary or f"{method} {path}",
            method=method,
            path_segments=[s for s in path.split("/") if s],
            collection=_first_tag(operation.get("tags")),
            description=_text(operation.get("description")) or summary,
            response=_example_response(operation.get("responses")),
            query_parameters=[_to_parameter(p) for p in params if p.get("in") == "query"],
            path_parameters=[_to_parameter(p) for p in params if p.get("in") == "path"],
            body_parameters=_parse_body_parameters(operation, params),
        )


def _text(value: Any) -> str:
    """Free-text fields; YAML may hand back numbers or booleans here."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _first_tag(tags: Any) -> str | None:
    if isinstance(tags, str):
        return tags or None
    if isinstance(tags, list) and tags:
        return _text(tags[0]) or None
    return None


def _required_names(schema: dict) -> set:
    # Only the list form counts; a bare `required: true` on a schema is ignored
    required = schema.get("required")
    if not isinstance(required, list):
        return set()
    return {name for name in required if isinstance(name, str)}


def _merge_parameters(shared: Any, own: Any) -> list[dict]:
    """Operation-level parameters override path-level ones with the same (name, in)."""
    merged: dict[tuple, dict] = {}
    for p in [*_as_list(shared), *_as_list(own)]:
        if not isinstance(p, dict) or not _text(p.get("name")):
            logger.debug("Dropping parameter without a name: %r", p)
            continue
        merged[(_text(p["name"]), str(p.get("in")))] = p
    return list(merged.values())


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _schema_type(schema: Any, default: ParamType = ParamType.MIXED) -> ParamType:
    if not isinstance(schema, dict):
        return default
    schema_type = schema.get("type")
    # OpenAPI 3.1 allows ["string", "null"]
    if isinstance(schema_type, list):
        schema_type = next((t for t in schema_type if t != "null"), None)
    if schema_type is None and ("properties" in schema or "allOf" in schema):
        return ParamType.OBJECT
    if not isinstance(schema_type, str):
        return default
    return _SCHEMA_TYPES.get(schema_type, default)


def _is_nullable(schema: Any) -> bool:
    if not isinstance(schema, dict):
        return False
    schema_type = schema.get("type")
    return schema.get("nullable") is True or (isinstance(schema_type, list) and "null" in schema_type)


def _to_parameter(p: dict) -> Parameter:
    # Swagger 2.0 puts type on the parameter itself
    schema = p.get("schema") if isinstance(p.get("schema"), dict) else p
    return Parameter(
        name=_text(p["name"]),
        type=_schema_type(schema, ParamType.STRING),
        nullable=p.get("required") is not True or _is_nullable(schema),
        description=_text(p.get("description")),
    )


def _parse_body_parameters(operation: dict, params: list[dict]) -> list[Parameter]:
    # Swagger 2.0
    form_params = [p for p in params if p.get("in") == "formData"]
    if form_params:
        return [_to_parameter(p) for p in form_params]
    for p in params:
        if p.get("in") == "body":
            return _schema_parameters(p.get("schema"))

    # OpenAPI 3.x
    body = operation.get("requestBody")
    if not isinstance(body, dict):
        return []
    media = _pick_media_type(body.get("content"))
    return _schema_parameters(media.get("schema") if media else None)


def _pick_media_type(content: Any) -> dict | None:
    if not isinstance(content, dict):
        return None
    if JSON_CONTENT_TYPE in content:
        media = content[JSON_CONTENT_TYPE]
    else:
        media = next((m for ct, m in content.items() if str(ct).endswith("+json")), None)
    if media is None:
        media = next((content[ct] for ct in FORM_CONTENT_TYPES if ct in content), None)
    if media is None:
        # Fallback: first available media type
        media = next(iter(content.values()), None)
    return media if isinstance(media, dict) else None


def _collect_properties(schema: dict) -> tuple[dict, set]:
    """Top-level properties and required names, merging allOf members one level deep."""
    props = schema.get("properties")
    properties = dict(props) if isinstance(props, dict) else {}
    required = _required_names(schema)
    for member in _as_list(schema.get("allOf")):
        if not isinstance(member, dict):
            continue
        member_props = member.get("properties")
        for name, prop in (member_props.items() if isinstance(member_props, dict) else ()):
            properties.setdefault(name, prop)
        required.update(_required_names(member))
    return properties, required


def _schema_parameters(schema: Any) -> list[Parameter]:
    if not isinstance(schema, dict):
        return []
    properties, required = _collect_properties(schema)
    return [
        Parameter(
            name=str(name),
            type=_schema_type(prop),
            nullable=name not in required or _is_nullable(prop),
            description=(_text(prop.get("description")) or None) if isinstance(prop, dict) else None,
        )
        for name, prop in properties.items()
        if name
    ]


def _example_response(responses: Any) -> Any:
    if not isinstance(responses, dict):
        return None
    for status_code, resp in responses.items():
        if not str(status_code).startswith("2") or not isinstance(resp, dict):
            continue
        # Swagger 2.0
        if isinstance(resp.get("examples"), dict) and JSON_CONTENT_TYPE in resp["examples"]:
            return resp["examples"][JSON_CONTENT_TYPE]
        media = _pick_media_type(resp.get("content"))
        return _media_example(media) if media else None
    return None


def _media_example(media: dict) -> Any:
    if "example" in media:
        return media["example"]
    examples = media.get("examples")
    for example in (examples.values() if isinstance(examples, dict) else ()):
        if isinstance(example, dict):
            return example.get("value")
    schema = media.get("schema")
    if isinstance(schema, dict):
        return schema.get("example")
    return None
