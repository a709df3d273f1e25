"""Postman Collection v2.x parser.

Walks the nested folder/request tree of a decoded collection and flattens it
into Endpoint models, tagging each one with its nearest real folder name.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel

from .base import Endpoint, Parameter, ParamType, Parser

logger = logging.getLogger(__name__)


class Body(BaseModel):
    mode: str | None = None
    raw: str | None = None

    def raw_as_json(self) -> Any:
        """Decode the raw body example, or None if there is nothing usable."""
        if self.mode not in (None, "raw") or not self.raw:
            return None
        try:
            return json.loads(self.raw)
        except json.JSONDecodeError:
            return None


class Url(BaseModel):
    raw: str | None = None
    path: list[str] = []
    query: list[dict] = []

    @classmethod
    def from_json(cls, data: Any) -> "Url":
        if isinstance(data, str):
            path, query = _split_raw_url(data)
            return cls(raw=data, path=path, query=query)
        if not isinstance(data, dict):
            return cls()

        raw = data.get("raw") if isinstance(data.get("raw"), str) else None
        path = data.get("path")
        query = data.get("query")
        if path is None and query is None and raw:
            path, query = _split_raw_url(raw)
        if isinstance(path, str):
            path = [s for s in path.split("/") if s]

        return cls(
            raw=raw,
            path=[_segment_value(s) for s in path] if isinstance(path, list) else [],
            query=[q for q in query if isinstance(q, dict)] if isinstance(query, list) else [],
        )


class Request(BaseModel):
    method: str = "GET"
    url: Url = Url()
    body: Body | None = None
    description: str = ""

    @classmethod
    def from_json(cls, data: Any) -> "Request":
        # A bare string is shorthand for a GET to that URL
        if isinstance(data, str):
            return cls(url=Url.from_json(data))
        if not isinstance(data, dict):
            return cls()

        body = data.get("body")
        if isinstance(body, dict):
            mode = body.get("mode")
            body = Body(mode=mode if isinstance(mode, str) else None, raw=_raw_text(body.get("raw")))
        else:
            body = None

        return cls(
            method=str(data.get("method") or "GET").upper(),
            url=Url.from_json(data.get("url")),
            body=body,
            description=_text(data.get("description")),
        )


class Item(BaseModel):
    """A leaf node: one concrete request."""

    name: str = ""
    description: str = ""
    request: Request = Request()


class ItemGroup(BaseModel):
    """A folder holding requests and/or further folders."""

    name: str = ""
    item: list["ItemGroup | Item"] = []


ItemGroup.model_rebuild()


class PostmanCollection(BaseModel):
    name: str = ""
    item: list[ItemGroup | Item] = []

    @classmethod
    def from_json(cls, data: dict) -> "PostmanCollection":
        info = data.get("info") if isinstance(data.get("info"), dict) else {}
        return cls(name=str(info.get("name") or ""), item=_build_nodes(data.get("item")))


def _build_nodes(items: Any) -> list[ItemGroup | Item]:
    nodes: list[ItemGroup | Item] = []
    for raw in items if isinstance(items, list) else []:
        node = _build_node(raw)
        if node is None:
            logger.debug("Skipping collection node that is neither a folder nor a request: %r", raw)
            continue
        nodes.append(node)
    return nodes


def _build_node(raw: Any) -> ItemGroup | Item | None:
    if not isinstance(raw, dict):
        return None
    name = str(raw.get("name") or "")
    if isinstance(raw.get("item"), list):
        return ItemGroup(name=name, item=_build_nodes(raw["item"]))
    if "request" in raw:
        return Item(
            name=name,
            description=_text(raw.get("description")),
            request=Request.from_json(raw["request"]),
        )
    return None


def _text(value: Any) -> str:
    """Postman descriptions are either plain strings or {content, type} objects."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return str(value.get("content") or "")
    return ""


def _raw_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    # Some exporters inline the body as already-decoded JSON
    return json.dumps(value)


def _segment_value(segment: Any) -> str:
    if isinstance(segment, dict):
        return str(segment.get("value") or "")
    return "" if segment is None else str(segment)


def _split_raw_url(raw: str) -> tuple[list[str], list[dict]]:
    """Split "{{host}}/customers/:id?expand=true" into path segments and query entries."""
    base, _, query = raw.partition("?")
    base = base.split("#", 1)[0]
    if "://" in base:
        base = base.split("://", 1)[1]
    # First component is the host (or a {{baseUrl}} variable)
    path = [p for p in base.split("/")[1:] if p]
    # Keys stay exactly as written, no URL decoding
    entries = []
    for pair in query.split("#", 1)[0].split("&"):
        if pair:
            key, _, value = pair.partition("=")
            entries.append({"key": key, "value": value})
    return path, entries


def _is_pseudo_folder(name: str) -> bool:
    """Folders like "{customer_id}" stand for a path parameter, not a collection."""
    return "{" in name or "}" in name


def _placeholder_name(segment: str) -> str | None:
    if len(segment) > 2 and segment.startswith("{") and segment.endswith("}"):
        return segment[1:-1]
    if len(segment) > 1 and segment.startswith(":"):
        return segment[1:]
    return None


class PostmanCollectionParser(Parser):
    """Flattens a Postman collection into endpoints in tree pre-order.

    With ``placeholders_only`` set, only ``{id}`` / ``:id`` segments become
    path parameters (named without the placeholder syntax). By default every
    non-empty path segment does, literals included.
    """

    def __init__(self, placeholders_only: bool = False):
        self.placeholders_only = placeholders_only

    def parse(self, document: PostmanCollection | dict) -> list[Endpoint]:
        if not isinstance(document, PostmanCollection):
            document = PostmanCollection.from_json(document)
        # The stack lives per call so parses never share state
        return self._parse_items(document.item, [])

    def _parse_items(self, items: list[ItemGroup | Item], collections: list[str]) -> list[Endpoint]:
        endpoints: list[Endpoint] = []
        for item in items:
            if isinstance(item, ItemGroup):
                if not _is_pseudo_folder(item.name):
                    collections.append(item.name)
                endpoints.extend(self._parse_items(item.item, collections))
                # Popped even when this group pushed nothing
                if collections:
                    collections.pop()
            elif isinstance(item, Item):
                endpoints.append(self._parse_endpoint(item, collections[-1] if collections else None))
        return endpoints

    def _parse_endpoint(self, item: Item, collection: str | None) -> Endpoint:
        req = item.request
        return Endpoint(
            name=item.name,
            method=req.method.upper(),
            path_segments=list(req.url.path),
            collection=collection,
            description=item.description or req.description,
            response=req.body.raw_as_json() if req.body else None,
            query_parameters=self._parse_query_parameters(req),
            path_parameters=self._parse_path_parameters(req),
            body_parameters=self._parse_body_parameters(req),
        )

    def _parse_query_parameters(self, req: Request) -> list[Parameter]:
        params = []
        for entry in req.url.query:
            key = entry.get("key")
            if not key:
                logger.debug("Dropping query entry without a key: %r", entry)
                continue
            params.append(
                Parameter(
                    name=str(key),
                    type=ParamType.STRING,
                    nullable=True,
                    description=_text(entry.get("description")),
                )
            )
        return params

    def _parse_path_parameters(self, req: Request) -> list[Parameter]:
        params = []
        for segment in req.url.path:
            if not segment:
                continue
            name = segment
            if self.placeholders_only:
                name = _placeholder_name(segment)
                if name is None:
                    continue
            params.append(Parameter(name=name, type=ParamType.STRING, nullable=True))
        return params

    def _parse_body_parameters(self, req: Request) -> list[Parameter]:
        body = req.body.raw_as_json() if req.body else None
        if not isinstance(body, dict):
            return []
        return [
            Parameter(name=key, type=ParamType.MIXED, nullable=True)
            for key in body
            if key
        ]
