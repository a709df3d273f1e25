"""Canonical data models for parsed API descriptions.

Every parser (OpenAPI, Postman) converts its input into these models,
so the code emitter downstream never has to know which format it came from.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel


class ParamType(str, Enum):
    """Coarse semantic type of a parameter.

    MIXED means no type information was available in the source.
    """

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    MIXED = "mixed"


class Parameter(BaseModel):
    """A single input to an endpoint (query, path, or body)."""

    name: str
    type: ParamType
    nullable: bool = True
    description: str | None = None


class Endpoint(BaseModel):
    """A single HTTP operation extracted from an API description."""

    name: str
    method: str  # GET / POST / PUT / DELETE / PATCH
    path_segments: list[str]  # ["customers", "{id}"]
    collection: str | None = None
    description: str = ""
    response: Any = None  # example body, a hint only
    query_parameters: list[Parameter] = []
    path_parameters: list[Parameter] = []
    body_parameters: list[Parameter] = []

    @property
    def path(self) -> str:
        return "/" + "/".join(self.path_segments)


class Parser(ABC):
    """Turns one decoded API description into an ordered list of endpoints."""

    @abstractmethod
    def parse(self, document: Any) -> list[Endpoint]:
        """Parse a decoded document.

        Endpoints come back in document order. Malformed entries are
        skipped or defaulted, never raised.
        """
