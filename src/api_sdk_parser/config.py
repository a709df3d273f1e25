"""Defaults and options shared by the CLI and the parsers."""

from pydantic import BaseModel

DEFAULT_FORMAT = "auto"
DEFAULT_OUTPUT_FORMAT = "json"

FORMATS = ("auto", "openapi", "postman")
OUTPUT_FORMATS = ("json", "yaml")

ENV_FORMAT = "API_SDK_PARSER_FORMAT"
ENV_OUTPUT_FORMAT = "API_SDK_PARSER_OUTPUT_FORMAT"
ENV_PLACEHOLDERS_ONLY = "API_SDK_PARSER_PLACEHOLDERS_ONLY"
YAML_SUFFIXES = (".yaml", ".yml")


class ParseOptions(BaseModel):
    """Options passed through to the selected parser."""

    placeholders_only: bool = False  # only {id} / :id segments become path params


def output_format_for(path, default: str = DEFAULT_OUTPUT_FORMAT) -> str:
    """Pick json or yaml from an output file suffix."""
    if path is not None and str(path).lower().endswith(YAML_SUFFIXES):
        return "yaml"
    return default
