"""CLI entry point for api-sdk-parser."""

import json
import logging
from fnmatch import fnmatch
from pathlib import Path

import click
import yaml

from api_sdk_parser.config import (
    DEFAULT_FORMAT,
    ENV_FORMAT,
    ENV_OUTPUT_FORMAT,
    ENV_PLACEHOLDERS_ONLY,
    FORMATS,
    OUTPUT_FORMATS,
    ParseOptions,
    output_format_for,
)
from api_sdk_parser.errors import SpecError
from api_sdk_parser.parser.base import Endpoint
from api_sdk_parser.parser.detect import parse_file

NO_COLLECTION = "(none)"


def _parse_doc(file_path: Path, fmt: str, placeholders_only: bool = False) -> list[Endpoint]:
    """Parse API document, turning load failures into CLI errors."""
    try:
        return parse_file(file_path, fmt, ParseOptions(placeholders_only=placeholders_only))
    except SpecError as e:
        raise click.ClickException(str(e)) from e


def _filter_endpoints(endpoints: list[Endpoint], patterns: tuple[str, ...]) -> list[Endpoint]:
    """Keep endpoints matching any "METHOD /path" or "/path" glob pattern."""
    result = []
    for ep in endpoints:
        for pattern in patterns:
            method, _, path_pattern = pattern.strip().rpartition(" ")
            if method and ep.method != method.strip().upper():
                continue
            if fnmatch(ep.path, path_pattern):
                result.append(ep)
                break
    return result


def _render(endpoints: list[Endpoint], output_format: str) -> str:
    data = [ep.model_dump(mode="json") for ep in endpoints]
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _group_by_collection(endpoints: list[Endpoint]) -> dict[str, list[Endpoint]]:
    """Group endpoints by collection, keeping first-seen order."""
    groups: dict[str, list[Endpoint]] = {}
    for ep in endpoints:
        groups.setdefault(ep.collection or NO_COLLECTION, []).append(ep)
    return groups


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """API SDK Parser — normalize OpenAPI and Postman documents into endpoint lists."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Output file. Prints to stdout when omitted.")
@click.option("--format", "fmt", default=DEFAULT_FORMAT, envvar=ENV_FORMAT, type=click.Choice(FORMATS), help="Document format.")
@click.option("--output-format", default=None, envvar=ENV_OUTPUT_FORMAT, type=click.Choice(OUTPUT_FORMATS), help="json or yaml. Defaults from the output file suffix.")
@click.option("--placeholders-only", is_flag=True, envvar=ENV_PLACEHOLDERS_ONLY, help="Only {id} / :id segments become path parameters.")
@click.option("--endpoint", "endpoint_patterns", multiple=True, help='Only include matching endpoints, e.g. "GET /users/*".')
@click.option("--force", is_flag=True, help="Overwrite an existing output file.")
def parse(doc_path: Path, output: Path | None, fmt: str, output_format: str | None,
          placeholders_only: bool, endpoint_patterns: tuple[str, ...], force: bool):
    """Parse an API document and dump its endpoints as JSON or YAML."""
    endpoints = _parse_doc(doc_path, fmt, placeholders_only)
    if endpoint_patterns:
        endpoints = _filter_endpoints(endpoints, endpoint_patterns)

    rendered = _render(endpoints, output_format or output_format_for(output))
    if output is None:
        click.echo(rendered, nl=False)
        return

    if output.exists() and not force:
        raise click.ClickException(f"File already exists: {output} (use --force to overwrite)")

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered, encoding="utf-8")
    click.echo(f"Wrote {len(endpoints)} endpoints to {output}")


@main.command("list")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", default=DEFAULT_FORMAT, envvar=ENV_FORMAT, type=click.Choice(FORMATS), help="Document format.")
def list_endpoints(doc_path: Path, fmt: str):
    """Print endpoints grouped by collection."""
    endpoints = _parse_doc(doc_path, fmt)
    for collection, group in _group_by_collection(endpoints).items():
        click.echo(f"{collection}:")
        for ep in group:
            click.echo(f"  {ep.method} {ep.path}  {ep.name}")
    click.echo(f"Found {len(endpoints)} endpoints.")
