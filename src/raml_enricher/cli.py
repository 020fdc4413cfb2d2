"""CLI entry point for raml-enricher."""

import asyncio
import json
import logging
from pathlib import Path

import click
import yaml

from raml_enricher.parser.base import Document
from raml_enricher.parser.errors import RamlEnricherError
from raml_enricher.pipeline import parse


def _render(document: Document, fmt: str) -> str:
    """Serialize the enriched tree the way a template engine would see it."""
    data = document.model_dump(mode="json", by_alias=True, exclude_none=True)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


@click.command()
@click.argument("source")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the enriched document to this file instead of stdout.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
@click.option("-v", "--verbose", is_flag=True, help="Log each loading and enrichment step.")
def main(source: str, output: Path | None, fmt: str, verbose: bool):
    """Parse a RAML file, URL or text and print the enriched document."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        document = asyncio.run(parse(source))
    except RamlEnricherError as e:
        raise click.ClickException(str(e)) from e

    result = _render(document, fmt)
    if output is None:
        click.echo(result, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result, encoding="utf-8")
    click.echo(f"Enriched document saved to {output}", err=True)
