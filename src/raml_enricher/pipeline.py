"""Parse a RAML source and enrich it for template rendering."""

import logging

from raml_enricher.enrich.annotations import rename_errors
from raml_enricher.enrich.base_uri import normalize_base_uri
from raml_enricher.enrich.documentation import index_documentation
from raml_enricher.enrich.resources import walk_resources
from raml_enricher.enrich.schemas import decode_schemas
from raml_enricher.parser.base import Document
from raml_enricher.parser.raml import RamlLoader, RamlLoaderProtocol
from raml_enricher.parser.source import resolve_source

logger = logging.getLogger(__name__)

# Applied in this order, each one mutating and returning the document.
ENRICHMENT_PASSES = (
    normalize_base_uri,
    walk_resources,
    index_documentation,
    decode_schemas,
    rename_errors,
)


async def parse(source, loader: RamlLoaderProtocol | None = None) -> Document:
    """Load *source* and return the enriched Document.

    *source* may be a file path, an http(s) URL, RAML text, bytes, a
    mapping shaped like a parsed document, or a Document. Any failure
    (RamlEnricherError subclasses) aborts the whole operation.
    """
    document = await resolve_source(source, loader or RamlLoader())
    for enrich in ENRICHMENT_PASSES:
        logger.debug("Running %s", enrich.__name__)
        document = enrich(document)
    return document
