"""Decode the JSON schemas embedded in a document."""

import json

from raml_enricher.parser.base import Document
from raml_enricher.parser.errors import SchemaDecodeError


def decode_schemas(document: Document) -> Document:
    """Fill ``parsed_schemas`` with every entry of ``schemas``, decoded.

    ``schemas`` is a list of mappings; a name appearing more than once keeps
    its last value. Any schema that is not valid JSON aborts the pipeline.
    """
    parsed = document.parsed_schemas if document.parsed_schemas is not None else {}
    for group in document.schemas:
        for name, text in group.items():
            try:
                parsed[name] = json.loads(text)
            except json.JSONDecodeError as e:
                raise SchemaDecodeError(name, str(e)) from e
    document.parsed_schemas = parsed
    return document
