"""Substitute the document version into its base URI."""

from raml_enricher.parser.base import Document

VERSION_PLACEHOLDER = "{version}"


def normalize_base_uri(document: Document) -> Document:
    """Replace the first ``{version}`` in the base URI with the document version."""
    if document.base_uri:
        version = document.version if document.version is not None else "undefined"
        document.base_uri = document.base_uri.replace(VERSION_PLACEHOLDER, version, 1)
    return document
