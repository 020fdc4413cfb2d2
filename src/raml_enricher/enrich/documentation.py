"""Give each top-level documentation section an anchor-friendly id."""

import re

from raml_enricher.parser.base import Document

_NON_WORD = re.compile(r"[^A-Za-z0-9_]")


def index_documentation(document: Document) -> Document:
    """Set ``unique_id`` on each documentation section from its title."""
    for section in document.documentation:
        section.unique_id = _NON_WORD.sub("-", section.title)
    return document
