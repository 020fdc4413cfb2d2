"""Move the ``(errors)`` annotation to a plain ``errors`` field.

Template engines cannot address a key with parentheses in it.
"""

from raml_enricher.parser.base import Document


def rename_errors(document: Document) -> Document:
    """Move the ``(errors)`` value to ``errors`` and clear the annotation."""
    # Overwrites any existing ``errors`` value.
    document.errors = document.error_annotations
    document.error_annotations = None
    return document
