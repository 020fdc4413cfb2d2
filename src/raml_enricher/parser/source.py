"""Turn whatever the caller handed us into a raw Document."""

import logging
import os
from collections.abc import Mapping

from pydantic import ValidationError

from .base import Document
from .errors import InvalidSourceKind, UnderlyingParseError
from .raml import RamlLoaderProtocol

logger = logging.getLogger(__name__)

# Enrichment works on unvalidated documents
LOAD_SETTINGS = {"validate": False}


async def resolve_source(source, loader: RamlLoaderProtocol) -> Document:
    """Load *source* into a Document.

    Accepts a local file path or URL (``str`` or path-like), RAML text,
    ``bytes``-like RAML content, a mapping shaped like a parsed document,
    or a Document. Mappings and Documents are not parsed again.
    """
    if isinstance(source, str):
        if os.path.exists(source) or source.startswith("http"):
            logger.debug("Loading RAML from file or URL %s", source)
            return await loader.load_file(source, **LOAD_SETTINGS)
        logger.debug("Loading RAML from text")
        return await loader.load(source, **LOAD_SETTINGS)

    if isinstance(source, os.PathLike):
        logger.debug("Loading RAML from file %s", source)
        return await loader.load_file(os.fspath(source), **LOAD_SETTINGS)

    if isinstance(source, (bytes, bytearray, memoryview)):
        logger.debug("Loading RAML from %d bytes", len(source))
        return await loader.load(bytes(source).decode("utf-8", errors="replace"), **LOAD_SETTINGS)

    if isinstance(source, Document):
        return source
    if isinstance(source, Mapping):
        try:
            return Document.model_validate(dict(source))
        except ValidationError as e:
            raise UnderlyingParseError(f"Invalid document object: {e}") from e

    raise InvalidSourceKind(source)
