"""Exceptions raised while resolving and enriching a RAML document."""


class RamlEnricherError(Exception):
    """Base class for every error raised by raml-enricher."""


class InvalidSourceKind(RamlEnricherError, TypeError):
    """The source is not a path, URL, RAML text, bytes or a document object."""

    def __init__(self, source: object):
        self.source = source
        super().__init__(
            "You must supply either a file path, a URL, RAML text, bytes "
            f"or a document object as source (got {type(source).__name__})."
        )


class UnderlyingParseError(RamlEnricherError):
    """The RAML loader could not read or parse the source."""


class SchemaDecodeError(RamlEnricherError, ValueError):
    """An embedded schema is not valid JSON."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Schema {name!r} is not valid JSON: {reason}")
