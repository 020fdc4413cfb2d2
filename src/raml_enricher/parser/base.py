"""Data models for parsed RAML documents.

The loader produces these models and every enrichment pass reads and
writes them. Attributes are snake_case; the camelCase names used by RAML
(``baseUri``, ``relativeUri``, ...) are accepted as aliases and used when
dumping. Unknown keys are kept as extra fields.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Annotation key that holds the error catalogue of a document
ERRORS_ANNOTATION_KEY = "(errors)"


class RamlModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class UriParameter(RamlModel):
    """A named placeholder in a resource path or base URI."""

    display_name: str | None = None
    type: str = "string"
    required: bool = True
    description: str | None = None
    example: Any = None
    enum: list | None = None


class Method(RamlModel):
    """A single HTTP method declared on a resource."""

    method: str | None = None  # get / post / put / delete / patch ...
    description: str | None = None
    query_parameters: dict[str, Any] | None = None
    body: dict[str, Any] | None = None
    responses: dict[Any, Any] | None = None  # status codes may be ints
    # Same list object as the owning resource's, set by the walker.
    all_uri_parameters: list[UriParameter] | None = None


class Resource(RamlModel):
    """A node of the resource tree."""

    relative_uri: str
    display_name: str | None = None
    description: str | None = None
    parent_url: str | None = None
    unique_id: str | None = None
    uri_parameters: dict[str, UriParameter] | None = None
    all_uri_parameters: list[UriParameter] | None = None
    methods: dict[str, Method] | None = None
    resources: list["Resource"] | None = None


class DocSection(RamlModel):
    title: str
    content: str = ""
    unique_id: str | None = None


class Document(RamlModel):
    """Root of a parsed RAML document."""

    title: str | None = None
    version: str | None = None
    base_uri: str | None = None
    base_uri_parameters: dict[str, UriParameter] | None = None
    media_type: str | None = None
    protocols: list[str] | None = None
    resources: list[Resource] = []
    documentation: list[DocSection] = []
    schemas: list[dict[str, str]] = []
    parsed_schemas: dict[str, Any] | None = None
    error_annotations: Any = Field(default=None, alias=ERRORS_ANNOTATION_KEY)
    errors: Any = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, value: Any) -> Any:
        # YAML reads "version: 1" as an int
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
