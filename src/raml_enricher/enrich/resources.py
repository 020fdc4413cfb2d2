"""Resource tree walker.

Visits every resource depth-first, in declaration order, and attaches:

- ``parent_url``: the joined relative URIs of all ancestors
- ``unique_id``: ``parent_url + relative_uri`` reduced to word characters
- ``all_uri_parameters``: ancestor parameters followed by the resource's own,
  shared by reference with every method of the resource

The parser disambiguates identically named parameters at different depths
by appending one digit (``{id1}``). That digit is stripped from the first
such placeholder in ``relative_uri`` and from parameter display names.
"""

import re

from raml_enricher.parser.base import Document, Resource, UriParameter

_NON_WORD = re.compile(r"[^A-Za-z0-9_]")
_NUMBERED_PLACEHOLDER = re.compile(r"\{([^0-9]+)[0-9]\}")
_NUMBERED_NAME = re.compile(r"([^0-9]+)[0-9]")


def walk_resources(document: Document) -> Document:
    """Annotate every resource and method of *document* in place."""
    _walk(document.resources, "", [])
    return document


def make_unique_id(resource: Resource) -> str:
    """Derive an identifier from the resource's full path."""
    full_url = resource.parent_url + resource.relative_uri
    return _NON_WORD.sub("_", full_url).lstrip("_")


def strip_placeholder_suffix(relative_uri: str) -> str:
    """``/{orgId2}`` -> ``/{orgId}``; only the first match is rewritten."""
    return _NUMBERED_PLACEHOLDER.sub(r"{\1}", relative_uri, count=1)


def strip_name_suffix(display_name: str) -> str:
    """``orgId2`` -> ``orgId``; the whole name must match."""
    match = _NUMBERED_NAME.fullmatch(display_name)
    return match.group(1) if match else display_name


def _walk(
    resources: list[Resource] | None,
    parent_url: str,
    inherited: list[UriParameter],
) -> None:
    for resource in resources or []:
        resource.parent_url = parent_url
        resource.unique_id = make_unique_id(resource)
        resource.relative_uri = strip_placeholder_suffix(resource.relative_uri)

        all_uri_parameters = list(inherited)
        for param in (resource.uri_parameters or {}).values():
            if param.display_name is not None:
                param.display_name = strip_name_suffix(param.display_name)
            all_uri_parameters.append(param)
        resource.all_uri_parameters = all_uri_parameters

        for method in (resource.methods or {}).values():
            method.all_uri_parameters = all_uri_parameters

        _walk(resource.resources, parent_url + resource.relative_uri, all_uri_parameters)
