"""RAML document loader.

Reads RAML from a local file, a URL or in-memory text and converts it into
a :class:`Document` laid out the way the enrichment passes expect: an
ordered ``resources`` list, methods keyed by verb and URI parameters that
always carry a ``displayName``. Resource types and traits are merged into
the resources and methods that use them (see :mod:`.composition`).
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Protocol

import httpx
import yaml
from pydantic import ValidationError

from .base import Document
from .composition import Declarations, require_mapping
from .errors import UnderlyingParseError

logger = logging.getLogger(__name__)

RAML_HEADER = "#%RAML"
DEFAULT_HTTP_TIMEOUT = 10.0
HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options", "trace", "connect")
YAML_INCLUDE_SUFFIXES = (".raml", ".yaml", ".yml")

_TEMPLATE_VARIABLE = re.compile(r"\{([^{}]+)\}")


class RamlLoaderProtocol(Protocol):
    """What the pipeline needs from a RAML parser."""

    async def load_file(self, location: str, *, validate: bool = False) -> Document: ...

    async def load(self, text: str, *, validate: bool = False) -> Document: ...


class RamlLoader:
    """Default RAML loader backed by PyYAML and httpx."""

    def __init__(
        self,
        http_timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.http_timeout = http_timeout
        self.transport = transport

    async def load_file(self, location: str, *, validate: bool = False) -> Document:
        """Load RAML from a local path or an http(s) URL."""
        if location.startswith(("http://", "https://")):
            logger.debug("Fetching RAML from %s", location)
            text = await self._fetch(location)
            # Includes of remote documents are not followed
            return _build_document(text, base_dir=None, validate=validate)

        logger.debug("Reading RAML from %s", location)
        # Includes are read while building, so the whole build runs off the loop
        return await asyncio.to_thread(_read_document, Path(location), validate)

    async def load(self, text: str, *, validate: bool = False) -> Document:
        """Load RAML from in-memory text. Includes resolve against the working directory."""
        return await asyncio.to_thread(_build_document, text, Path.cwd(), validate)

    async def _fetch(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.http_timeout,
            transport=self.transport,
            follow_redirects=True,
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise UnderlyingParseError(f"Cannot load {url}: {e}") from e
        return response.text


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise UnderlyingParseError(f"Cannot read {what}{path}: {e}") from e
    except UnicodeDecodeError as e:
        raise UnderlyingParseError(f"Cannot read {what}{path}: not valid UTF-8 ({e.reason})") from e


def _read_document(path: Path, validate: bool) -> Document:
    return _build_document(_read_text(path, ""), base_dir=path.parent, validate=validate)


def _build_document(text: str, base_dir: Path | None, validate: bool) -> Document:
    if not text.lstrip("\ufeff").startswith(RAML_HEADER):
        raise UnderlyingParseError(f"Not a RAML document: missing '{RAML_HEADER}' header")

    try:
        data = yaml.load(text, Loader=_include_loader(base_dir))
    except yaml.YAMLError as e:
        raise UnderlyingParseError(f"Invalid RAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise UnderlyingParseError("Invalid RAML: the document root must be a mapping")

    if validate:
        _validate(data)

    try:
        return Document.model_validate(_normalize_root(data))
    except ValidationError as e:
        raise UnderlyingParseError(f"Invalid RAML: {e}") from e


def _include_loader(base_dir: Path | None) -> type[yaml.SafeLoader]:
    """Build a SafeLoader that resolves ``!include`` relative to *base_dir*."""

    class IncludeLoader(yaml.SafeLoader):
        pass

    def _include(loader: yaml.SafeLoader, node: yaml.Node):
        target = loader.construct_scalar(node)
        if base_dir is None:
            raise UnderlyingParseError(f"Cannot include {target!r} from a remote document")

        path = base_dir / target
        text = _read_text(path, "included file ")

        if path.suffix.lower() in YAML_INCLUDE_SUFFIXES:
            try:
                return yaml.load(text, Loader=_include_loader(path.parent))
            except yaml.YAMLError as e:
                raise UnderlyingParseError(f"Invalid included file {path}: {e}") from e
        return text

    IncludeLoader.add_constructor("!include", _include)
    return IncludeLoader


def _validate(data: dict) -> None:
    if not data.get("title"):
        raise UnderlyingParseError("Invalid RAML: missing title")
    base_uri = data.get("baseUri") or ""
    if "{version}" in base_uri and data.get("version") is None:
        raise UnderlyingParseError("Invalid RAML: baseUri uses {version} but no version is declared")


def _normalize_root(data: dict) -> dict:
    declarations = Declarations.from_root(data, HTTP_METHODS)
    root: dict = {}
    resources = []
    for key, value in data.items():
        if isinstance(key, str) and key.startswith("/"):
            resources.append(_normalize_resource(key, value, "", declarations))
        else:
            root[key] = value
    root["resources"] = resources

    base_uri = root.get("baseUri")
    if base_uri:
        params = _with_implicit_parameters(
            base_uri,
            _normalize_parameters(root.get("baseUriParameters"), "baseUriParameters"),
            skip=("version",),
        )
        if params:
            root["baseUriParameters"] = params

    # RAML 1.0 style: a single mapping instead of a list of mappings
    if isinstance(root.get("schemas"), dict):
        root["schemas"] = [root["schemas"]]

    return root


def _normalize_resource(relative_uri: str, body, parent_path: str, declarations: Declarations) -> dict:
    resource_path = parent_path + relative_uri
    body = declarations.expand(require_mapping(body, f"resource {resource_path}"), resource_path)

    resource: dict = {"relativeUri": relative_uri, "displayName": relative_uri}
    methods: dict = {}
    children: list = []

    for key, value in body.items():
        if isinstance(key, str) and key.startswith("/"):
            children.append(_normalize_resource(key, value, resource_path, declarations))
        elif isinstance(key, str) and key.lower() in HTTP_METHODS:
            verb = key.lower()
            method = require_mapping(value, f"method {key!r} of {resource_path}")
            methods[verb] = {**method, "method": verb}
        else:
            resource[key] = value

    params = _with_implicit_parameters(
        relative_uri,
        _normalize_parameters(resource.get("uriParameters"), f"uriParameters of {resource_path}"),
    )
    if params:
        resource["uriParameters"] = params
    else:
        resource.pop("uriParameters", None)
    if methods:
        resource["methods"] = methods
    if children:
        resource["resources"] = children
    return resource


def _normalize_parameters(params, what: str) -> dict:
    result = {}
    for name, spec in require_mapping(params, what).items():
        spec = require_mapping(spec, f"parameter {name!r} in {what}")
        result[name] = {"displayName": name, **spec}
    return result


def _with_implicit_parameters(template: str, params: dict, skip: tuple = ()) -> dict:
    """Add string parameters for template variables that are not declared."""
    for name in _TEMPLATE_VARIABLE.findall(template):
        if name in params or name in skip:
            continue
        params[name] = {"displayName": name, "type": "string", "required": True}
    return params
