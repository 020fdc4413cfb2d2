"""Apply RAML resource types (``type:``) and traits (``is:``).

Works on the raw YAML mappings before they are reshaped into models.
Declared values always win over inherited ones; mappings are merged
recursively and optional keys (``get?``) are only applied when the
resource or method already declares the key. ``<<parameters>>`` are
substituted, including the reserved ``resourcePath``, ``resourcePathName``
and ``methodName``, with the ``!singularize`` and ``!pluralize`` functions.
"""

import copy
import re

from .errors import UnderlyingParseError

_PARAMETER = re.compile(r"<<\s*([^<>|\s]+)\s*(?:\|\s*!(\w+)\s*)?>>")
# Keys of a resource type or trait that describe the declaration itself
_DECLARATION_ONLY_KEYS = ("usage",)


def require_mapping(value, what: str) -> dict:
    """Return *value* as a dict (``None`` becomes ``{}``) or fail naming *what*."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise UnderlyingParseError(f"Invalid RAML: {what} must be a mapping, got {type(value).__name__}")
    return value


class Declarations:
    """The resource types and traits declared at the root of a document."""

    def __init__(self, resource_types: dict[str, dict], traits: dict[str, dict], methods: tuple[str, ...]):
        self.resource_types = resource_types
        self.traits = traits
        self.methods = methods

    @classmethod
    def from_root(cls, data: dict, methods: tuple[str, ...]) -> "Declarations":
        return cls(
            _collect(data.get("resourceTypes"), "resourceTypes"),
            _collect(data.get("traits"), "traits"),
            methods,
        )

    def expand(self, body: dict, resource_path: str) -> dict:
        """Merge the resource type and then the traits into a resource body."""
        body = self._apply_resource_type(body, resource_path, seen=())
        return self._apply_traits(body, resource_path)

    def _is_method(self, key) -> bool:
        return isinstance(key, str) and key.rstrip("?").lower() in self.methods

    def _apply_resource_type(self, body: dict, resource_path: str, seen: tuple) -> dict:
        if body.get("type") is None:
            return body

        name, params = _reference(body["type"], "resource type")
        if name not in self.resource_types:
            raise UnderlyingParseError(f"Invalid RAML: undeclared resource type {name!r} at {resource_path}")
        if name in seen:
            raise UnderlyingParseError(f"Invalid RAML: circular resource type {name!r}")

        params = {**_reserved(resource_path), **params}
        inherited = {}
        for key, value in self.resource_types[name].items():
            if key in _DECLARATION_ONLY_KEYS:
                continue
            if self._is_method(key):
                value = _substitute(value, {**params, "methodName": key.rstrip("?").lower()})
            else:
                value = _substitute(value, params)
            inherited[key] = value

        # A resource type may itself be based on another one
        inherited = self._apply_resource_type(inherited, resource_path, seen + (name,))
        merged = _merge(body, inherited)
        merged["type"] = body["type"]
        return merged

    def _apply_traits(self, body: dict, resource_path: str) -> dict:
        resource_refs = _as_list(body.get("is"))
        result = dict(body)
        for key, value in body.items():
            if not self._is_method(key):
                continue
            method = require_mapping(value, f"method {key!r} of {resource_path}")
            for ref in resource_refs + _as_list(method.get("is")):
                name, params = _reference(ref, "trait")
                if name not in self.traits:
                    raise UnderlyingParseError(f"Invalid RAML: undeclared trait {name!r} at {resource_path}")
                trait = {
                    k: v for k, v in self.traits[name].items() if k not in _DECLARATION_ONLY_KEYS
                }
                params = {**_reserved(resource_path), "methodName": key.lower(), **params}
                method = _merge(method, _substitute(trait, params))
            result[key] = method
        return result


def _collect(declarations, kind: str) -> dict[str, dict]:
    """Flatten a mapping, or a list of single-key mappings, into one dict."""
    if declarations is None:
        return {}
    if isinstance(declarations, dict):
        declarations = [declarations]
    if not isinstance(declarations, list):
        raise UnderlyingParseError(f"Invalid RAML: {kind} must be a mapping or a list of mappings")

    result = {}
    for group in declarations:
        for name, body in require_mapping(group, kind).items():
            result[name] = require_mapping(body, f"{kind} entry {name!r}")
    return result


def _reference(ref, kind: str) -> tuple[str, dict]:
    """``collection`` or ``{collection: {param: value}}`` -> (name, params)."""
    if isinstance(ref, str):
        return ref, {}
    if isinstance(ref, dict) and len(ref) == 1:
        name, params = next(iter(ref.items()))
        return name, require_mapping(params, f"parameters of {kind} {name!r}")
    raise UnderlyingParseError(f"Invalid RAML: bad {kind} reference {ref!r}")


def _as_list(refs) -> list:
    if refs is None:
        return []
    return refs if isinstance(refs, list) else [refs]


def _reserved(resource_path: str) -> dict:
    names = [s for s in resource_path.split("/") if s and "{" not in s]
    return {
        "resourcePath": resource_path,
        "resourcePathName": names[-1] if names else "",
    }


def _substitute(value, params: dict):
    """Replace ``<<name>>`` placeholders in every string of *value* (keys included)."""
    if isinstance(value, str):
        def _replace(match: re.Match) -> str:
            name, function = match.group(1), match.group(2)
            if name not in params:
                raise UnderlyingParseError(f"Invalid RAML: no value for parameter <<{name}>>")
            return _transform(str(params[name]), function)

        return _PARAMETER.sub(_replace, value)
    if isinstance(value, dict):
        return {_substitute(k, params): _substitute(v, params) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute(item, params) for item in value]
    return value


def _transform(text: str, function: str | None) -> str:
    if function is None:
        return text
    if function == "singularize":
        return text[:-1] if text.endswith("s") else text
    if function == "pluralize":
        return text if text.endswith("s") else text + "s"
    raise UnderlyingParseError(f"Invalid RAML: unknown parameter function !{function}")


def _merge(declared: dict, inherited: dict) -> dict:
    """Deep-merge *inherited* under *declared*; declared values win."""
    result = dict(declared)
    for key, value in inherited.items():
        if isinstance(key, str) and key.endswith("?"):
            key = key[:-1]
            if key not in declared:
                continue
        if key not in result or result[key] is None:
            result[key] = copy.deepcopy(value)
        elif isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge(result[key], value)
        elif isinstance(result[key], list) and isinstance(value, list):
            result[key] = result[key] + [item for item in value if item not in result[key]]
    return result
