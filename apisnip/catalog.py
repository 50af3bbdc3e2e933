"""
Endpoint table for an OpenAPI document.

Every key under ``paths`` becomes one Endpoint carrying its methods, a display
description, the component names it references directly and its parameter
names. The table is built once when the document is loaded.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import InvalidPathItemError, MissingPathsError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

NO_DESCRIPTION = "No description"

# Path item keys that are never HTTP operations
RESERVED_KEYS = ('summary', 'description', 'parameters', 'servers', '$ref')

PARAMETER_PREFIXES = {
    'path': '/',
    'query': '?',
    'body': 'body:',
}


class Status(enum.Enum):
    SELECTED = "selected"
    UNSELECTED = "unselected"

    def flipped(self) -> "Status":
        return Status.UNSELECTED if self is Status.SELECTED else Status.SELECTED


@dataclass
class Method:
    verb: str
    description: str = NO_DESCRIPTION


@dataclass(eq=False)
class Endpoint:
    """One entry under ``paths`` with its aggregated methods and selection status."""

    path: str
    methods: List[Method] = field(default_factory=list)
    description: str = ""
    refs: List[str] = field(default_factory=list)
    parameters: List[str] = field(default_factory=list)
    status: Status = Status.UNSELECTED

    @property
    def selected(self) -> bool:
        return self.status is Status.SELECTED

    def toggle(self) -> None:
        self.status = self.status.flipped()

    def display_description(self) -> str:
        if self.description:
            return self.description
        return "/".join(method.description for method in self.methods)


def is_operation_key(key: str) -> bool:
    return key not in RESERVED_KEYS and not key.startswith('x-')


def find_references(obj: Any) -> List[str]:
    """
    Recursively collect every ``$ref`` string in an object.

    Args:
        obj: Any document subtree

    Returns:
        The references in order of first occurrence, duplicates removed
    """
    found: List[str] = []
    _collect_references(obj, found)
    return list(dict.fromkeys(found))


def _collect_references(obj: Any, found: List[str]) -> None:
    if isinstance(obj, dict):
        for key, value in obj.items():
            if key == '$ref' and isinstance(value, str):
                found.append(value)
            else:
                _collect_references(value, found)
    elif isinstance(obj, list):
        for item in obj:
            _collect_references(item, found)


def reference_name(ref: str) -> str:
    """Last segment of a reference, e.g. ``Pet`` for ``#/components/schemas/Pet``."""
    return ref.rsplit('/', 1)[-1]


def extract_parameters(params: Any) -> List[str]:
    """
    Turn a parameters list into location-prefixed names.

    ``/`` marks a path parameter, ``?`` a query parameter, ``body:`` a body
    parameter; other locations get no prefix. Entries without a string name
    (such as bare references) are skipped.
    """
    names = []
    if not isinstance(params, list):
        return names
    for param in params:
        if not isinstance(param, dict):
            continue
        name = param.get('name')
        if not isinstance(name, str):
            continue
        location = param.get('in')
        prefix = PARAMETER_PREFIXES.get(location, '') if isinstance(location, str) else ''
        names.append(f"{prefix}{name}")
    return names


def _operation_description(operation: Any) -> str:
    if not isinstance(operation, dict):
        return NO_DESCRIPTION
    summary = operation.get('summary')
    if isinstance(summary, str) and summary:
        return summary
    description = operation.get('description')
    if isinstance(description, str):
        return description
    return NO_DESCRIPTION


def _build_endpoint(path: Any, path_item: Any) -> Endpoint:
    if not isinstance(path, str):
        raise InvalidPathItemError(f"Path key is not a string: {path!r}")
    if not isinstance(path_item, dict):
        raise InvalidPathItemError(f"Operations for '{path}' not a mapping")

    endpoint = Endpoint(path=path)
    summary_seen = False

    for key, value in path_item.items():
        if not isinstance(key, str):
            raise InvalidPathItemError(f"Method key under '{path}' is not a string: {key!r}")

        if key == 'summary':
            if not summary_seen:
                endpoint.description = value if isinstance(value, str) else ""
                summary_seen = True
            continue
        if key == 'description':
            if not summary_seen and not endpoint.description:
                endpoint.description = value if isinstance(value, str) else ""
            continue
        if key == 'parameters':
            endpoint.parameters.extend(extract_parameters(value))
            continue
        if not is_operation_key(key):
            continue

        endpoint.methods.append(Method(verb=key, description=_operation_description(value)))
        if isinstance(value, dict):
            endpoint.parameters.extend(extract_parameters(value.get('parameters')))

    names = (reference_name(ref) for ref in find_references(path_item))
    endpoint.refs = list(dict.fromkeys(names))
    return endpoint


def extract_endpoints(document: Document) -> List[Endpoint]:
    """
    Build the endpoint table for a document.

    Args:
        document: Parsed OpenAPI document

    Returns:
        One Endpoint per key under ``paths``, sorted by path

    Raises:
        MissingPathsError: If ``paths`` is absent or not a mapping
        InvalidPathItemError: If a path entry is malformed
    """
    paths = document.get('paths') if isinstance(document, dict) else None
    if not isinstance(paths, dict):
        raise MissingPathsError("No 'paths' field found or it's not a mapping")

    endpoints = [_build_endpoint(path, path_item) for path, path_item in paths.items()]
    endpoints.sort(key=lambda endpoint: endpoint.path)
    logger.debug(f"Extracted {len(endpoints)} endpoints")
    return endpoints
