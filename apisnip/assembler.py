"""
Build the pruned output document.
"""

import logging
from typing import Any, Dict, Iterable, Set

from .catalog import Document, Endpoint
from .resolver import ComponentKey

logger = logging.getLogger(__name__)

SECURITY_SCHEMES = 'securitySchemes'


def filter_paths(paths: Any, selected: Iterable[Endpoint]) -> Dict[str, Any]:
    """
    Keep the path items of the selected endpoints, in selection order.

    Path items are carried over untouched.
    """
    filtered: Dict[str, Any] = {}
    if not isinstance(paths, dict):
        return filtered
    for endpoint in selected:
        if endpoint.path in paths:
            filtered[endpoint.path] = paths[endpoint.path]
    return filtered


def filter_components(
    components: Any,
    closure: Set[ComponentKey],
    security_schemes: Set[str],
) -> Any:
    """
    Filter components to include only the needed members.

    Categories left without members are dropped. Anything under ``components``
    that is not a mapping of members is copied as is.
    """
    if not isinstance(components, dict):
        return components

    filtered: Dict[str, Any] = {}
    for category, members in components.items():
        if not isinstance(members, dict):
            filtered[category] = members
            continue
        kept = {}
        for name, definition in members.items():
            keep = (category, name) in closure
            if category == SECURITY_SCHEMES and name in security_schemes:
                keep = True
            if keep:
                kept[name] = definition
        if kept:
            filtered[category] = kept
        else:
            logger.debug(f"Dropping empty components category '{category}'")
    return filtered


def assemble_document(
    document: Document,
    selected: Iterable[Endpoint],
    closure: Set[ComponentKey],
    security_schemes: Set[str],
) -> Document:
    """
    Create the output document for a selection.

    Args:
        document: The original document
        selected: Selected endpoints, in output order
        closure: Components the selection depends on
        security_schemes: Security scheme names the selection requires

    Returns:
        A new document with the original top-level key order
    """
    output: Document = {}
    for key, value in document.items():
        if key == 'paths':
            output[key] = filter_paths(value, selected)
        elif key == 'components':
            output[key] = filter_components(value, closure, security_schemes)
        else:
            output[key] = value
    return output
