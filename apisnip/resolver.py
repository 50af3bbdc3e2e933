"""
Reference resolution for a selected set of endpoints.

Only local component references of the form ``#/components/<category>/<name>``
are followed. External and relative file references are dropped.
"""

import logging
from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .catalog import Document, Endpoint, find_references, is_operation_key

logger = logging.getLogger(__name__)

ComponentKey = Tuple[str, str]

COMPONENTS_PREFIX = '#/components/'


def parse_component_ref(ref: str) -> Optional[ComponentKey]:
    """
    Parse a local component reference.

    Args:
        ref: A ``$ref`` value

    Returns:
        ``(category, name)``, or None if the reference has any other shape
    """
    if not isinstance(ref, str) or not ref.startswith(COMPONENTS_PREFIX):
        return None
    parts = ref.split('/')
    if len(parts) != 4 or not parts[2] or not parts[3]:
        return None
    # JSON pointer escapes
    name = parts[3].replace('~1', '/').replace('~0', '~')
    return parts[2], name


def security_requirement_names(requirement: Any) -> List[str]:
    """Scheme names in a security requirement, given as a list of mappings or a mapping."""
    names: List[str] = []
    if isinstance(requirement, dict):
        requirement = [requirement]
    if not isinstance(requirement, list):
        return names
    for entry in requirement:
        if isinstance(entry, dict):
            names.extend(str(key) for key in entry)
    return names


class ComponentResolver:
    """Helper class for resolving the components a set of endpoints depends on."""

    def __init__(self, spec: Document):
        self.spec = spec
        components = spec.get('components')
        self.components: Dict[str, Any] = components if isinstance(components, dict) else {}
        paths = spec.get('paths')
        self.paths: Dict[str, Any] = paths if isinstance(paths, dict) else {}

    def lookup(self, key: ComponentKey) -> Any:
        category, name = key
        members = self.components.get(category)
        if not isinstance(members, dict):
            return None
        return members.get(name)

    def find_component_references(self, obj: Any) -> List[ComponentKey]:
        """
        Find all local component references in an object.

        Args:
            obj: The object to search for references

        Returns:
            ``(category, name)`` pairs in order of first occurrence
        """
        keys = []
        for ref in find_references(obj):
            key = parse_component_ref(ref)
            if key is None:
                logger.debug(f"Skipping unsupported reference {ref}")
                continue
            keys.append(key)
        return keys

    def seed_references(self, selected: Iterable[Endpoint]) -> List[ComponentKey]:
        """Component references found anywhere in the selected path items."""
        seeds: Dict[ComponentKey, None] = {}
        for endpoint in selected:
            path_item = self.paths.get(endpoint.path)
            for key in self.find_component_references(path_item):
                seeds.setdefault(key, None)
        return list(seeds)

    def resolve_transitive_references(self, initial_refs: Iterable[ComponentKey]) -> Set[ComponentKey]:
        """
        Resolve all transitive component references.

        Cycles between components end when every member of the cycle has been
        visited.

        Args:
            initial_refs: Initial set of component references

        Returns:
            Complete set including all transitive dependencies
        """
        visited: Set[ComponentKey] = set()
        to_process = deque()
        for key in initial_refs:
            if key not in visited:
                visited.add(key)
                to_process.append(key)

        while to_process:
            key = to_process.popleft()
            definition = self.lookup(key)
            if definition is None:
                logger.warning(f"Unresolved reference #/components/{key[0]}/{key[1]}")
                continue
            for new_key in self.find_component_references(definition):
                if new_key not in visited:
                    visited.add(new_key)
                    to_process.append(new_key)

        return visited

    def security_schemes(self, selected: Iterable[Endpoint]) -> Set[str]:
        """
        Names of the security schemes required by the selected operations.

        The document-level requirement counts too, as long as at least one
        endpoint is selected.
        """
        schemes: Set[str] = set()
        any_selected = False
        for endpoint in selected:
            any_selected = True
            path_item = self.paths.get(endpoint.path)
            if not isinstance(path_item, dict):
                continue
            for key, operation in path_item.items():
                if isinstance(key, str) and is_operation_key(key) and isinstance(operation, dict):
                    schemes.update(security_requirement_names(operation.get('security')))

        if any_selected:
            schemes.update(security_requirement_names(self.spec.get('security')))
        return schemes

    def resolve(self, selected: Iterable[Endpoint]) -> Tuple[Set[ComponentKey], Set[str]]:
        """
        Compute everything the selected endpoints need from ``components``.

        Args:
            selected: Selected endpoints

        Returns:
            The component closure and the set of security scheme names
        """
        selected = list(selected)
        closure = self.resolve_transitive_references(self.seed_references(selected))
        schemes = self.security_schemes(selected)
        return closure, schemes
