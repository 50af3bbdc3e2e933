"""
Core logic for apisnip.
This module provides the document I/O and the facade that takes a loaded
OpenAPI document from endpoint extraction through to a pruned output document.
"""

import json
import yaml
import logging
import requests
from pathlib import Path
from urllib.parse import urlparse
from typing import List, Optional, Union

from .assembler import assemble_document
from .catalog import Document, Endpoint, extract_endpoints
from .errors import ApiSnipError, DocumentIOError, UnsupportedFormatError
from .resolver import ComponentResolver

# Configure logger
logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FILE = "apisnip.out.yaml"
FETCH_TIMEOUT = 30

JSON_EXTENSIONS = ('.json',)
YAML_EXTENSIONS = ('.yaml', '.yml')


def is_url(locator: Union[str, Path]) -> bool:
    return str(locator).lower().startswith(('http://', 'https://'))


def detect_format(locator: Union[str, Path]) -> str:
    """
    Detect the document format from a path or URL extension.

    Args:
        locator: File path or URL

    Returns:
        'json' or 'yaml'

    Raises:
        UnsupportedFormatError: If the extension is not recognised
    """
    name = urlparse(str(locator)).path if is_url(locator) else str(locator)
    suffix = Path(name).suffix.lower()
    if suffix in JSON_EXTENSIONS:
        return 'json'
    if suffix in YAML_EXTENSIONS:
        return 'yaml'
    raise UnsupportedFormatError(
        f"Unsupported file format '{suffix or name}'. Please use .json, .yaml, or .yml files"
    )


def _read_text(locator: Union[str, Path]) -> str:
    if is_url(locator):
        logger.debug(f"Fetching {locator}")
        try:
            response = requests.get(str(locator), timeout=FETCH_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DocumentIOError(f"Error fetching {locator}: {e}") from e
        return response.text

    path = Path(locator)
    if not path.exists():
        raise DocumentIOError(f"Input file not found: {path}")
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentIOError(f"Error reading {path}: {e}") from e


def load_document(locator: Union[str, Path]) -> Document:
    """
    Load an API description document from a file or URL.

    Args:
        locator: Path to a local file or an http(s) URL

    Returns:
        The parsed document, key order preserved

    Raises:
        DocumentIOError: If the document cannot be read or parsed
    """
    fmt = detect_format(locator)
    content = _read_text(locator)

    try:
        if fmt == 'json':
            document = json.loads(content)
        else:
            document = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DocumentIOError(f"Error parsing {locator}: {e}") from e

    if not isinstance(document, dict):
        raise DocumentIOError(f"{locator} did not parse to a mapping")

    logger.info(f"Loaded API description from {locator}")
    return document


def write_document(path: Union[str, Path], document: Document) -> Path:
    """
    Write a document to file, in the format implied by its extension.

    Args:
        path: Output file path
        document: Document to write

    Returns:
        Path to written file

    Raises:
        DocumentIOError: If the extension is unsupported or writing fails
    """
    filepath = Path(path)
    fmt = detect_format(filepath)

    try:
        if fmt == 'json':
            text = json.dumps(document, indent=2, ensure_ascii=False, default=str) + '\n'
        else:
            text = yaml.dump(document, default_flow_style=False, sort_keys=False,
                             allow_unicode=True, indent=2, width=1000)
        # serialized before the file is opened, so a failed dump leaves it untouched
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(text)
    except (OSError, TypeError, yaml.YAMLError) as e:
        raise DocumentIOError(f"Error writing {filepath}: {e}") from e

    logger.info(f"Created: {filepath}")
    return filepath


class ApiSnip:
    """
    Main class for snipping an OpenAPI document down to a set of endpoints.

    Holds the loaded document and its endpoint table, and produces the pruned
    document for whatever subset of endpoints has been selected.
    """

    def __init__(
        self,
        input_locator: Union[str, Path],
        output_file: Union[str, Path] = DEFAULT_OUTPUT_FILE,
    ):
        """
        Initialize the ApiSnip.

        Args:
            input_locator: Path or URL of the OpenAPI document
            output_file: Path of the document to write

        Raises:
            UnsupportedFormatError: If the input extension is not recognised
        """
        self.input_locator = input_locator
        self.output_file = Path(output_file)
        self.spec: Optional[Document] = None
        self.endpoints: List[Endpoint] = []

        detect_format(self.input_locator)

    def load_spec(self) -> Document:
        """
        Load the document and build its endpoint table.

        Raises:
            DocumentIOError: If loading fails
            StructuralError: If the document has no usable 'paths'
        """
        self.spec = load_document(self.input_locator)
        self.endpoints = extract_endpoints(self.spec)
        logger.info(f"Found {len(self.endpoints)} endpoints")
        return self.spec

    def snip(self, selected: List[Endpoint]) -> Document:
        """
        Build the pruned document for the selected endpoints.

        Args:
            selected: Endpoints to keep, in output order

        Returns:
            New document holding only the selected paths and the components
            they need
        """
        if self.spec is None:
            raise ApiSnipError("No specification loaded")

        resolver = ComponentResolver(self.spec)
        closure, security_schemes = resolver.resolve(selected)
        logger.debug(
            f"Keeping {len(closure)} components and {len(security_schemes)} security schemes"
        )
        return assemble_document(self.spec, selected, closure, security_schemes)

    def write(self, selected: List[Endpoint]) -> Path:
        """Snip the document down to the selected endpoints and write it out."""
        output = self.snip(selected)
        path = write_document(self.output_file, output)
        logger.info(f"Wrote {len(selected)} endpoints to {path}")
        return path
