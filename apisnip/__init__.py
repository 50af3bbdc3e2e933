"""
apisnip - Trim an OpenAPI description down to a chosen set of endpoints.

Pick endpoints interactively and write a new document holding only those paths
and every component they transitively depend on.
"""

__version__ = "1.4.59"
__author__ = "apisnip Contributors"
__email__ = "support@example.com"

from .core import (
    ApiSnip,
    load_document,
    write_document,
)
from .errors import (
    ApiSnipError,
    StructuralError,
    MissingPathsError,
    InvalidPathItemError,
    DocumentIOError,
    UnsupportedFormatError,
)
from .catalog import Endpoint, Method, Status, extract_endpoints
from .resolver import ComponentResolver
from .assembler import assemble_document

__all__ = [
    'ApiSnip',
    'ApiSnipError',
    'StructuralError',
    'MissingPathsError',
    'InvalidPathItemError',
    'DocumentIOError',
    'UnsupportedFormatError',
    'ComponentResolver',
    'Endpoint',
    'Method',
    'Status',
    'assemble_document',
    'extract_endpoints',
    'load_document',
    'write_document',
    '__version__',
]
