"""Exception taxonomy for apisnip."""


class ApiSnipError(Exception):
    """Custom exception for apisnip errors."""
    pass


class StructuralError(ApiSnipError):
    """The document does not have the shape of an API description."""
    pass


class MissingPathsError(StructuralError):
    """The document has no 'paths' mapping."""
    pass


class InvalidPathItemError(StructuralError):
    """A path key is not a string, or its value or method keys are malformed."""
    pass


class DocumentIOError(ApiSnipError):
    """Reading, fetching, parsing or writing a document failed."""
    pass


class UnsupportedFormatError(DocumentIOError):
    """The file extension is neither JSON nor YAML."""
    pass
