"""
Exceptions raised by the embedding engine.

Every error derives from ExplorerError and from the closest builtin, so
callers may catch either ``ExplorerError`` or e.g. ``ValueError``.
"""

from typing import Any, Optional


class ExplorerError(Exception):
    """Base exception for all latent-explorer errors."""
    pass


class InvalidArgumentError(ExplorerError, ValueError):
    """
    An argument violates an operation's contract.

    Raised when:
    - Inputs are None, blank or empty
    - Vector dimensions do not match
    - k / top_n / keep_closest is not positive
    - Axis anchors are identical, or a cosine input has zero norm
    - Sources disagree on ids or repeat a representation
    """
    pass


class NotFoundError(ExplorerError, KeyError):
    """
    An id or representation is not present.

    Raised when:
    - An unknown id is requested from an embedding group
    - An entity has no vector for the requested representation
    """

    def __init__(self, message: str, id: Any = None, representation: Any = None):
        super().__init__(message)
        self.message = message
        self.id = id
        self.representation = representation

    def __str__(self) -> str:
        return self.message


class InvalidStateError(ExplorerError, RuntimeError):
    """
    A mathematical or internal precondition cannot hold.

    Raised when:
    - Normalizing a zero vector
    - The assembler finds a hole after its id-set validation
    - The application service is queried before a dataset is loaded
    """
    pass


class IndexOutOfRangeError(ExplorerError, IndexError):
    """A component index lies outside [0, dim)."""
    pass


class SourceFormatError(InvalidArgumentError):
    """
    A representation file is malformed.

    Carries the offending path (when known) for boundary reporting.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class MissingDependencyError(ExplorerError, ImportError):
    """An optional library needed for the requested operation is not installed."""
    pass


class ConfigurationError(InvalidArgumentError):
    """Settings from the environment failed validation."""
    pass
