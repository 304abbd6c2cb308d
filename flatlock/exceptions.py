"""Custom exceptions for flatlock."""


class FlatlockError(Exception):
    """Base exception for all flatlock operations."""


class DetectionError(FlatlockError):
    """Raised when lockfile content matches no known lockfile grammar."""


class ParseError(FlatlockError):
    """Raised when a lockfile document cannot be parsed at the document level."""


class UsageError(FlatlockError):
    """Raised when an operation is invoked on input it cannot accept."""


class FileProcessingError(FlatlockError):
    """Raised when a lockfile or manifest cannot be read."""
