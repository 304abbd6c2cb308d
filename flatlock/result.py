"""ParseResult dataclass for callers that prefer values over exceptions."""

from dataclasses import dataclass
from typing import Iterator, Optional

from .models import Dependency


@dataclass
class ParseResult:
    """
    Result of a fallible parse operation.

    Attributes:
        success: Whether the lockfile was detected and parsed
        dependencies: Lazy dependency sequence (if successful)
        error: The error that stopped parsing (if failed)
    """

    success: bool
    dependencies: Optional[Iterator[Dependency]] = None
    error: Optional[Exception] = None

    def __post_init__(self) -> None:
        """Validate result state."""
        if self.success and self.dependencies is None:
            raise ValueError("Successful result must have dependencies")
        if self.success and self.error is not None:
            raise ValueError("Successful result should not have error")
        if not self.success and self.error is None:
            raise ValueError("Failed result must have error")

    @property
    def ok(self) -> bool:
        return self.success

    def unwrap(self) -> Iterator[Dependency]:
        """Return the dependency sequence, re-raising the stored error on failure."""
        if not self.success:
            assert self.error is not None
            raise self.error
        assert self.dependencies is not None
        return self.dependencies

    @classmethod
    def success_result(cls, dependencies: Iterator[Dependency]) -> "ParseResult":
        """Create a successful parse result."""
        return cls(success=True, dependencies=dependencies, error=None)

    @classmethod
    def failure_result(cls, error: Exception) -> "ParseResult":
        """Create a failed parse result."""
        return cls(success=False, dependencies=None, error=error)


def Ok(dependencies: Iterator[Dependency]) -> ParseResult:
    return ParseResult.success_result(dependencies)


def Err(error: Exception | str) -> ParseResult:
    if not isinstance(error, Exception):
        error = Exception(error)
    return ParseResult.failure_result(error)
