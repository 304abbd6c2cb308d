"""Registry for lockfile parsers."""

from ..logging_config import logger
from ..models import LockfileType
from .protocol import LockfileParser


class ParserRegistry:
    """Registry for lockfile parsers.

    Manages parser instances and dispatches to the parser registered for a
    lockfile type. The registry is built by the caller and never cached at
    module level.

    Example:
        registry = ParserRegistry()
        registry.register(PackageLockParser())
        registry.register(PnpmLockParser())

        parser = registry.get_parser(LockfileType.NPM)
    """

    def __init__(self) -> None:
        self._parsers: dict[LockfileType, LockfileParser] = {}

    def register(self, parser: LockfileParser) -> None:
        """Register a parser, replacing any parser for the same type.

        Args:
            parser: Parser instance implementing LockfileParser protocol.
        """
        self._parsers[parser.lockfile_type] = parser
        logger.debug(f"Registered lockfile parser: {parser.name} for {parser.lockfile_type}")

    def get_parser(self, lockfile_type: LockfileType) -> LockfileParser:
        """Get the parser for a lockfile type.

        Raises:
            KeyError: If no parser is registered for the type.
        """
        try:
            return self._parsers[lockfile_type]
        except KeyError:
            raise KeyError(f"No parser registered for lockfile type: {lockfile_type}") from None

    def get_parser_for(self, lock_file_name: str) -> LockfileParser | None:
        """Get the first parser that conventionally reads this filename.

        Args:
            lock_file_name: Filename (not full path)

        Returns:
            Parser instance if found, None otherwise.
        """
        for parser in self._parsers.values():
            if parser.supports(lock_file_name):
                return parser
        return None

    @property
    def registered_parsers(self) -> list[str]:
        """Get names of all registered parsers."""
        return [p.name for p in self._parsers.values()]

    @property
    def supported_files(self) -> set[str]:
        """Get all supported lockfile names."""
        result: set[str] = set()
        for parser in self._parsers.values():
            result.update(parser.supported_files)
        return result
