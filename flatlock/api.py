"""Entry points that read, detect and parse lockfiles."""

import asyncio
from pathlib import Path
from typing import Any, Iterator

from .detect import detect_type, looks_like_yarn_berry
from .exceptions import FileProcessingError, FlatlockError, ParseError, UsageError
from .logging_config import logger
from .models import Dependency, LockfileType
from .parsers import ParserRegistry, create_default_registry, from_yarn_berry_lock, from_yarn_classic_lock
from .parsers.documents import load_yaml
from .parsers.protocol import LockfileParser
from .result import Err, Ok, ParseResult


def read_lockfile(path: str | Path) -> str:
    """Read a lockfile as UTF-8 text.

    Raises:
        FileProcessingError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileProcessingError(f"Cannot read lockfile {path}: {e}") from e


async def read_lockfile_async(path: str | Path) -> str:
    """Read a lockfile in a worker thread."""
    return await asyncio.to_thread(read_lockfile, path)


def coerce_type(type: LockfileType | str | None) -> LockfileType | None:
    """Accept a LockfileType or its string value ("npm", "yarn-berry", ...)."""
    if type is None or isinstance(type, LockfileType):
        return type
    try:
        return LockfileType(type)
    except ValueError:
        choices = ", ".join(t.value for t in LockfileType)
        raise UsageError(f"Unknown lockfile type '{type}' (expected one of: {choices})") from None


def load_document(
    content: str,
    path: str | Path | None = None,
    type: LockfileType | str | None = None,
    registry: ParserRegistry | None = None,
) -> tuple[LockfileParser, Any]:
    """Detect the lockfile type and parse the document.

    Returns:
        The parser for the lockfile's type and the parsed document.

    Raises:
        DetectionError: If no type was given and the content matches none.
        ParseError: If the document is invalid for its type.
    """
    lockfile_type = coerce_type(type) or detect_type(path=path, content=content)
    parser = (registry or create_default_registry()).get_parser(lockfile_type)
    logger.debug(f"Parsing {path or 'content'} with {parser.name}")
    return parser, parser.load(content)


def from_string(
    content: str,
    path: str | Path | None = None,
    type: LockfileType | str | None = None,
    registry: ParserRegistry | None = None,
) -> Iterator[Dependency]:
    """Parse lockfile content into a lazy sequence of dependencies.

    Detection and document parsing happen immediately; records are produced
    as the returned iterator is consumed. Every call returns a fresh
    iterator.

    Args:
        content: Lockfile text
        path: Optional lockfile path, included in error messages
        type: Skip detection and parse as this type
        registry: Parser registry (defaults to create_default_registry())

    Raises:
        DetectionError: If the type cannot be detected.
        ParseError: If the lockfile is malformed.
    """
    parser, document = load_document(content, path=path, type=type, registry=registry)
    return parser.iter_dependencies(document)


def from_path(path: str | Path, type: LockfileType | str | None = None) -> Iterator[Dependency]:
    """Read and parse a lockfile.

    Raises:
        FileProcessingError: If the file cannot be read.
        DetectionError: If the type cannot be detected.
        ParseError: If the lockfile is malformed.
    """
    return from_string(read_lockfile(path), path=path, type=type)


async def from_path_async(path: str | Path, type: LockfileType | str | None = None) -> Iterator[Dependency]:
    """Like from_path, reading the file in a worker thread."""
    content = await read_lockfile_async(path)
    return from_string(content, path=path, type=type)


def try_from_string(
    content: str,
    path: str | Path | None = None,
    type: LockfileType | str | None = None,
) -> ParseResult:
    """Like from_string, returning a ParseResult instead of raising."""
    try:
        return Ok(from_string(content, path=path, type=type))
    except FlatlockError as e:
        return Err(e)


def try_from_path(path: str | Path, type: LockfileType | str | None = None) -> ParseResult:
    """Like from_path, returning a ParseResult instead of raising."""
    try:
        return Ok(from_path(path, type=type))
    except FlatlockError as e:
        return Err(e)


def from_yarn_lock(content: str) -> Iterator[Dependency]:
    """Parse a yarn.lock of either generation, told apart by structure."""
    try:
        document = load_yaml(content)
    except ParseError:
        document = None

    if looks_like_yarn_berry(document):
        yield from from_yarn_berry_lock(document)
    else:
        yield from from_yarn_classic_lock(content)


def _is_path(value: str | Path) -> bool:
    if isinstance(value, Path):
        return True
    return "\n" not in value and not value.lstrip().startswith("{")


def collect(path_or_content: str | Path, type: LockfileType | str | None = None) -> list[Dependency]:
    """Parse a lockfile path or lockfile content into a list.

    A single-line string that does not start with `{` is treated as a path.
    """
    if _is_path(path_or_content):
        return list(from_path(path_or_content, type=type))
    return list(from_string(str(path_or_content), type=type))
