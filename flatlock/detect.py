"""Lockfile type detection.

Detection probes the structure of the content, never substrings, so a
lockfile whose string values mention another format's markers (for example
a tarball URL containing `__metadata:`) is still classified by its grammar.
Content always wins; the filename is only consulted when no content is
given.
"""

import json
from pathlib import Path
from typing import Any

from .exceptions import DetectionError, ParseError
from .logging_config import logger
from .models import LockfileType
from .parsers.documents import load_yaml, load_yarn_lock

# Only used when no content is available
FILENAME_HINTS: dict[str, LockfileType] = {
    "package-lock.json": LockfileType.NPM,
    "npm-shrinkwrap.json": LockfileType.NPM,
    "pnpm-lock.yaml": LockfileType.PNPM,
    "shrinkwrap.yaml": LockfileType.PNPM,
    "yarn.lock": LockfileType.YARN_CLASSIC,
}

_UNPARSED = object()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _looks_like_npm(content: str) -> bool:
    try:
        document = json.loads(content)
    except ValueError:
        return False
    return isinstance(document, dict) and _is_number(document.get("lockfileVersion"))


def looks_like_yarn_berry(document: Any) -> bool:
    if not isinstance(document, dict):
        return False
    metadata = document.get("__metadata")
    return isinstance(metadata, dict) and "version" in metadata


def _looks_like_yarn_classic(content: str) -> bool:
    try:
        document = load_yarn_lock(content)
    except ParseError:
        return False
    if not document or "__metadata" in document:
        return False
    return all(isinstance(entry, dict) for entry in document.values())


def _looks_like_pnpm(document: Any) -> bool:
    if not isinstance(document, dict) or "__metadata" in document:
        return False
    return "lockfileVersion" in document or "shrinkwrapVersion" in document


def detect_content(content: str) -> LockfileType | None:
    """Classify lockfile content by structure alone.

    Returns:
        The detected LockfileType, or None when no grammar matches.
    """
    if _looks_like_npm(content):
        return LockfileType.NPM

    try:
        document = load_yaml(content)
    except ParseError:
        document = _UNPARSED

    if looks_like_yarn_berry(document):
        return LockfileType.YARN_BERRY
    if _looks_like_yarn_classic(content):
        return LockfileType.YARN_CLASSIC
    if _looks_like_pnpm(document):
        return LockfileType.PNPM
    return None


def detect_type(path: str | Path | None = None, content: str | None = None) -> LockfileType:
    """Detect the lockfile type from content, or from the filename when there is none.

    Args:
        path: Path or filename of the lockfile
        content: Lockfile text

    Returns:
        The detected LockfileType.

    Raises:
        DetectionError: If content was given and matched no grammar, or if
            neither content nor a recognized filename was given.
    """
    if content is not None:
        detected = detect_content(content)
        if detected is None:
            # Never fall back to the filename when the content disagrees
            raise DetectionError(f"Content does not match any known lockfile format{f' ({path})' if path else ''}")
        logger.debug(f"Detected {detected} lockfile from content")
        return detected

    if path is not None:
        name = Path(path).name
        hinted = FILENAME_HINTS.get(name)
        if hinted is not None:
            logger.debug(f"Detected {hinted} lockfile from filename {name}")
            return hinted
        raise DetectionError(f"Unrecognized lockfile name: {name}")

    raise DetectionError("Provide a path or content to detect the lockfile type")
