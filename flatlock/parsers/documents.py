"""Document-level loaders shared by the lockfile parsers."""

import json
import re
from typing import Any

import yaml
from yarnlock import yarnlock_parse

from ..exceptions import ParseError

SUPPORTED_YARN_LOCKFILE_VERSION = 1

_YARN_VERSION_COMMENT = re.compile(r"^#\s*yarn lockfile v(\d+)\s*$", re.MULTILINE)


def load_json(content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e


def load_yaml(content: str) -> Any:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid YAML: {e}") from e


def load_yarn_lock(content: str) -> dict[str, Any]:
    """Parse yarn classic (v1) lockfile text into a mapping of descriptor -> entry.

    yarn.lock v1 is not YAML; it is read with the yarnlock library.

    Raises:
        ParseError: If the text is not a yarn v1 lockfile, or declares a
            newer lockfile version in its header comment.
    """
    if content.startswith("\ufeff"):
        content = content[1:]

    header = _YARN_VERSION_COMMENT.search(content)
    if header is not None and int(header.group(1)) > SUPPORTED_YARN_LOCKFILE_VERSION:
        raise ParseError(f"Unsupported yarn lockfile version {header.group(1)}")

    try:
        document = yarnlock_parse(content)
    except Exception as e:
        raise ParseError(f"Invalid yarn.lock: {e}") from e

    if not isinstance(document, dict):
        raise ParseError("Invalid yarn.lock: expected a mapping of entries")
    return document


def as_mapping(value: Any) -> dict[str, Any]:
    """Return `value` if it is a mapping, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}
