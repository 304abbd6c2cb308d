"""Reading package.json manifests from a repository checkout."""

import json
from pathlib import Path
from typing import Any

from .exceptions import FileProcessingError
from .logging_config import logger
from .models import WorkspaceMember, string_map

MANIFEST_NAME = "package.json"


def manifest_path(repo_dir: str | Path, workspace_path: str | None = None) -> Path:
    """Location of the package.json for a workspace (the root when None)."""
    base = Path(repo_dir)
    if workspace_path and workspace_path != ".":
        base = base / workspace_path
    return base / MANIFEST_NAME


def load_manifest(path: str | Path) -> dict[str, Any]:
    """Load a package.json file.

    Args:
        path: Path to the manifest

    Returns:
        The parsed manifest mapping.

    Raises:
        FileProcessingError: If the file cannot be read, is not valid JSON,
            or its root is not an object.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise FileProcessingError(f"Cannot read manifest {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise FileProcessingError(f"Invalid JSON in manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise FileProcessingError(f"Manifest {path} is not a JSON object")
    return data


def describe_member(member: WorkspaceMember, repo_dir: str | Path) -> None:
    """Fill in what the lockfile does not record about a workspace member.

    pnpm importers carry no name, and no lockfile records peer ranges of
    workspace packages. Both come from the member's package.json when it
    exists. Unreadable manifests are skipped.
    """
    try:
        manifest = load_manifest(manifest_path(repo_dir, member.path))
    except FileProcessingError as e:
        logger.debug(f"Skipping manifest for workspace {member.path}: {e}")
        return

    name = manifest.get("name")
    if member.name is None and isinstance(name, str) and name:
        member.name = name
    version = manifest.get("version")
    if member.version is None and isinstance(version, str) and version:
        member.version = version
    if not member.peer_dependencies:
        member.peer_dependencies = string_map(manifest.get("peerDependencies"))
