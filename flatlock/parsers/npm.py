"""Parser for package-lock.json and npm-shrinkwrap.json files (npm)."""

from pathlib import Path
from typing import Any, Iterator

from ..exceptions import ParseError
from ..logging_config import logger
from ..manifest import describe_member
from ..models import Dependency, LockfileType, WorkspaceMember, string_map
from .documents import as_mapping, load_json

NODE_MODULES = "node_modules/"


def parse_lockfile_key(path: str) -> str:
    """Extract the package name from a `packages` key.

    The name is the last path segment, or the last two when the second to
    last is a scope:

        node_modules/lodash                          -> lodash
        node_modules/@babel/core                     -> @babel/core
        node_modules/foo/node_modules/@scope/bar     -> @scope/bar
    """
    parts = path.split("/")
    name = parts[-1]
    if len(parts) >= 2 and parts[-2].startswith("@"):
        return f"{parts[-2]}/{name}"
    return name


def _coerce(input: str | dict[str, Any]) -> dict[str, Any]:
    document = load_json(input) if isinstance(input, str) else input
    if not isinstance(document, dict):
        raise ParseError("package-lock root is not a JSON object")
    return document


def from_package_lock(input: str | dict[str, Any]) -> Iterator[Dependency]:
    """Yield installed packages from a package-lock.json (v2/v3).

    Only the `packages` map is read. A v1 lockfile (with only the nested
    `dependencies` tree) yields nothing.

    Args:
        input: Lockfile text or an already parsed document

    Yields:
        One Dependency per `node_modules` entry that records a version.
    """
    document = _coerce(input)
    packages = as_mapping(document.get("packages"))

    for path, entry in packages.items():
        if path == "" or NODE_MODULES not in path:
            continue
        if not isinstance(entry, dict):
            logger.debug(f"Skipping malformed package-lock entry: {path}")
            continue

        name = parse_lockfile_key(path)
        version = entry.get("version")
        if not name or not version:
            continue

        yield Dependency(
            name=name,
            version=str(version),
            integrity=entry.get("integrity") or None,
            resolved=entry.get("resolved") or None,
            link=bool(entry.get("link")),
            edges=string_map(entry.get("dependencies")),
            optional_edges=string_map(entry.get("optionalDependencies")),
            peer_edges=string_map(entry.get("peerDependencies")),
        )


def workspace_members(input: str | dict[str, Any], repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
    """Describe the root project and workspace packages of a package-lock.

    These are the `packages` keys outside `node_modules` ("" is the root).
    """
    document = _coerce(input)
    members: list[WorkspaceMember] = []

    for path, entry in as_mapping(document.get("packages")).items():
        if NODE_MODULES in path or not isinstance(entry, dict):
            continue
        name = entry.get("name")
        version = entry.get("version")
        members.append(
            WorkspaceMember(
                path=path or ".",
                name=name if isinstance(name, str) else None,
                version=version if isinstance(version, str) else None,
                dependencies=string_map(entry.get("dependencies")),
                dev_dependencies=string_map(entry.get("devDependencies")),
                optional_dependencies=string_map(entry.get("optionalDependencies")),
                peer_dependencies=string_map(entry.get("peerDependencies")),
            )
        )

    if repo_dir is not None:
        for member in members:
            describe_member(member, repo_dir)
    return members


class PackageLockParser:
    """Parser for package-lock.json files.

    package-lock.json v2/v3 structure:
    {
      "lockfileVersion": 3,
      "packages": {
        "": {"name": "app", "dependencies": {"lodash": "^4.17.21"}},
        "node_modules/lodash": {
          "version": "4.17.21",
          "resolved": "https://registry.npmjs.org/lodash/-/lodash-4.17.21.tgz",
          "integrity": "sha512-..."
        }
      }
    }
    """

    name = "npm-package-lock"
    lockfile_type = LockfileType.NPM
    supported_files = ("package-lock.json", "npm-shrinkwrap.json")

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def load(self, content: str) -> Any:
        return _coerce(content)

    def iter_dependencies(self, document: Any) -> Iterator[Dependency]:
        return from_package_lock(document)

    def workspace_members(self, document: Any, repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
        return workspace_members(document, repo_dir)
