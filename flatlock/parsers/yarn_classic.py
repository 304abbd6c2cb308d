"""Parser for yarn.lock files written by yarn classic (v1)."""

from pathlib import Path
from typing import Any, Iterator

from ..logging_config import logger
from ..models import Dependency, LockfileType, WorkspaceMember, dependency_key, string_map
from .documents import load_yarn_lock

LOCAL_RESOLUTIONS = ("file:", "link:")


def parse_descriptor_name(descriptor: str) -> str:
    """Extract the package name from one yarn classic descriptor.

        lodash@^4.17.21                      -> lodash
        @babel/core@^7.0.0                   -> @babel/core
        string-width-cjs@npm:string-width@^4 -> string-width-cjs (alias)
    """
    descriptor = descriptor.strip()

    alias_at = descriptor.find("@npm:")
    if alias_at != -1:
        return descriptor[:alias_at]

    if descriptor.startswith("@"):
        slash = descriptor.find("/")
        if slash != -1:
            at = descriptor.find("@", slash)
            if at != -1:
                return descriptor[:at]
        return descriptor[: descriptor.rfind("@")] if descriptor.rfind("@") > 0 else descriptor

    at = descriptor.find("@")
    return descriptor[:at] if at != -1 else descriptor


def parse_lockfile_key(key: str) -> str:
    """Extract the package name from the first descriptor of a (possibly comma-joined) key."""
    return parse_descriptor_name(key.split(",")[0])


def split_descriptors(key: str) -> list[str]:
    return [descriptor.strip() for descriptor in key.split(",") if descriptor.strip()]


def _coerce(input: str | dict[str, Any]) -> dict[str, Any]:
    return load_yarn_lock(input) if isinstance(input, str) else input


def _entries(document: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    for key, entry in document.items():
        if key == "__metadata":
            continue
        if not isinstance(entry, dict):
            logger.debug(f"Skipping malformed yarn.lock entry: {key}")
            continue
        yield key, entry


def _is_local(entry: dict[str, Any]) -> bool:
    resolved = entry.get("resolved")
    return isinstance(resolved, str) and resolved.startswith(LOCAL_RESOLUTIONS)


def from_yarn_classic_lock(input: str | dict[str, Any]) -> Iterator[Dependency]:
    """Yield the packages recorded in a yarn classic lockfile.

    Every descriptor of an entry is considered, so an entry shared by an
    alias and the real package (`"a-cjs@npm:a@^4", "a@^4.1.0":`) yields
    both names. Each `name@version` is yielded once.

    Args:
        input: Lockfile text or a mapping produced by `load_yarn_lock`

    Raises:
        ParseError: If the text is not a yarn v1 lockfile.
    """
    document = _coerce(input)
    seen: set[str] = set()

    for key, entry in _entries(document):
        if _is_local(entry):
            logger.debug(f"Skipping local package: {key}")
            continue

        version = entry.get("version")
        if not version:
            continue

        for descriptor in split_descriptors(key):
            name = parse_descriptor_name(descriptor)
            if not name:
                continue
            dep_key = dependency_key(name, str(version))
            if dep_key in seen:
                continue
            seen.add(dep_key)

            yield Dependency(
                name=name,
                version=str(version),
                integrity=entry.get("integrity") or None,
                resolved=entry.get("resolved") or None,
                edges=string_map(entry.get("dependencies")),
                optional_edges=string_map(entry.get("optionalDependencies")),
            )


def descriptor_index(input: str | dict[str, Any]) -> dict[str, str]:
    """Map every descriptor (`name@range`) to the `name@version` it resolved to."""
    index: dict[str, str] = {}
    for key, entry in _entries(_coerce(input)):
        version = entry.get("version")
        if not version or _is_local(entry):
            continue
        for descriptor in split_descriptors(key):
            index[descriptor] = dependency_key(parse_descriptor_name(descriptor), str(version))
    return index


class YarnClassicLockParser:
    """Parser for yarn.lock v1 files.

    yarn classic does not record workspace packages in its lockfile, so
    `workspace_members` is always empty.
    """

    name = "yarn-classic-lock"
    lockfile_type = LockfileType.YARN_CLASSIC
    supported_files = ("yarn.lock",)

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def load(self, content: str) -> Any:
        return load_yarn_lock(content)

    def iter_dependencies(self, document: Any) -> Iterator[Dependency]:
        return from_yarn_classic_lock(document)

    def workspace_members(self, document: Any, repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
        return []

    def descriptors(self, document: Any) -> dict[str, str]:
        return descriptor_index(document)
