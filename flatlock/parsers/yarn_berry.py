"""Parser for yarn.lock files written by yarn berry (v2+).

Berry lockfiles are YAML. Keys are comma-joined descriptors and each entry
records its canonical locator in `resolution`:

    __metadata:
      version: 6
      cacheKey: 8

    "string-width-cjs@npm:string-width@^4.2.0, string-width@npm:^4.2.0":
      version: 4.2.3
      resolution: "string-width@npm:4.2.3"
      checksum: e52c10dc3fbfcd6c3a15f159f54a90024241d0f149cf8aed2982a2d801d2e64df0bf1dc351cf8e95c3319323f9f220c16e740b06faecd53e2462df1d2b5443fb
      languageName: node
      linkType: hard

The key's ident may be an alias; `resolution` always names the installed
package.
"""

from pathlib import Path
from typing import Any, Iterator

from ..logging_config import logger
from ..manifest import describe_member
from ..models import Dependency, LockfileType, WorkspaceMember, dependency_key, string_map
from .documents import as_mapping, load_yaml

PROTOCOL_MARKERS = (
    "@npm:",
    "@workspace:",
    "@portal:",
    "@link:",
    "@patch:",
    "@file:",
    "@exec:",
    "@git:",
    "@git+",
    "@github:",
    "@http:",
    "@https:",
)

# Protocols that point at code inside the repository
LOCAL_PROTOCOLS = frozenset({"workspace", "portal", "link", "file"})


def _ident_end(locator: str) -> int:
    """Index where the ident of a locator or descriptor ends, or -1."""
    earliest = -1
    for marker in PROTOCOL_MARKERS:
        # Start at 1 so a scope's leading `@` is never a boundary
        index = locator.find(marker, 1)
        if index != -1 and (earliest == -1 or index < earliest):
            earliest = index
    return earliest


def parse_lockfile_key(key: str) -> str:
    """Extract the package name from a berry descriptor or locator.

    Only the first item of a comma-joined key is used. The name ends at the
    earliest protocol marker, so a nested `patch:` locator never decides it:

        lodash@npm:^4.17.21                                  -> lodash
        @babel/core@npm:7.23.0                               -> @babel/core
        resolve@patch:resolve@npm%3A1.22.1#~builtin<...>     -> resolve
    """
    first = key.split(",")[0].strip()

    end = _ident_end(first)
    if end != -1:
        return first[:end]

    if first.startswith("@"):
        slash = first.find("/")
        if slash != -1:
            at = first.find("@", slash)
            if at != -1:
                return first[:at]
        return first

    at = first.find("@")
    return first[:at] if at != -1 else first


def parse_resolution(resolution: Any) -> str | None:
    """Return the package name of a `resolution` locator (None if empty)."""
    if not isinstance(resolution, str) or not resolution.strip():
        return None
    return parse_lockfile_key(resolution) or None


def resolution_protocol(locator: Any) -> str | None:
    """Return the outermost protocol of a locator (`npm`, `workspace`, ...)."""
    if not isinstance(locator, str):
        return None
    first = locator.split(",")[0].strip()
    end = _ident_end(first)
    if end == -1:
        return None
    rest = first[end + 1 :]
    for separator in (":", "+"):
        index = rest.find(separator)
        if index != -1:
            return rest[:index]
    return None


def resolution_reference(locator: str) -> str:
    """Return what follows the protocol in a locator (the path for `workspace:`)."""
    first = locator.split(",")[0].strip()
    end = _ident_end(first)
    if end == -1:
        return ""
    rest = first[end + 1 :]
    return rest.split(":", 1)[1] if ":" in rest else rest


def _coerce(input: str | dict[str, Any]) -> dict[str, Any]:
    return as_mapping(load_yaml(input) if isinstance(input, str) else input)


def _entries(document: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    for key, entry in document.items():
        if key == "__metadata":
            continue
        if not isinstance(entry, dict):
            logger.debug(f"Skipping malformed yarn.lock entry: {key}")
            continue
        yield str(key), entry


def _locator(key: str, entry: dict[str, Any]) -> str:
    resolution = entry.get("resolution")
    return resolution if isinstance(resolution, str) and resolution.strip() else key


def _split_optional(entry: dict[str, Any]) -> tuple[dict[str, str], dict[str, str]]:
    """Separate required from optional dependencies using `dependenciesMeta`."""
    dependencies = string_map(entry.get("dependencies"))
    meta = as_mapping(entry.get("dependenciesMeta"))

    required: dict[str, str] = {}
    optional = string_map(entry.get("optionalDependencies"))
    for name, ref in dependencies.items():
        if as_mapping(meta.get(name)).get("optional"):
            optional[name] = ref
        else:
            required[name] = ref
    return required, optional


def from_yarn_berry_lock(input: str | dict[str, Any]) -> Iterator[Dependency]:
    """Yield the third-party packages recorded in a yarn berry lockfile.

    No deduplication happens here; several aliases of one package yield one
    record each.

    Args:
        input: Lockfile text or an already parsed document

    Raises:
        ParseError: If the YAML is invalid.
    """
    document = _coerce(input)

    for key, entry in _entries(document):
        locator = _locator(key, entry)
        protocol = resolution_protocol(locator)
        if protocol in LOCAL_PROTOCOLS:
            logger.debug(f"Skipping {protocol} package: {locator}")
            continue

        name = parse_lockfile_key(locator)
        version = entry.get("version")
        if not name or not version:
            continue

        edges, optional_edges = _split_optional(entry)
        checksum = entry.get("checksum")
        resolution = entry.get("resolution")

        yield Dependency(
            name=name,
            version=str(version),
            integrity=str(checksum) if checksum else None,
            resolved=resolution or None,
            edges=edges,
            optional_edges=optional_edges,
            peer_edges=string_map(entry.get("peerDependencies")),
        )


def descriptor_index(input: str | dict[str, Any]) -> dict[str, str]:
    """Map every descriptor of a non-local entry to its `name@version`."""
    index: dict[str, str] = {}
    for key, entry in _entries(_coerce(input)):
        locator = _locator(key, entry)
        version = entry.get("version")
        if not version or resolution_protocol(locator) in LOCAL_PROTOCOLS:
            continue
        target = dependency_key(parse_lockfile_key(locator), str(version))
        for descriptor in key.split(","):
            index[descriptor.strip()] = target
    return index


def workspace_members(input: str | dict[str, Any], repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
    """Describe the `workspace:` entries of a berry lockfile.

    Berry records each workspace with its dependencies merged across
    sections, so they all land in `dependencies`.
    """
    members: list[WorkspaceMember] = []
    for key, entry in _entries(_coerce(input)):
        locator = _locator(key, entry)
        if resolution_protocol(locator) != "workspace":
            continue
        edges, optional_edges = _split_optional(entry)
        version = entry.get("version")
        members.append(
            WorkspaceMember(
                path=resolution_reference(locator) or ".",
                name=parse_lockfile_key(locator) or None,
                version=str(version) if version else None,
                dependencies=edges,
                optional_dependencies=optional_edges,
                peer_dependencies=string_map(entry.get("peerDependencies")),
            )
        )

    if repo_dir is not None:
        for member in members:
            describe_member(member, repo_dir)
    return members


class YarnBerryLockParser:
    """Parser for yarn.lock files written by yarn 2 and later."""

    name = "yarn-berry-lock"
    lockfile_type = LockfileType.YARN_BERRY
    supported_files = ("yarn.lock",)

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def load(self, content: str) -> Any:
        return _coerce(content)

    def iter_dependencies(self, document: Any) -> Iterator[Dependency]:
        return from_yarn_berry_lock(document)

    def workspace_members(self, document: Any, repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
        return workspace_members(document, repo_dir)

    def descriptors(self, document: Any) -> dict[str, str]:
        return descriptor_index(document)
