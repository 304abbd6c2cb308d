"""Parser for pnpm lockfiles (shrinkwrap.yaml and pnpm-lock.yaml).

pnpm has changed its key grammar several times; the era is detected from the
document root and the matching spec grammar is used for every key:

    shrinkwrap   /@babel/core/7.23.0/peer@1.0.0
    v5           /@babel/core/7.23.0_peer@1.0.0
    v6           /@babel/core@7.23.0(peer@1.0.0)
    v9           @babel/core@7.23.0(peer@1.0.0)    + packages/snapshots split

Example:
    for dep in from_pnpm_lock(Path("pnpm-lock.yaml").read_text()):
        print(dep.name, dep.version)
"""

from pathlib import Path
from typing import Any, Callable, Iterator

from ...logging_config import logger
from ...manifest import describe_member
from ...models import (
    UNPARSEABLE,
    Dependency,
    LockfileType,
    PackageSpec,
    PnpmEra,
    WorkspaceMember,
    dependency_key,
    is_local_reference,
    string_map,
)
from ..documents import as_mapping, load_yaml
from .detect import detect_era
from .shrinkwrap import extract_peer_suffix, has_peer_suffix, parse_spec_shrinkwrap, strip_leading_slash
from .v5 import extract_peer_suffix_v5, has_peer_suffix_v5, parse_spec_v5
from .v6plus import (
    extract_peer_suffix_v6plus,
    has_peer_suffix_v6plus,
    parse_peer_dependencies,
    parse_spec_v6plus,
)

SpecParser = Callable[[Any], PackageSpec]


def parse_spec(spec: Any) -> PackageSpec:
    """Parse a pnpm key or reference without knowing the lockfile era.

    `(` means the v6+ grammar. Otherwise, once a v5 `_` suffix is removed,
    a final `@` whose remainder has no `/` also means v6+. Everything else
    is read as v5 (which also covers shrinkwrap keys without peers).
    """
    if not isinstance(spec, str) or is_local_reference(spec):
        return UNPARSEABLE

    if "(" in spec:
        return parse_spec_v6plus(spec)

    base = strip_leading_slash(spec).split("_", 1)[0]
    at = base.rfind("@")
    if at > 0 and "/" not in base[at + 1 :]:
        return parse_spec_v6plus(spec)

    return parse_spec_v5(spec)


def parse_lockfile_key(key: Any) -> str | None:
    """Return just the package name of a pnpm key."""
    return parse_spec(key).name


def spec_parser_for(era: PnpmEra) -> SpecParser:
    """Select the key grammar for an era."""
    if era is PnpmEra.SHRINKWRAP:
        return parse_spec_shrinkwrap
    elif era in (PnpmEra.V5, PnpmEra.V5_INLINE):
        return parse_spec_v5
    elif era in (PnpmEra.V6, PnpmEra.V9):
        return parse_spec_v6plus
    raise ValueError(f"Unhandled pnpm era: {era}")


def _coerce(input: str | dict[str, Any]) -> Any:
    return load_yaml(input) if isinstance(input, str) else input


def _is_directory(entry: dict[str, Any]) -> bool:
    return as_mapping(entry.get("resolution")).get("type") == "directory"


def _build(name: str, version: str, entry: dict[str, Any], snapshots: list[dict[str, Any]] | None = None) -> Dependency:
    resolution = as_mapping(entry.get("resolution"))

    # v9 keeps the resolved graph in snapshots, one per peer variant
    edges: dict[str, str] = {}
    optional_edges: dict[str, str] = {}
    sources = snapshots if snapshots is not None else [entry]
    for source in sources:
        edges.update(string_map(source.get("dependencies")))
        optional_edges.update(string_map(source.get("optionalDependencies")))

    return Dependency(
        name=name,
        version=version,
        integrity=resolution.get("integrity") or None,
        resolved=resolution.get("tarball") or None,
        edges=edges,
        optional_edges=optional_edges,
        peer_edges=string_map(entry.get("peerDependencies")),
    )


def from_pnpm_lock(input: str | dict[str, Any]) -> Iterator[Dependency]:
    """Yield the third-party packages recorded in a pnpm lockfile.

    Args:
        input: Lockfile text or an already parsed document

    Yields:
        One Dependency per distinct name@version.

    Raises:
        ParseError: If the YAML is invalid or the era is unrecognized.
    """
    document = _coerce(input)
    era = detect_era(document)
    parse = spec_parser_for(era)
    logger.debug(f"Detected pnpm lockfile era: {era.value}")

    packages = as_mapping(document.get("packages"))
    snapshots = as_mapping(document.get("snapshots")) if era.splits_snapshots else {}

    # Group snapshot variants by identity
    variants: dict[str, list[dict[str, Any]]] = {}
    snapshot_specs: dict[str, PackageSpec] = {}
    for spec, snapshot in snapshots.items():
        name, version = parse(spec)
        if not name or not version or is_local_reference(version):
            continue
        key = dependency_key(name, version)
        variants.setdefault(key, []).append(as_mapping(snapshot))
        snapshot_specs.setdefault(key, PackageSpec(name, version))

    seen: set[str] = set()

    for spec, entry in packages.items():
        name, version = parse(spec)
        if not name or not version:
            logger.debug(f"Skipping unparseable pnpm key: {spec}")
            continue
        if is_local_reference(version):
            continue
        key = dependency_key(name, version)
        if key in seen:
            continue
        seen.add(key)

        entry = as_mapping(entry)
        if _is_directory(entry):
            logger.debug(f"Skipping directory package: {spec}")
            continue

        yield _build(name, version, entry, variants.get(key) if era.splits_snapshots else None)

    for key, (name, version) in snapshot_specs.items():
        if key in seen:
            continue
        seen.add(key)

        # Snapshot without a packages entry: no resolution metadata
        entry = as_mapping(packages.get(key))
        if _is_directory(entry):
            continue
        yield _build(name, version, entry, variants[key])


def extract_workspace_paths(input: str | dict[str, Any]) -> list[str]:
    """List importer paths other than the root ("." )."""
    document = as_mapping(_coerce(input))
    return [str(path) for path in as_mapping(document.get("importers")) if path != "."]


def workspace_members(input: str | dict[str, Any], repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
    """Describe the importers of a pnpm lockfile.

    Single-project lockfiles (no `importers`) record the root requirements at
    the top level; they become a single "." member. Importer references are
    resolved versions, or `link:` paths relative to the importer.

    Args:
        input: Lockfile text or parsed document
        repo_dir: Repository checkout; when given, names and peer ranges are
            read from each member's package.json.
    """
    document = as_mapping(_coerce(input))
    importers = document.get("importers")

    if isinstance(importers, dict):
        sources = [(str(path), as_mapping(importer)) for path, importer in importers.items()]
    else:
        sources = [(".", document)]

    members = [
        WorkspaceMember(
            path=path,
            dependencies=string_map(source.get("dependencies")),
            dev_dependencies=string_map(source.get("devDependencies")),
            optional_dependencies=string_map(source.get("optionalDependencies")),
        )
        for path, source in sources
    ]

    if repo_dir is not None:
        for member in members:
            describe_member(member, repo_dir)
    return members


class PnpmLockParser:
    """Parser for pnpm-lock.yaml and shrinkwrap.yaml files."""

    name = "pnpm-lock"
    lockfile_type = LockfileType.PNPM
    supported_files = ("pnpm-lock.yaml", "shrinkwrap.yaml")

    def supports(self, lock_file_name: str) -> bool:
        return lock_file_name in self.supported_files

    def load(self, content: str) -> Any:
        document = load_yaml(content)
        detect_era(document)
        return document

    def iter_dependencies(self, document: Any) -> Iterator[Dependency]:
        return from_pnpm_lock(document)

    def workspace_members(self, document: Any, repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
        return workspace_members(document, repo_dir)


__all__ = [
    "PnpmLockParser",
    "detect_era",
    "extract_peer_suffix",
    "extract_peer_suffix_v5",
    "extract_peer_suffix_v6plus",
    "extract_workspace_paths",
    "from_pnpm_lock",
    "has_peer_suffix",
    "has_peer_suffix_v5",
    "has_peer_suffix_v6plus",
    "parse_lockfile_key",
    "parse_peer_dependencies",
    "parse_spec",
    "parse_spec_shrinkwrap",
    "parse_spec_v5",
    "parse_spec_v6plus",
    "spec_parser_for",
    "workspace_members",
]
