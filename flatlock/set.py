"""Dependency sets: keyed collections of lockfile records with set algebra.

A set built from a lockfile keeps what reachability needs (edges, workspace
members, yarn descriptors) and can answer `dependencies_of`. Sets produced by
algebra carry records from several sources whose edges do not compose, so
they cannot traverse.

Example:
    deps = DependencySet.from_path("pnpm-lock.yaml")
    prod = deps.dependencies_of(workspace_path="packages/api")
    dev_only = deps.dependencies_of(workspace_path="packages/api", dev=True) - prod
"""

import dataclasses
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping

from .api import load_document, read_lockfile, read_lockfile_async
from .exceptions import UsageError
from .manifest import describe_member, load_manifest, manifest_path
from .models import Dependency, LockfileType, WorkspaceMember
from .parsers import ParserRegistry
from .parsers.protocol import descriptor_index
from .reachability import DependencyGraph, member_from_manifest, seeds_from_manifest


class DependencySet:
    """Immutable mapping of `name@version` to Dependency.

    Duplicate keys collapse to the last record seen.
    """

    can_traverse = False

    def __init__(self, dependencies: Iterable[Dependency] = (), type: LockfileType | None = None) -> None:
        self._deps: dict[str, Dependency] = {}
        for dep in dependencies:
            self._deps[dep.key] = dep
        self._type = type

    @classmethod
    def from_string(
        cls,
        content: str,
        path: str | Path | None = None,
        type: LockfileType | str | None = None,
        registry: ParserRegistry | None = None,
    ) -> "RootedDependencySet":
        """Build a traversable set from lockfile content.

        Raises:
            DetectionError: If the type cannot be detected.
            ParseError: If the lockfile is malformed.
        """
        return RootedDependencySet.from_string(content, path=path, type=type, registry=registry)

    @classmethod
    def from_path(cls, path: str | Path, type: LockfileType | str | None = None) -> "RootedDependencySet":
        """Read a lockfile and build a traversable set.

        Reachability queries default to the lockfile's directory as the
        repository root.
        """
        return RootedDependencySet.from_path(path, type=type)

    @classmethod
    async def from_path_async(cls, path: str | Path, type: LockfileType | str | None = None) -> "RootedDependencySet":
        """Like from_path, reading the file in a worker thread."""
        return await RootedDependencySet.from_path_async(path, type=type)

    # Queries

    @property
    def size(self) -> int:
        return len(self._deps)

    @property
    def type(self) -> LockfileType | None:
        """Lockfile type the records came from (None for algebra results)."""
        return self._type

    def has(self, key: str) -> bool:
        return key in self._deps

    def get(self, key: str, default: Dependency | None = None) -> Dependency | None:
        return self._deps.get(key, default)

    def keys(self) -> Iterator[str]:
        return iter(self._deps.keys())

    def values(self) -> Iterator[Dependency]:
        return iter(self._deps.values())

    def items(self) -> Iterator[tuple[str, Dependency]]:
        return iter(self._deps.items())

    def for_each(self, callback: Callable[[Dependency, str, "DependencySet"], Any]) -> None:
        """Call `callback(dependency, key, set)` for every record."""
        for key, dep in self._deps.items():
            callback(dep, key, self)

    def to_list(self) -> list[Dependency]:
        return list(self._deps.values())

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._deps.values())

    def __len__(self) -> int:
        return len(self._deps)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Dependency):
            return item.key in self._deps
        return item in self._deps

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencySet):
            return NotImplemented
        return self._deps.keys() == other._deps.keys()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self.size}, type={self._type})"

    # Algebra

    def union(self, other: "DependencySet") -> "DerivedDependencySet":
        """Records in either set; on a shared key the record from `other` wins."""
        deps = dict(self._deps)
        deps.update(other._deps)
        return DerivedDependencySet(deps.values())

    def intersection(self, other: "DependencySet") -> "DerivedDependencySet":
        """Records of this set whose key is also in `other`."""
        return DerivedDependencySet(dep for key, dep in self._deps.items() if key in other._deps)

    def difference(self, other: "DependencySet") -> "DerivedDependencySet":
        """Records of this set whose key is not in `other`."""
        return DerivedDependencySet(dep for key, dep in self._deps.items() if key not in other._deps)

    def is_subset_of(self, other: "DependencySet") -> bool:
        return all(key in other._deps for key in self._deps)

    def is_superset_of(self, other: "DependencySet") -> bool:
        return other.is_subset_of(self)

    def is_disjoint_from(self, other: "DependencySet") -> bool:
        return not any(key in other._deps for key in self._deps)

    def __or__(self, other: "DependencySet") -> "DerivedDependencySet":
        return self.union(other)

    def __and__(self, other: "DependencySet") -> "DerivedDependencySet":
        return self.intersection(other)

    def __sub__(self, other: "DependencySet") -> "DerivedDependencySet":
        return self.difference(other)

    def __le__(self, other: "DependencySet") -> bool:
        return self.is_subset_of(other)

    def __ge__(self, other: "DependencySet") -> bool:
        return self.is_superset_of(other)

    # Reachability

    def dependencies_of(self, manifest: Mapping[str, Any] | None = None, **options: Any) -> "DerivedDependencySet":
        raise UsageError(
            "dependencies_of() needs lockfile data; this set was produced by set operations. "
            "Call dependencies_of() on the set built from the lockfile before combining sets."
        )


class DerivedDependencySet(DependencySet):
    """A set produced by algebra or reachability. It cannot traverse."""


class RootedDependencySet(DependencySet):
    """A set built directly from one lockfile, able to answer reachability queries.

    Args:
        dependencies: Records yielded by the lockfile's parser
        type: Lockfile type
        members: Workspace members recorded by the lockfile
        descriptors: yarn descriptor index
        lockfile_dir: Directory of the lockfile, the default repository root
    """

    can_traverse = True

    def __init__(
        self,
        dependencies: Iterable[Dependency],
        type: LockfileType,
        members: Iterable[WorkspaceMember] = (),
        descriptors: Mapping[str, str] | None = None,
        lockfile_dir: str | Path | None = None,
    ) -> None:
        super().__init__(dependencies, type)
        self._members = list(members)
        self._descriptors = dict(descriptors or {})
        self._lockfile_dir = Path(lockfile_dir) if lockfile_dir is not None else None

    @classmethod
    def from_string(
        cls,
        content: str,
        path: str | Path | None = None,
        type: LockfileType | str | None = None,
        registry: ParserRegistry | None = None,
        lockfile_dir: str | Path | None = None,
    ) -> "RootedDependencySet":
        parser, document = load_document(content, path=path, type=type, registry=registry)
        return cls(
            parser.iter_dependencies(document),
            type=parser.lockfile_type,
            members=parser.workspace_members(document),
            descriptors=descriptor_index(parser, document),
            lockfile_dir=lockfile_dir,
        )

    @classmethod
    def from_path(cls, path: str | Path, type: LockfileType | str | None = None) -> "RootedDependencySet":
        path = Path(path)
        return cls.from_string(read_lockfile(path), path=path, type=type, lockfile_dir=path.parent)

    @classmethod
    async def from_path_async(cls, path: str | Path, type: LockfileType | str | None = None) -> "RootedDependencySet":
        path = Path(path)
        content = await read_lockfile_async(path)
        return cls.from_string(content, path=path, type=type, lockfile_dir=path.parent)

    @property
    def workspace_members(self) -> list[WorkspaceMember]:
        """Workspace members as recorded by the lockfile."""
        return list(self._members)

    def _graph(
        self,
        repo_dir: Path | None,
        workspace_packages: Mapping[str, Mapping[str, Any]] | None,
    ) -> DependencyGraph:
        members = [dataclasses.replace(member) for member in self._members]
        if repo_dir is not None:
            for member in members:
                describe_member(member, repo_dir)

        graph = DependencyGraph(self._deps, members, self._descriptors)
        for path, package in (workspace_packages or {}).items():
            graph.add_member(member_from_manifest(path, package))
        return graph

    def dependencies_of(
        self,
        manifest: Mapping[str, Any] | None = None,
        *,
        dev: bool = False,
        peer: bool = False,
        optional: bool = True,
        workspace_path: str | None = None,
        repo_dir: str | Path | None = None,
        workspace_packages: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> DerivedDependencySet:
        """Compute the records transitively required by a package manifest.

        Args:
            manifest: package.json contents. Loaded from
                `repo_dir/workspace_path/package.json` when None.
            dev: Include `devDependencies` of the manifest
            peer: Include and follow peer requirements
            optional: Include and follow optional requirements
            workspace_path: Workspace of the manifest relative to the
                repository root (the root when None)
            repo_dir: Repository checkout; defaults to the lockfile's
                directory for sets built with from_path
            workspace_packages: Extra workspace members as
                `{path: package.json contents}`, for lockfiles that do not
                record workspaces (yarn classic)

        Returns:
            DerivedDependencySet of the reachable records, typed like this set.
            Workspace members are followed but never included.

        Raises:
            UsageError: If the manifest is not a mapping, or it is missing
                and there is no repository to load it from.
            FileProcessingError: If the manifest cannot be read.
        """
        if manifest is not None and not isinstance(manifest, Mapping):
            raise UsageError("manifest must be a mapping of package.json fields")

        repo = Path(repo_dir) if repo_dir is not None else self._lockfile_dir

        if manifest is None:
            if repo is None:
                raise UsageError("Pass a manifest or repo_dir when the set was not built from a path")
            manifest = load_manifest(manifest_path(repo, workspace_path))

        graph = self._graph(repo, workspace_packages)
        seeds = graph.pinned_seeds(seeds_from_manifest(manifest, dev=dev, peer=peer, optional=optional), workspace_path)
        records = graph.walk(seeds, workspace_path, peer=peer, optional=optional)
        return DerivedDependencySet(records.values(), type=self._type)
