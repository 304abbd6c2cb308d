"""Reachability over the edges recorded in a lockfile.

A walk starts from a manifest's declared requirements, resolves each one to
an installed record, and follows that record's own requirements until no new
records are found. Workspace references are followed into the member's
requirements without the member itself being part of the result.
"""

import posixpath
from collections import deque
from typing import Any, Iterable, Mapping

import semantic_version

from .logging_config import logger
from .models import Dependency, WorkspaceMember, dependency_key, is_local_reference, string_map
from .parsers.pnpm import parse_spec


def normalize_path(path: str | None) -> str:
    """Normalize a workspace path relative to the repository root ("." is the root)."""
    if not path:
        return "."
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return normalized.lstrip("/") or "."


def strip_peer_suffix(ref: str) -> str:
    """Drop a pnpm peer suffix (`1.0.0(react@18.2.0)` or `1.0.0_react@18.2.0`)."""
    return ref.split("(", 1)[0].split("_", 1)[0]


def _parse_version(version: str) -> semantic_version.Version | None:
    try:
        return semantic_version.Version(strip_peer_suffix(version))
    except ValueError:
        return None


def _parse_range(ref: str) -> semantic_version.NpmSpec | None:
    try:
        return semantic_version.NpmSpec(ref)
    except ValueError:
        return None


def select_best(candidates: list[Dependency], ref: str) -> Dependency:
    """Pick the installed record that best satisfies a reference.

    Order: exact version, exact version without pnpm peer suffix, highest
    version satisfying the reference as an npm range, highest installed
    version, first candidate.
    """
    by_version = {dep.version: dep for dep in candidates}
    if ref in by_version:
        return by_version[ref]

    base = strip_peer_suffix(ref)
    if base in by_version:
        return by_version[base]

    parsed: list[tuple[semantic_version.Version, Dependency]] = []
    for dep in candidates:
        version = _parse_version(dep.version)
        if version is not None:
            parsed.append((version, dep))

    spec = _parse_range(ref)
    if spec is not None:
        matching = [(version, dep) for version, dep in parsed if version in spec]
        if matching:
            return max(matching, key=lambda item: item[0])[1]

    if parsed:
        return max(parsed, key=lambda item: item[0])[1]
    return candidates[0]


def seeds_from_manifest(
    manifest: Mapping[str, Any],
    *,
    dev: bool = False,
    peer: bool = False,
    optional: bool = True,
) -> dict[str, str]:
    """Collect the requirements a walk starts from.

    `dependencies` always, the other sections when their flag is set. A name
    listed in several sections keeps its first reference.
    """
    sections = ["dependencies"]
    if dev:
        sections.append("devDependencies")
    if optional:
        sections.append("optionalDependencies")
    if peer:
        sections.append("peerDependencies")

    seeds: dict[str, str] = {}
    for section in sections:
        for name, ref in string_map(manifest.get(section)).items():
            seeds.setdefault(name, ref)
    return seeds


def member_from_manifest(path: str, manifest: Mapping[str, Any]) -> WorkspaceMember:
    """Build a WorkspaceMember from a package.json-shaped mapping."""
    name = manifest.get("name")
    version = manifest.get("version")
    return WorkspaceMember(
        path=normalize_path(path),
        name=name if isinstance(name, str) else None,
        version=version if isinstance(version, str) else None,
        dependencies=string_map(manifest.get("dependencies")),
        dev_dependencies=string_map(manifest.get("devDependencies")),
        optional_dependencies=string_map(manifest.get("optionalDependencies")),
        peer_dependencies=string_map(manifest.get("peerDependencies")),
    )


class DependencyGraph:
    """Records, workspace members and descriptors of one parsed lockfile.

    Args:
        records: Dependency records keyed by `name@version`
        members: Workspace members recorded by the lockfile
        descriptors: yarn descriptor (`name@range`) to `name@version` index
    """

    def __init__(
        self,
        records: Mapping[str, Dependency],
        members: Iterable[WorkspaceMember] = (),
        descriptors: Mapping[str, str] | None = None,
    ) -> None:
        self._records = records
        self._descriptors = dict(descriptors or {})
        self._by_name: dict[str, list[Dependency]] = {}
        for dep in records.values():
            self._by_name.setdefault(dep.name, []).append(dep)

        self._members_by_path: dict[str, WorkspaceMember] = {}
        self._members_by_name: dict[str, WorkspaceMember] = {}
        for member in members:
            self.add_member(member)

    def add_member(self, member: WorkspaceMember) -> None:
        """Register a workspace member, replacing one recorded at the same path."""
        path = normalize_path(member.path)
        self._members_by_path[path] = member
        if member.name:
            self._members_by_name[member.name] = member

    def member_at(self, path: str | None) -> WorkspaceMember | None:
        return self._members_by_path.get(normalize_path(path))

    def member_named(self, name: str) -> WorkspaceMember | None:
        return self._members_by_name.get(name)

    def pinned_seeds(self, seeds: dict[str, str], workspace_path: str | None) -> dict[str, str]:
        """Replace manifest ranges with the references the lockfile pinned for a workspace."""
        member = self.member_at(workspace_path)
        if member is None:
            return dict(seeds)

        pinned: dict[str, str] = {}
        sections = (
            member.dependencies,
            member.dev_dependencies,
            member.optional_dependencies,
            member.peer_dependencies,
        )
        for name, ref in seeds.items():
            for section in sections:
                if name in section:
                    ref = section[name]
                    break
            pinned[name] = ref
        return pinned

    def _local_member(self, name: str, ref: str, context: str) -> WorkspaceMember | None:
        protocol, _, target = ref.partition(":")
        if protocol == "workspace":
            # yarn berry: `workspace:^` names the package, `workspace:packages/a` a path
            return self.member_named(name) or self.member_at(target)
        member = self.member_at(posixpath.join(context, target))
        return member or self.member_named(name)

    def _aliased(self, name: str, ref: str) -> Dependency | None:
        """Resolve references that name a different package than the requirement."""
        if ref.startswith("npm:"):
            body = ref[len("npm:") :]
            at = body.rfind("@")
            if at > 0:
                real, real_ref = body[:at], body[at + 1 :]
                candidates = self._by_name.get(real)
                return select_best(candidates, real_ref) if candidates else None
            return None

        # pnpm alias references: `/string-width/4.2.3` or `string-width@4.2.3`
        if ref.startswith("/") or ref.rfind("@") > 0:
            real, version = parse_spec(ref)
            if real and version and real != name:
                return self._records.get(dependency_key(real, version))
        return None

    def resolve(self, name: str, ref: str) -> Dependency | None:
        """Resolve one non-local requirement to an installed record."""
        target = self._descriptors.get(f"{name}@{ref}") or self._descriptors.get(f"{name}@npm:{ref}")
        if target is not None and target in self._records:
            return self._records[target]

        aliased = self._aliased(name, ref)
        if aliased is not None:
            return aliased

        candidates = self._by_name.get(name)
        if not candidates:
            return None
        if ref.startswith("npm:"):
            ref = ref[len("npm:") :]
        return select_best(candidates, ref)

    def walk(
        self,
        seeds: dict[str, str],
        workspace_path: str | None = None,
        *,
        peer: bool = False,
        optional: bool = True,
    ) -> dict[str, Dependency]:
        """Compute the records transitively required by `seeds`.

        Args:
            seeds: Starting requirements (name -> range or reference)
            workspace_path: Workspace the seeds belong to; relative `link:`
                references resolve against it
            peer: Follow peer requirements
            optional: Follow optional requirements

        Returns:
            Visited records keyed by `name@version`, in discovery order.
        """
        origin = normalize_path(workspace_path)
        result: dict[str, Dependency] = {}
        visited_members: set[str] = {origin}
        queue: deque[tuple[str, str, str]] = deque((name, ref, origin) for name, ref in seeds.items())

        while queue:
            name, ref, context = queue.popleft()

            if is_local_reference(ref):
                member = self._local_member(name, ref, context)
            else:
                dep = self.resolve(name, ref)
                if dep is not None:
                    if dep.key in result:
                        continue
                    result[dep.key] = dep
                    edges = list(dep.edges.items())
                    if optional:
                        edges.extend(dep.optional_edges.items())
                    if peer:
                        edges.extend(dep.peer_edges.items())
                    queue.extend((child, child_ref, ".") for child, child_ref in edges)
                    continue
                member = self.member_named(name)

            if member is None:
                logger.debug(f"No installed package for {name}@{ref}")
                continue

            path = normalize_path(member.path)
            if path in visited_members:
                continue
            visited_members.add(path)

            requirements = list(member.dependencies.items())
            if optional:
                requirements.extend(member.optional_dependencies.items())
            if peer:
                requirements.extend(member.peer_dependencies.items())
            queue.extend((child, child_ref, path) for child, child_ref in requirements)

        return result
