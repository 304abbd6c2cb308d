"""Data models for lockfile dependency extraction."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from packageurl import PackageURL

# Protocols marking code that lives in the repository rather than a registry
LOCAL_PROTOCOLS = ("file:", "link:", "portal:", "workspace:")


class LockfileType(Enum):
    """Supported lockfile families.

    Values match the identifiers used on the command line and in JSON output.
    """

    NPM = "npm"
    PNPM = "pnpm"
    YARN_CLASSIC = "yarn-classic"
    YARN_BERRY = "yarn-berry"

    def __str__(self) -> str:
        return self.value


class PnpmEra(Enum):
    """On-disk grammar eras of pnpm lockfiles.

    - SHRINKWRAP: shrinkwrap.yaml v3/v4 (2016-2019), `/name/version/peer@ver`
    - V5: pnpm-lock.yaml 5.x (2019-2022), `/name/version_peer@ver`
    - V5_INLINE: the experimental `5.4-inlineSpecifiers` variant of V5
    - V6: pnpm-lock.yaml 6.0 (2023), `/name@version(peer@ver)`
    - V9: pnpm-lock.yaml 9.0 (2024+), `name@version(peer@ver)` with the
      packages/snapshots split
    """

    SHRINKWRAP = "shrinkwrap"
    V5 = "v5"
    V5_INLINE = "v5-inline"
    V6 = "v6"
    V9 = "v9"

    @property
    def uses_at_separator(self) -> bool:
        """Whether package keys separate name and version with `@`."""
        return self in (PnpmEra.V6, PnpmEra.V9)

    @property
    def uses_paren_peer_suffix(self) -> bool:
        """Whether peer suffixes are written as `(peer@version)` groups."""
        return self in (PnpmEra.V6, PnpmEra.V9)

    @property
    def has_leading_slash(self) -> bool:
        """Whether package keys start with `/`."""
        return self is not PnpmEra.V9

    @property
    def splits_snapshots(self) -> bool:
        """Whether resolution metadata and peer variants live in separate maps."""
        return self is PnpmEra.V9

    @property
    def uses_inline_specifiers(self) -> bool:
        """Whether importers carry specifiers inline instead of a `specifiers` block."""
        return self in (PnpmEra.V5_INLINE, PnpmEra.V6, PnpmEra.V9)


class PackageSpec(NamedTuple):
    """Name and version parsed from a lockfile key (both None if unparseable)."""

    name: str | None
    version: str | None


UNPARSEABLE = PackageSpec(None, None)


def dependency_key(name: str, version: str) -> str:
    """Build the `name@version` identity key."""
    return f"{name}@{version}"


def is_local_reference(value: Any) -> bool:
    """Check whether a resolution or range points at repository-local code."""
    return isinstance(value, str) and value.startswith(LOCAL_PROTOCOLS)


@dataclass(frozen=True)
class Dependency:
    """A resolved third-party package recorded in a lockfile.

    Identity is `name@version`. Integrity, resolved URL and the edge maps do
    not take part in equality or hashing. Records are shared between a set
    and the sets derived from it, so they are immutable; parsers build the
    edge maps before constructing the record.

    The edge maps hold the package's own requirements as the lockfile records
    them (ranges for npm and yarn, resolved references for pnpm). They are
    only consumed by reachability queries and are not part of `to_dict()`.
    """

    name: str
    version: str
    integrity: str | None = field(default=None, compare=False)
    resolved: str | None = field(default=None, compare=False)
    link: bool = field(default=False, compare=False)
    edges: dict[str, str] = field(default_factory=dict, compare=False, repr=False)
    optional_edges: dict[str, str] = field(default_factory=dict, compare=False, repr=False)
    peer_edges: dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    @property
    def key(self) -> str:
        return dependency_key(self.name, self.version)

    @property
    def purl(self) -> str:
        """Package URL for this dependency (e.g. `pkg:npm/%40babel/core@7.23.0`)."""
        if self.name.startswith("@") and "/" in self.name:
            namespace, name = self.name.split("/", 1)
        else:
            namespace, name = None, self.name
        return PackageURL(type="npm", namespace=namespace, name=name, version=self.version).to_string()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the public record shape.

        Optional fields are only present when set, so the output matches
        `{name, version, integrity?, resolved?, link?}` exactly.
        """
        data: dict[str, Any] = {"name": self.name, "version": self.version}
        if self.integrity:
            data["integrity"] = self.integrity
        if self.resolved:
            data["resolved"] = self.resolved
        if self.link:
            data["link"] = True
        return data


@dataclass
class WorkspaceMember:
    """A locally developed package recorded by the lockfile.

    Workspace members are never yielded as dependencies. Reachability
    queries use them to follow `workspace:` and `link:` references into the
    member's own requirements.

    Attributes:
        path: Path of the member relative to the repository root ("." for the root)
        name: Package name, when the lockfile (or its manifest) records one
        version: Package version, when known
        dependencies: Production requirements (name -> range or reference)
        dev_dependencies: Development requirements
        optional_dependencies: Optional requirements
        peer_dependencies: Peer requirements
    """

    path: str
    name: str | None = None
    version: str | None = None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    optional_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)


def string_map(value: Any) -> dict[str, str]:
    """Coerce a lockfile requirement section into a `name -> str` mapping.

    Non-mapping sections become empty. pnpm v9 importers record
    `{specifier, version}` objects; the resolved `version` is kept.
    """
    if not isinstance(value, dict):
        return {}

    result: dict[str, str] = {}
    for name, ref in value.items():
        if isinstance(ref, dict):
            ref = ref.get("version")
        if ref is None or isinstance(ref, bool):
            continue
        result[str(name)] = str(ref)
    return result
