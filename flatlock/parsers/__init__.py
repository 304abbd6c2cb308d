"""Lockfile parsers for the npm, pnpm, yarn classic and yarn berry families.

Each family has a parser plugin implementing LockfileParser, plus
module-level generator functions for callers that already know the format.

Usage:
    from flatlock.parsers import create_default_registry
    from flatlock.models import LockfileType

    registry = create_default_registry()
    parser = registry.get_parser(LockfileType.PNPM)
    document = parser.load(content)
    for dep in parser.iter_dependencies(document):
        print(dep.key)
"""

from .npm import PackageLockParser, from_package_lock
from .npm import parse_lockfile_key as parse_npm_key
from .pnpm import (
    PnpmLockParser,
    detect_era,
    extract_workspace_paths,
    from_pnpm_lock,
    parse_peer_dependencies,
    parse_spec,
    parse_spec_shrinkwrap,
    parse_spec_v5,
    parse_spec_v6plus,
)
from .pnpm import parse_lockfile_key as parse_pnpm_key
from .protocol import LockfileParser
from .registry import ParserRegistry
from .yarn_berry import YarnBerryLockParser, from_yarn_berry_lock
from .yarn_berry import parse_lockfile_key as parse_yarn_berry_key
from .yarn_berry import parse_resolution as parse_yarn_berry_resolution
from .yarn_classic import YarnClassicLockParser, from_yarn_classic_lock
from .yarn_classic import parse_lockfile_key as parse_yarn_classic_key
from .documents import load_yarn_lock as parse_yarn_classic

__all__ = [
    # Plugin architecture
    "LockfileParser",
    "ParserRegistry",
    "create_default_registry",
    # Parsers
    "PackageLockParser",
    "PnpmLockParser",
    "YarnBerryLockParser",
    "YarnClassicLockParser",
    # Generators
    "from_package_lock",
    "from_pnpm_lock",
    "from_yarn_berry_lock",
    "from_yarn_classic_lock",
    # Key helpers
    "detect_era",
    "extract_workspace_paths",
    "parse_npm_key",
    "parse_peer_dependencies",
    "parse_pnpm_key",
    "parse_spec",
    "parse_spec_shrinkwrap",
    "parse_spec_v5",
    "parse_spec_v6plus",
    "parse_yarn_berry_key",
    "parse_yarn_berry_resolution",
    "parse_yarn_classic",
    "parse_yarn_classic_key",
]


def create_default_registry() -> ParserRegistry:
    """
    Create a registry with one parser per lockfile type.

    Returns:
        ParserRegistry with npm, pnpm, yarn classic and yarn berry parsers
    """
    registry = ParserRegistry()
    registry.register(PackageLockParser())
    registry.register(PnpmLockParser())
    registry.register(YarnClassicLockParser())
    registry.register(YarnBerryLockParser())
    return registry
