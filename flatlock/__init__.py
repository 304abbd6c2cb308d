"""flatlock: flat dependency lists from npm, pnpm and yarn lockfiles.

Usage:
    from flatlock import DependencySet, from_path

    for dep in from_path("package-lock.json"):
        print(dep.name, dep.version)

    deps = DependencySet.from_path("pnpm-lock.yaml")
    runtime = deps.dependencies_of(workspace_path="packages/api")
"""

from .api import (
    collect,
    from_path,
    from_path_async,
    from_string,
    from_yarn_lock,
    try_from_path,
    try_from_string,
)
from .detect import detect_type
from .exceptions import DetectionError, FileProcessingError, FlatlockError, ParseError, UsageError
from .models import Dependency, LockfileType, PackageSpec, PnpmEra, WorkspaceMember
from .parsers import (
    ParserRegistry,
    create_default_registry,
    extract_workspace_paths,
    from_package_lock,
    from_pnpm_lock,
    from_yarn_berry_lock,
    from_yarn_classic_lock,
    parse_npm_key,
    parse_pnpm_key,
    parse_yarn_berry_key,
    parse_yarn_berry_resolution,
    parse_yarn_classic_key,
)
from .result import Err, Ok, ParseResult
from .set import DependencySet, DerivedDependencySet, RootedDependencySet


def _get_version() -> str:
    """Get package version with fallback mechanisms."""
    # Method 1: Try importlib.metadata (preferred for installed packages)
    try:
        from importlib.metadata import version

        return version("flatlock")
    except Exception:
        pass

    # Method 2: Try reading from pyproject.toml directly (source checkout)
    try:
        from pathlib import Path

        import tomllib

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                pyproject_data = tomllib.load(f)
            return pyproject_data.get("project", {}).get("version", "unknown")
    except Exception:
        pass

    return "unknown"


__version__ = _get_version()

__all__ = [
    "__version__",
    # Entry points
    "collect",
    "detect_type",
    "from_path",
    "from_path_async",
    "from_string",
    "from_yarn_lock",
    "try_from_path",
    "try_from_string",
    # Per-format parsers
    "ParserRegistry",
    "create_default_registry",
    "extract_workspace_paths",
    "from_package_lock",
    "from_pnpm_lock",
    "from_yarn_berry_lock",
    "from_yarn_classic_lock",
    "parse_npm_key",
    "parse_pnpm_key",
    "parse_yarn_berry_key",
    "parse_yarn_berry_resolution",
    "parse_yarn_classic_key",
    # Models
    "Dependency",
    "LockfileType",
    "PackageSpec",
    "PnpmEra",
    "WorkspaceMember",
    # Sets
    "DependencySet",
    "DerivedDependencySet",
    "RootedDependencySet",
    # Results and errors
    "Err",
    "Ok",
    "ParseResult",
    "DetectionError",
    "FileProcessingError",
    "FlatlockError",
    "ParseError",
    "UsageError",
]
