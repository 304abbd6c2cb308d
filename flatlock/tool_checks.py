"""Availability checks for package manager command-line tools.

flatlock never runs these tools; it only reports whether they are installed
so that callers comparing its output with a package manager's own listing
(`npm ls`, `pnpm list`, `yarn list`) know what they can compare against.

The registry is built by the caller and probed once:

    tools = ToolRegistry.probe()
    if tools.is_available("pnpm"):
        ...
"""

import shutil
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from .logging_config import logger
from .models import LockfileType


@dataclass(frozen=True)
class ToolInfo:
    """Information about a package manager CLI."""

    name: str
    command: str
    description: str
    install_instructions: str
    homepage: str
    lockfile_types: tuple[LockfileType, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ToolStatus:
    """Status of a package manager CLI."""

    name: str
    available: bool
    path: Optional[str] = None
    info: Optional[ToolInfo] = None


KNOWN_TOOLS: tuple[ToolInfo, ...] = (
    ToolInfo(
        name="npm",
        command="npm",
        description="Node.js package manager",
        install_instructions="Bundled with Node.js: https://nodejs.org/en/download",
        homepage="https://docs.npmjs.com",
        lockfile_types=(LockfileType.NPM,),
    ),
    ToolInfo(
        name="pnpm",
        command="pnpm",
        description="Fast, disk space efficient package manager",
        install_instructions=(
            "Install via corepack or npm:\n  - corepack enable pnpm\n  - npm install -g pnpm"
        ),
        homepage="https://pnpm.io",
        lockfile_types=(LockfileType.PNPM,),
    ),
    ToolInfo(
        name="yarn",
        command="yarn",
        description="Yarn package manager (classic and berry)",
        install_instructions=(
            "Install via corepack or npm:\n  - corepack enable yarn\n  - npm install -g yarn"
        ),
        homepage="https://yarnpkg.com",
        lockfile_types=(LockfileType.YARN_CLASSIC, LockfileType.YARN_BERRY),
    ),
)


def check_tool_available(command: str, which: Callable[[str], Optional[str]] = shutil.which) -> tuple[bool, Optional[str]]:
    """
    Check if a command-line tool is available on the system.

    Args:
        command: The command to check (e.g., "npm", "pnpm")
        which: Lookup function, shutil.which by default

    Returns:
        Tuple of (is_available, path_if_found)
    """
    path = which(command)
    return (path is not None, path)


class ToolRegistry:
    """Immutable snapshot of which package manager CLIs are installed.

    Construct with `ToolRegistry.probe()` at startup and pass the instance
    to whatever needs it. Nothing is cached at module level.
    """

    def __init__(self, statuses: Mapping[str, ToolStatus]) -> None:
        self._statuses = dict(statuses)

    @classmethod
    def probe(
        cls,
        tools: tuple[ToolInfo, ...] = KNOWN_TOOLS,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> "ToolRegistry":
        """Look up every tool on PATH once and return the snapshot."""
        statuses: dict[str, ToolStatus] = {}
        for info in tools:
            available, path = check_tool_available(info.command, which)
            statuses[info.command] = ToolStatus(name=info.name, available=available, path=path, info=info)
            logger.debug(f"Tool {info.command}: {'found at ' + path if path else 'not found'}")
        return cls(statuses)

    @property
    def statuses(self) -> dict[str, ToolStatus]:
        return dict(self._statuses)

    def status(self, command: str) -> ToolStatus:
        """Status of a tool; unknown tools report as unavailable."""
        return self._statuses.get(command, ToolStatus(name=command, available=False))

    def is_available(self, command: str) -> bool:
        return self.status(command).available

    def available_tools(self) -> list[str]:
        return [command for command, status in self._statuses.items() if status.available]

    def missing_tools(self) -> list[str]:
        return [command for command, status in self._statuses.items() if not status.available]

    def tools_for(self, lockfile_type: LockfileType) -> list[ToolStatus]:
        """Tools that can read lockfiles of the given type."""
        return [
            status
            for status in self._statuses.values()
            if status.info is not None and lockfile_type in status.info.lockfile_types
        ]

    def log_status(self, verbose: bool = False) -> None:
        """
        Log the status of all tools.

        Args:
            verbose: If True, show installation instructions for missing tools
        """
        available = [s for s in self._statuses.values() if s.available]
        missing = [s for s in self._statuses.values() if not s.available]

        if available:
            logger.info(f"Available package managers: {', '.join(s.name for s in available)}")

        if missing:
            logger.warning(f"Missing package managers: {', '.join(s.name for s in missing)}")
            if verbose:
                for status in missing:
                    if status.info:
                        logger.info(f"{status.info.name}: {status.info.install_instructions}")
