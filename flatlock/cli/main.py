"""Command line interface for flatlock.

    flatlock package-lock.json
    flatlock pnpm-lock.yaml --workspace packages/api --format specs
    flatlock tools

Options fall back to FLATLOCK_* environment variables.
"""

import json
import sys
from pathlib import Path
from typing import Iterable, Optional

import click

from .. import __version__
from ..console import console, print_error, print_summary_table, print_tool_table, print_warning
from ..exceptions import FlatlockError
from ..logging_config import logger
from ..models import Dependency, LockfileType
from ..set import DependencySet
from ..tool_checks import ToolRegistry

OUTPUT_FORMATS = ("names", "specs", "json", "ndjson", "purl")
CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class DefaultCommandGroup(click.Group):
    """Group that runs `list` when the first argument is not a subcommand.

    `flatlock yarn.lock` is shorthand for `flatlock list yarn.lock`.
    """

    default_command = "list"

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[Optional[str], Optional[click.Command], list[str]]:
        if args and args[0] not in self.commands and not args[0].startswith("-"):
            command = self.get_command(ctx, self.default_command)
            return self.default_command, command, list(args)
        return super().resolve_command(ctx, args)


def _sorted(dependencies: Iterable[Dependency]) -> list[Dependency]:
    return sorted(dependencies, key=lambda dep: (dep.name, dep.version))


def format_dependencies(dependencies: Iterable[Dependency], output_format: str) -> list[str]:
    """Render dependencies as output lines, sorted by name then version."""
    deps = _sorted(dependencies)
    if output_format == "names":
        return [dep.name for dep in deps]
    if output_format == "specs":
        return [dep.key for dep in deps]
    if output_format == "json":
        return [json.dumps([dep.to_dict() for dep in deps], indent=2)]
    if output_format == "ndjson":
        return [json.dumps(dep.to_dict()) for dep in deps]
    if output_format == "purl":
        return [dep.purl for dep in deps]
    raise click.BadParameter(f"Unknown format '{output_format}'", param_hint="--format")


def _summary(dependencies: DependencySet, lockfile: Path) -> list[tuple[str, object]]:
    records = dependencies.to_list()
    return [
        ("Lockfile", lockfile.name),
        ("Type", dependencies.type.value if dependencies.type else "mixed"),
        ("Dependencies", len(records)),
        ("Distinct names", len({dep.name for dep in records})),
        ("With integrity", sum(1 for dep in records if dep.integrity)),
        ("Linked", sum(1 for dep in records if dep.link)),
    ]


@click.group(cls=DefaultCommandGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", prog_name="flatlock")
@click.option(
    "--log-level",
    envvar="FLATLOCK_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for diagnostics on stderr.",
)
def cli(log_level: str) -> None:
    """Flat dependency lists from npm, pnpm and yarn lockfiles.

    Run `flatlock LOCKFILE` to list every package in a lockfile, or add
    --workspace to list only what one workspace package needs.
    """
    level = log_level.upper()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


@cli.command("list", context_settings=CONTEXT_SETTINGS)
@click.argument("lockfile", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--workspace",
    "-w",
    envvar="FLATLOCK_WORKSPACE",
    default=None,
    help="Workspace path relative to the lockfile directory; lists only what it requires.",
)
@click.option(
    "--dev/--no-dev",
    envvar="FLATLOCK_DEV",
    default=False,
    show_default=True,
    help="Include devDependencies of the workspace package.",
)
@click.option(
    "--peer/--no-peer",
    envvar="FLATLOCK_PEER",
    default=True,
    show_default=True,
    help="Include and follow peer dependencies.",
)
@click.option(
    "--optional/--no-optional",
    envvar="FLATLOCK_OPTIONAL",
    default=True,
    show_default=True,
    help="Include and follow optional dependencies.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    envvar="FLATLOCK_FORMAT",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default="names",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--type",
    "-t",
    "lockfile_type",
    type=click.Choice([t.value for t in LockfileType], case_sensitive=False),
    default=None,
    help="Skip detection and parse as this lockfile type.",
)
@click.option(
    "--repo-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Repository checkout holding workspace manifests (defaults to the lockfile directory).",
)
@click.option("--stats", is_flag=True, help="Print a summary table to stderr.")
def list_command(
    lockfile: Path,
    workspace: Optional[str],
    dev: bool,
    peer: bool,
    optional: bool,
    output_format: str,
    lockfile_type: Optional[str],
    repo_dir: Optional[Path],
    stats: bool,
) -> None:
    """List the dependencies recorded in LOCKFILE."""
    try:
        deps: DependencySet = DependencySet.from_path(lockfile, type=lockfile_type)
        if workspace is not None:
            logger.info(f"Computing dependencies of workspace {workspace}")
            deps = deps.dependencies_of(
                workspace_path=workspace,
                repo_dir=repo_dir,
                dev=dev,
                peer=peer,
                optional=optional,
            )
        lines = format_dependencies(deps, output_format.lower())
    except FlatlockError as e:
        print_error(str(e), type(e).__name__)
        sys.exit(1)

    if not lines:
        print_warning(f"No dependencies found in {lockfile}")
    for line in lines:
        click.echo(line)

    if stats:
        print_summary_table("flatlock", _summary(deps, lockfile), show_if_empty=True)


@cli.command("tools", context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", "-v", is_flag=True, help="Show install instructions for missing tools.")
def tools_command(verbose: bool) -> None:
    """Show which package manager CLIs are installed."""
    registry = ToolRegistry.probe()
    print_tool_table(registry)
    registry.log_status()
    if verbose:
        for status in registry.statuses.values():
            if not status.available and status.info:
                console.print(f"[info]{status.name}[/info]: {status.info.install_instructions}")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
