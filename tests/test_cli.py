"""Tests for the Click CLI interface.

These tests verify that:
1. `flatlock LOCKFILE` lists dependencies without naming a subcommand
2. Workspace queries honor --dev/--peer/--optional
3. Environment variables are used as fallbacks
4. Errors go to stderr with exit code 1
5. Help and version options work
"""

import json
import unittest
from importlib import import_module
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from flatlock.cli.main import cli, format_dependencies
from flatlock.models import Dependency
from flatlock.tool_checks import ToolRegistry

# flatlock.cli re-exports `main`, so import the module object explicitly for patching
cli_main_module = import_module("flatlock.cli.main")

TEST_DATA = Path(__file__).parent / "test-data"
NPM_LOCK = str(TEST_DATA / "npm-workspace" / "package-lock.json")
PNPM_LOCK = str(TEST_DATA / "pnpm-workspace" / "pnpm-lock.yaml")


class TestCLIHelp(unittest.TestCase):
    """Test CLI help and version options."""

    def setUp(self):
        self.runner = CliRunner()

    def test_help_option(self):
        """Test that --help shows usage information."""
        result = self.runner.invoke(cli, ["--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Flat dependency lists", result.output)
        self.assertIn("tools", result.output)

    def test_short_help_option(self):
        """Test that -h also shows help."""
        result = self.runner.invoke(cli, ["-h"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Flat dependency lists", result.output)

    def test_list_help(self):
        result = self.runner.invoke(cli, ["list", "--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--workspace", result.output)
        self.assertIn("--no-peer", result.output)

    def test_version_option(self):
        """Test that --version shows version."""
        result = self.runner.invoke(cli, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("flatlock", result.output)


class TestListCommand(unittest.TestCase):
    """Test listing dependencies."""

    def setUp(self):
        self.runner = CliRunner()

    def test_default_command(self):
        """Test that the lockfile can be given without `list`."""
        result = self.runner.invoke(cli, [NPM_LOCK])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            result.output.splitlines(),
            [
                "chalk",
                "debug",
                "express-lite",
                "fsevents",
                "jest-lite",
                "lodash",
                "loose-envify",
                "ms",
                "ms",
                "react",
                "supports-color",
                "typescript",
            ],
        )

    def test_explicit_list_command(self):
        result = self.runner.invoke(cli, ["list", NPM_LOCK, "--format", "specs"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("ms@2.0.0", result.output.splitlines())

    def test_group_option_before_lockfile(self):
        result = self.runner.invoke(cli, ["--log-level", "ERROR", NPM_LOCK, "-f", "specs"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("lodash@4.17.21", result.output.splitlines())

    def test_workspace_includes_peers_by_default(self):
        result = self.runner.invoke(cli, [NPM_LOCK, "--workspace", "packages/api", "--format", "specs"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            result.output.splitlines(),
            [
                "chalk@4.1.2",
                "debug@2.6.9",
                "express-lite@2.1.0",
                "fsevents@2.3.3",
                "loose-envify@1.4.0",
                "ms@2.0.0",
                "ms@2.1.3",
                "react@18.2.0",
                "supports-color@7.2.0",
            ],
        )

    def test_workspace_flags(self):
        result = self.runner.invoke(
            cli, [NPM_LOCK, "-w", "packages/api", "--no-peer", "--no-optional", "--dev", "-f", "specs"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        lines = result.output.splitlines()
        self.assertIn("jest-lite@1.2.0", lines)
        self.assertNotIn("react@18.2.0", lines)
        self.assertNotIn("fsevents@2.3.3", lines)

    def test_workspace_from_env(self):
        """Test that FLATLOCK_WORKSPACE is used when --workspace is absent."""
        result = self.runner.invoke(
            cli,
            [PNPM_LOCK, "--format", "specs"],
            env={"FLATLOCK_WORKSPACE": "packages/utils"},
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.splitlines(), ["chalk@4.1.2", "supports-color@7.2.0"])

    def test_cli_overrides_env(self):
        result = self.runner.invoke(
            cli,
            [PNPM_LOCK, "--format", "specs", "--workspace", "packages/utils"],
            env={"FLATLOCK_WORKSPACE": "packages/api"},
        )
        self.assertEqual(result.output.splitlines(), ["chalk@4.1.2", "supports-color@7.2.0"])

    def test_json_format(self):
        result = self.runner.invoke(cli, [PNPM_LOCK, "--format", "json"])
        self.assertEqual(result.exit_code, 0, result.output)
        records = json.loads(result.output)
        self.assertEqual(len(records), 9)
        self.assertEqual(records[0], {"name": "chalk", "version": "4.1.2", "integrity": "sha512-chalk"})

    def test_ndjson_format(self):
        result = self.runner.invoke(cli, [PNPM_LOCK, "--format", "ndjson"])
        lines = result.output.splitlines()
        self.assertEqual(len(lines), 9)
        self.assertEqual(json.loads(lines[-1])["name"], "typescript")

    def test_purl_format(self):
        result = self.runner.invoke(cli, [PNPM_LOCK, "--format", "purl"])
        self.assertIn("pkg:npm/react-dom@18.2.0", result.output.splitlines())

    def test_explicit_type(self):
        result = self.runner.invoke(cli, [PNPM_LOCK, "--type", "pnpm", "-f", "specs"])
        self.assertEqual(result.exit_code, 0, result.output)

    def test_invalid_type_choice(self):
        result = self.runner.invoke(cli, [PNPM_LOCK, "--type", "cargo"])
        self.assertEqual(result.exit_code, 2)

    def test_stats(self):
        result = self.runner.invoke(cli, [PNPM_LOCK, "--stats"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Distinct names", result.output)


class TestErrors(unittest.TestCase):
    """Test error reporting."""

    def setUp(self):
        self.runner = CliRunner()

    def test_missing_lockfile(self):
        with self.runner.isolated_filesystem():
            result = self.runner.invoke(cli, ["package-lock.json"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error", result.output)

    def test_unrecognized_content(self):
        with self.runner.isolated_filesystem():
            Path("weird.lock").write_text("not a lockfile at all\n", encoding="utf-8")
            result = self.runner.invoke(cli, ["weird.lock"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error", result.output)

    def test_missing_workspace_manifest(self):
        result = self.runner.invoke(cli, [NPM_LOCK, "--workspace", "packages/nope"])
        self.assertEqual(result.exit_code, 1)


class TestToolsCommand(unittest.TestCase):
    """Test the tools subcommand."""

    def setUp(self):
        self.runner = CliRunner()
        self.registry = ToolRegistry.probe(which=lambda command: "/usr/bin/npm" if command == "npm" else None)

    def test_tools_table(self):
        with patch.object(cli_main_module.ToolRegistry, "probe", return_value=self.registry):
            result = self.runner.invoke(cli, ["tools"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("npm", result.output)
        self.assertIn("pnpm", result.output)
        self.assertIn("yarn", result.output)

    def test_tools_verbose(self):
        with patch.object(cli_main_module.ToolRegistry, "probe", return_value=self.registry):
            result = self.runner.invoke(cli, ["tools", "--verbose"])
        self.assertIn("corepack enable pnpm", result.output)


class TestFormatDependencies(unittest.TestCase):
    """Test output rendering."""

    def test_sorted_by_name_then_version(self):
        deps = [Dependency("b", "1.0.0"), Dependency("a", "2.0.0"), Dependency("a", "10.0.0")]
        self.assertEqual(format_dependencies(deps, "specs"), ["a@10.0.0", "a@2.0.0", "b@1.0.0"])

    def test_unknown_format(self):
        with self.assertRaises(Exception):
            format_dependencies([], "xml")
