"""Tests for the yarn berry lockfile parser."""

import pytest

from flatlock.exceptions import ParseError
from flatlock.parsers.yarn_berry import (
    LOCAL_PROTOCOLS,
    YarnBerryLockParser,
    descriptor_index,
    from_yarn_berry_lock,
    parse_lockfile_key,
    parse_resolution,
    resolution_protocol,
    resolution_reference,
    workspace_members,
)


class TestParseLockfileKey:
    """Tests for berry descriptor and locator names."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("lodash@npm:^4.17.21", "lodash"),
            ("@babel/core@npm:7.23.0", "@babel/core"),
            ("lodash@npm:^4.17.0, lodash@npm:^4.17.21", "lodash"),
            ("string-width-cjs@npm:string-width@^4.2.0", "string-width-cjs"),
            ("resolve@patch:resolve@npm%3A1.22.1#~builtin<compat/resolve>", "resolve"),
            (
                "@types/node@patch:@types/node@npm%3A20.0.0#./patches/node.patch::locator=app%40workspace%3A.",
                "@types/node",
            ),
            ("@acme/utils@workspace:packages/utils", "@acme/utils"),
            ("tarball@https://example.com/tarball.tgz", "tarball"),
            ("left-pad", "left-pad"),
            ("@scope/bare", "@scope/bare"),
        ],
    )
    def test_names(self, key, expected):
        assert parse_lockfile_key(key) == expected

    def test_resolution(self):
        assert parse_resolution("string-width@npm:4.2.3") == "string-width"
        assert parse_resolution("") is None
        assert parse_resolution(None) is None


class TestLocators:
    """Tests for protocol and reference extraction."""

    def test_protocols(self):
        assert resolution_protocol("lodash@npm:4.17.21") == "npm"
        assert resolution_protocol("app@workspace:.") == "workspace"
        assert resolution_protocol("fsevents@patch:fsevents@npm%3A2.3.3#optional!builtin<compat/fsevents>") == "patch"
        assert resolution_protocol("left-pad") is None

    def test_local_protocol_set(self):
        assert LOCAL_PROTOCOLS == {"workspace", "portal", "link", "file"}

    def test_reference(self):
        assert resolution_reference("@acme/api@workspace:packages/api") == "packages/api"
        assert resolution_reference("app@workspace:.") == "."


class TestFromYarnBerryLock:
    """Tests for from_yarn_berry_lock."""

    def test_fixture_records(self, berry_workspace):
        deps = list(from_yarn_berry_lock((berry_workspace / "yarn.lock").read_text(encoding="utf-8")))
        assert sorted(dep.key for dep in deps) == [
            "ansi-regex@5.0.1",
            "chalk@4.1.2",
            "fsevents@2.3.3",
            "fsevents@2.3.3",
            "string-width@4.2.3",
            "strip-ansi@6.0.1",
            "supports-color@7.2.0",
        ]

    def test_alias_reports_real_package(self, berry_workspace):
        names = {dep.name for dep in from_yarn_berry_lock((berry_workspace / "yarn.lock").read_text())}
        assert "string-width" in names
        assert "string-width-cjs" not in names

    def test_workspaces_are_skipped(self, berry_workspace):
        names = {dep.name for dep in from_yarn_berry_lock((berry_workspace / "yarn.lock").read_text())}
        assert names.isdisjoint({"@acme/api", "@acme/utils", "monorepo"})

    @pytest.mark.parametrize("protocol", ["workspace", "portal", "link", "file"])
    def test_local_protocols_are_skipped(self, protocol):
        lock = {
            "__metadata": {"version": 6},
            f"local@{protocol}:./local": {"version": "1.0.0", "resolution": f"local@{protocol}:./local"},
        }
        assert list(from_yarn_berry_lock(lock)) == []

    def test_patch_protocol_is_kept(self):
        lock = {
            "__metadata": {"version": 6},
            "resolve@patch:resolve@npm%3A^1.22.1#~builtin<compat/resolve>": {
                "version": "1.22.1",
                "resolution": "resolve@patch:resolve@npm%3A1.22.1#~builtin<compat/resolve>::version=1.22.1&hash=c3c19d",
            },
        }
        (dep,) = from_yarn_berry_lock(lock)
        assert dep.key == "resolve@1.22.1"

    def test_name_falls_back_to_key(self):
        lock = {"__metadata": {"version": 6}, "lodash@npm:^4.17.21": {"version": "4.17.21"}}
        (dep,) = from_yarn_berry_lock(lock)
        assert dep.key == "lodash@4.17.21"
        assert dep.resolved is None

    def test_metadata_and_optional_edges(self, berry_workspace):
        deps = {dep.key: dep for dep in from_yarn_berry_lock((berry_workspace / "yarn.lock").read_text())}
        chalk = deps["chalk@4.1.2"]
        assert chalk.integrity == "10c0/chalk"
        assert chalk.resolved == "chalk@npm:4.1.2"
        assert chalk.edges == {"supports-color": "npm:^7.1.0"}

    def test_invalid_yaml(self):
        with pytest.raises(ParseError):
            list(from_yarn_berry_lock("__metadata: [unclosed"))


class TestWorkspaceMembers:
    """Tests for berry workspace members."""

    def test_members(self, berry_workspace):
        members = {m.path: m for m in workspace_members((berry_workspace / "yarn.lock").read_text())}
        assert set(members) == {".", "packages/api", "packages/utils"}
        api = members["packages/api"]
        assert api.name == "@acme/api"
        assert api.dependencies == {"@acme/utils": "workspace:^", "string-width-cjs": "npm:string-width@^4.2.0"}
        assert api.optional_dependencies == {"fsevents": "npm:^2.3.0"}


class TestDescriptorIndex:
    """Tests for the berry descriptor index."""

    def test_alias_descriptor_points_at_real_package(self, berry_workspace):
        index = descriptor_index((berry_workspace / "yarn.lock").read_text())
        assert index["string-width-cjs@npm:string-width@^4.2.0"] == "string-width@4.2.3"
        assert index["string-width@npm:^4.2.0"] == "string-width@4.2.3"
        assert index["chalk@npm:^4.1.0"] == "chalk@4.1.2"

    def test_workspace_descriptors_are_excluded(self, berry_workspace):
        index = descriptor_index((berry_workspace / "yarn.lock").read_text())
        assert "@acme/utils@workspace:^" not in index


class TestYarnBerryLockParser:
    """Tests for the parser plugin."""

    def test_load_and_iterate(self, berry_workspace):
        parser = YarnBerryLockParser()
        document = parser.load((berry_workspace / "yarn.lock").read_text())
        assert len(list(parser.iter_dependencies(document))) == 7
        assert "chalk@npm:^4.1.0" in parser.descriptors(document)
