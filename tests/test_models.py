"""Tests for models and the parser registry."""

import dataclasses

import pytest

from flatlock.models import Dependency, LockfileType, dependency_key, is_local_reference, string_map
from flatlock.parsers import ParserRegistry, create_default_registry
from flatlock.parsers.npm import PackageLockParser


class TestDependency:
    """Tests for the Dependency record."""

    def test_identity_ignores_metadata(self):
        assert Dependency("a", "1.0.0", integrity="x") == Dependency("a", "1.0.0", integrity="y")
        assert Dependency("a", "1.0.0") != Dependency("a", "1.0.1")

    def test_key(self):
        assert Dependency("@babel/core", "7.23.0").key == "@babel/core@7.23.0"
        assert dependency_key("lodash", "4.17.21") == "lodash@4.17.21"

    def test_to_dict_omits_unset_fields(self):
        assert Dependency("a", "1.0.0").to_dict() == {"name": "a", "version": "1.0.0"}

    def test_purl(self):
        assert Dependency("lodash", "4.17.21").purl == "pkg:npm/lodash@4.17.21"
        assert Dependency("@babel/core", "7.23.0").purl == "pkg:npm/%40babel/core@7.23.0"

    def test_immutable(self):
        dep = Dependency("a", "1.0.0", edges={"b": "^1.0.0"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            dep.version = "2.0.0"
        with pytest.raises(dataclasses.FrozenInstanceError):
            dep.edges = {}

    def test_hashable_by_identity(self):
        records = {Dependency("a", "1.0.0", integrity="x"), Dependency("a", "1.0.0", edges={"b": "1"})}
        assert len(records) == 1
        assert hash(Dependency("a", "1.0.0")) != hash(Dependency("a", "1.0.1"))


class TestHelpers:
    """Tests for model helpers."""

    @pytest.mark.parametrize("value", ["link:../a", "file:./b", "workspace:*", "portal:../c"])
    def test_local_references(self, value):
        assert is_local_reference(value)

    @pytest.mark.parametrize("value", ["^1.0.0", "npm:foo@1", None, 3])
    def test_non_local_references(self, value):
        assert not is_local_reference(value)

    def test_string_map(self):
        assert string_map({"a": "1.0.0", "b": {"specifier": "^2", "version": "2.0.0"}, "c": None}) == {
            "a": "1.0.0",
            "b": "2.0.0",
        }
        assert string_map(["not", "a", "map"]) == {}

    def test_lockfile_type_str(self):
        assert str(LockfileType.YARN_BERRY) == "yarn-berry"


class TestParserRegistry:
    """Tests for ParserRegistry."""

    def test_default_registry(self):
        registry = create_default_registry()
        assert registry.registered_parsers == [
            "npm-package-lock",
            "pnpm-lock",
            "yarn-classic-lock",
            "yarn-berry-lock",
        ]
        assert {"package-lock.json", "pnpm-lock.yaml", "yarn.lock"} <= registry.supported_files

    def test_get_parser(self):
        registry = create_default_registry()
        assert registry.get_parser(LockfileType.PNPM).name == "pnpm-lock"

    def test_get_parser_unregistered(self):
        with pytest.raises(KeyError):
            ParserRegistry().get_parser(LockfileType.NPM)

    def test_get_parser_for(self):
        registry = ParserRegistry()
        registry.register(PackageLockParser())
        assert registry.get_parser_for("npm-shrinkwrap.json").lockfile_type is LockfileType.NPM
        assert registry.get_parser_for("Cargo.lock") is None
