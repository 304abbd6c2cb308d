"""Tests for the top-level parsing entry points."""

import asyncio
import types

import pytest

import flatlock
from flatlock import (
    DependencySet,
    collect,
    from_path,
    from_path_async,
    from_string,
    from_yarn_lock,
    try_from_path,
    try_from_string,
)
from flatlock.api import coerce_type, load_document
from flatlock.exceptions import DetectionError, FileProcessingError, FlatlockError, ParseError, UsageError
from flatlock.models import LockfileType
from flatlock.parsers import create_default_registry
from flatlock.result import Err, Ok, ParseResult


class TestFromString:
    """Tests for from_string."""

    def test_returns_lazy_iterator(self, npm_workspace):
        deps = from_string((npm_workspace / "package-lock.json").read_text())
        assert isinstance(deps, types.GeneratorType)
        assert len(list(deps)) == 12
        assert list(deps) == []

    def test_fresh_iterator_per_call(self, berry_workspace):
        content = (berry_workspace / "yarn.lock").read_text()
        assert list(from_string(content)) == list(from_string(content))

    def test_detection_errors_are_eager(self):
        with pytest.raises(DetectionError):
            from_string("definitely not a lockfile")

    def test_explicit_type(self, classic_project):
        deps = list(from_string((classic_project / "yarn.lock").read_text(), type="yarn-classic"))
        assert len(deps) == 8

    def test_wrong_explicit_type(self, npm_workspace):
        with pytest.raises(ParseError):
            from_string((npm_workspace / "package-lock.json").read_text(), type=LockfileType.PNPM)

    def test_unknown_type_name(self):
        with pytest.raises(UsageError, match="yarn-berry"):
            from_string("{}", type="cargo")

    def test_custom_registry(self, npm_workspace):
        registry = create_default_registry()
        deps = from_string((npm_workspace / "package-lock.json").read_text(), registry=registry)
        assert len(list(deps)) == 12


class TestFromPath:
    """Tests for from_path and its variants."""

    def test_fixtures(self, npm_workspace, pnpm_workspace, berry_workspace, classic_project):
        assert len(list(from_path(npm_workspace / "package-lock.json"))) == 12
        assert len(list(from_path(pnpm_workspace / "pnpm-lock.yaml"))) == 9
        assert len(list(from_path(berry_workspace / "yarn.lock"))) == 7
        assert len(list(from_path(str(classic_project / "yarn.lock")))) == 8

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileProcessingError):
            from_path(tmp_path / "package-lock.json")

    def test_async(self, pnpm_workspace):
        deps = asyncio.run(from_path_async(pnpm_workspace / "pnpm-lock.yaml"))
        assert len(list(deps)) == 9

    def test_async_set(self, npm_workspace):
        deps = asyncio.run(DependencySet.from_path_async(npm_workspace / "package-lock.json"))
        assert deps.size == 12
        assert deps.dependencies_of(workspace_path="packages/api").size == 7


class TestTryVariants:
    """Tests for the ParseResult-returning entry points."""

    def test_success(self, npm_workspace):
        result = try_from_path(npm_workspace / "package-lock.json")
        assert result.ok
        assert len(list(result.unwrap())) == 12

    def test_detection_failure(self):
        result = try_from_string("definitely not a lockfile")
        assert not result.ok
        assert isinstance(result.error, DetectionError)
        with pytest.raises(DetectionError):
            result.unwrap()

    def test_read_failure(self, tmp_path):
        result = try_from_path(tmp_path / "missing.lock")
        assert isinstance(result.error, FileProcessingError)

    def test_all_errors_share_a_base(self):
        for error in (DetectionError, ParseError, UsageError, FileProcessingError):
            assert issubclass(error, FlatlockError)


class TestParseResult:
    """Tests for ParseResult construction."""

    def test_ok_requires_dependencies(self):
        with pytest.raises(ValueError):
            ParseResult(success=True)

    def test_err_wraps_strings(self):
        result = Err("boom")
        assert str(result.error) == "boom"

    def test_ok(self):
        result = Ok(iter([]))
        assert result.success
        assert result.error is None


class TestHelpers:
    """Tests for yarn dispatch, collect and type coercion."""

    def test_from_yarn_lock_dispatches_by_structure(self, berry_workspace, classic_project):
        berry = {dep.name for dep in from_yarn_lock((berry_workspace / "yarn.lock").read_text())}
        classic = {dep.name for dep in from_yarn_lock((classic_project / "yarn.lock").read_text())}
        assert "string-width" in berry
        assert "string-width-cjs" in classic

    def test_collect_path_and_content(self, npm_workspace):
        path = npm_workspace / "package-lock.json"
        assert len(collect(path)) == 12
        assert len(collect(str(path))) == 12
        assert len(collect(path.read_text())) == 12

    def test_coerce_type(self):
        assert coerce_type("pnpm") is LockfileType.PNPM
        assert coerce_type(LockfileType.NPM) is LockfileType.NPM
        assert coerce_type(None) is None
        with pytest.raises(UsageError):
            coerce_type("bun")

    def test_load_document(self, pnpm_workspace):
        parser, document = load_document((pnpm_workspace / "pnpm-lock.yaml").read_text())
        assert parser.lockfile_type is LockfileType.PNPM
        assert document["lockfileVersion"] == "9.0"

    def test_version(self):
        assert isinstance(flatlock.__version__, str)
