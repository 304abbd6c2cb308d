"""Pytest configuration and shared fixtures for all tests."""

from pathlib import Path

import pytest

TEST_DATA = Path(__file__).parent / "test-data"


@pytest.fixture(autouse=True)
def clean_flatlock_env(monkeypatch):
    """Keep FLATLOCK_* settings from the developer's shell out of the tests.

    The CLI reads its options from these variables when no argument is
    given, so a stray FLATLOCK_FORMAT would change test output.
    """
    for name in (
        "FLATLOCK_LOG_LEVEL",
        "FLATLOCK_LOG_FORMAT",
        "FLATLOCK_WORKSPACE",
        "FLATLOCK_DEV",
        "FLATLOCK_PEER",
        "FLATLOCK_OPTIONAL",
        "FLATLOCK_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_data() -> Path:
    return TEST_DATA


@pytest.fixture
def npm_workspace() -> Path:
    return TEST_DATA / "npm-workspace"


@pytest.fixture
def pnpm_workspace() -> Path:
    return TEST_DATA / "pnpm-workspace"


@pytest.fixture
def berry_workspace() -> Path:
    return TEST_DATA / "yarn-berry-workspace"


@pytest.fixture
def classic_project() -> Path:
    return TEST_DATA / "yarn-classic"
