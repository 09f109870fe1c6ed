from __future__ import annotations

import logging
import os
import random
import tempfile
from collections.abc import Generator, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from click.testing import CliRunner

    from paramix.store import ParameterStore

#: Fixed instant used by the ``frozen_clock`` fixture (1700000000000 ms)
FROZEN_NOW = datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    This fixture runs automatically for all tests to ensure logging
    is properly configured to output to stderr (not stdout) and
    suppress verbose log output during tests.
    """
    from paramix.logging import clear_context, configure_logging

    configure_logging(level=logging.WARNING)
    yield
    clear_context()


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also saves and restores the current working directory to prevent
    tests that use os.chdir() from affecting other tests.
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
        os.chdir(original_cwd)


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove all PARAMIX_ environment variables for clean testing."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("PARAMIX_"):
            del os.environ[key]
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in ``temp_dir`` with HOME pointing at it, so no user config leaks in."""
    monkeypatch.chdir(temp_dir)
    monkeypatch.setattr(Path, "home", lambda: temp_dir)
    return temp_dir


@pytest.fixture
def frozen_clock() -> datetime:
    return FROZEN_NOW


@pytest.fixture
def store() -> ParameterStore:
    """A parameter store with a seeded random source and a frozen clock."""
    from paramix.store import ParameterStore, RunInfo

    return ParameterStore(
        run=RunInfo(
            test_run_id="run-1",
            test_start_time=FROZEN_NOW,
            launched_by="tester",
        ),
        rng=random.Random(1234),
        clock=lambda: FROZEN_NOW,
    )


@pytest.fixture
def sample_config_yaml() -> str:
    """Return sample paramix.yaml content for testing."""
    return """
parameters:
  host: api.example.com
  base_url: https://${host}
  port: 8080
  greeting: ${__upper('hello')}

extractions:
  - parameter: post_id
    type: jsonpath
    query: post.id
  - parameter: title
    type: jsonpath
    query: $.post.title
    default: untitled

run:
  launched_by: ci
  random_seed: 7

verbosity: info
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
