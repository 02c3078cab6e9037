"""Shared test fixtures for apicatalog.

Provides reusable fixtures for sample AsyncAPI documents, an in-memory
catalog, isolated config environments, and output state management.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from apicatalog.catalog.memory import MemoryCatalogStore
from apicatalog.output import OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


HEARTBEAT = {
    "asyncapi": "2.0.0",
    "info": {"version": "1.0.0"},
    "channels": {
        "heartbeat": {
            "subscribe": {"message": {"payload": {"type": "string"}}},
        },
    },
}


@pytest.fixture
def heartbeat_doc() -> dict[str, Any]:
    """The smallest useful document: one channel with a string payload."""
    return copy.deepcopy(HEARTBEAT)


@pytest.fixture
def streetlights_doc() -> dict[str, Any]:
    """Load the streetlights AsyncAPI 2.0 document."""
    with open(FIXTURES_DIR / "streetlights.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def streetlights_path(tmp_path: Path) -> Path:
    """A copy of the streetlights document at ``tmp_path/streetlights.json``."""
    path = tmp_path / "streetlights.json"
    path.write_text(
        (FIXTURES_DIR / "streetlights.json").read_text(encoding="utf-8"),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def ping_doc() -> dict[str, Any]:
    """Two channels whose operations share one component message."""
    ping = {"$ref": "#/components/messages/Ping"}
    return {
        "asyncapi": "2.0.0",
        "info": {"title": "Ping", "version": "0.1.0"},
        "channels": {
            "ping/a": {"publish": {"message": dict(ping)}},
            "ping/b": {"subscribe": {"message": dict(ping)}},
        },
        "components": {
            "messages": {
                "Ping": {"payload": {"type": "string"}},
            },
        },
    }


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> MemoryCatalogStore:
    """An empty in-memory catalog."""
    return MemoryCatalogStore()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all APICATALOG_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("apicatalog.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "APICATALOG_URL",
        "APICATALOG_BASEPATH",
        "APICATALOG_USER",
        "APICATALOG_PASSWORD",
        "APICATALOG_DATASPACE",
        "APICATALOG_DATASET",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Set up a quiet output manager for tests that don't care about output.

    Installs a quiet, colourless OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(quiet=True, no_color=True, rich_tables=False)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
