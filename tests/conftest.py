"""
Root pytest configuration and shared fixtures.

Provides a controllable clock, isolated settings documents, and
response envelope validation.
"""

import json
from pathlib import Path
from typing import Any, Dict
from unittest.mock import patch

import pytest

from dbcli.cli.registry import set_context
from dbcli.config import set_config
from dbcli.core.settings import SettingsDocument

# Response contract version from responses.py
RESPONSE_CONTRACT_VERSION = "response-v2"

FROZEN_NOW = 1_700_000_000


class Clock:
    """Manually advanced replacement for time.time()."""

    def __init__(self, now: float = FROZEN_NOW):
        self.now = now

    def time(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Freeze the cache clock; tests move it with ``clock.advance()``."""
    c = Clock()
    with patch("dbcli.core.cache.time.time", side_effect=c.time):
        yield c


@pytest.fixture
def settings() -> SettingsDocument:
    """In-memory settings document with one unrelated setting."""
    doc = SettingsDocument()
    doc.set("auth.username", "jane")
    return doc


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    path = tmp_path / "dbcli"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def reset_globals(monkeypatch):
    """Isolate every test from the user's environment and global state."""
    for name in (
        "DBCLI_CONFIG_DIR",
        "DBCLI_CONFIG_FILE",
        "DBCLI_LOG_LEVEL",
        "DBCLI_STRUCTURED_LOGGING",
        "DBCLI_CACHE_DISABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    set_context(None)
    yield
    set_config(None)
    set_context(None)


def validate_response_envelope(response: Dict[str, Any]) -> bool:
    """Validate that a response dict conforms to response-v2 envelope.

    Raises:
        AssertionError: With detailed message on validation failure
    """
    required_keys = {"success", "data", "error", "meta"}
    missing = required_keys - set(response.keys())
    assert not missing, f"Response missing required keys: {missing}"

    assert isinstance(response["success"], bool), "success must be boolean"
    assert isinstance(response["data"], dict), "data must be dict"
    assert isinstance(response["meta"], dict), "meta must be dict"

    if response["success"]:
        assert response["error"] is None, "error must be null when success=True"
    else:
        assert isinstance(response["error"], str) and response["error"], (
            "error must be non-empty string when success=False"
        )

    assert response["meta"].get("version") == RESPONSE_CONTRACT_VERSION, (
        f"meta.version must be '{RESPONSE_CONTRACT_VERSION}'"
    )
    return True


@pytest.fixture
def assert_response_contract():
    """Parse a JSON envelope, validate it, and return the dict.

    Usage:
        def test_cmd(assert_response_contract):
            data = assert_response_contract(result.stdout)
            assert data["data"]["total_entries"] == 0
    """

    def _assert(raw: str) -> Dict[str, Any]:
        response = json.loads(raw)
        validate_response_envelope(response)
        return response

    return _assert
