"""
Pytest configuration and fixtures for DevHost tests.
"""
import re
import sys
import json
from pathlib import Path

import pytest

from devhost.local.config import effective_settings

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"
CONNECTION_ID_PATTERN = re.compile(r"^devhost-\d+-[0-9a-f]+$")


class FakeChannel:
    """Records outbound messages instead of writing them to a socket."""

    def __init__(self, connected: bool = True):
        self.sent = []
        self.connected = connected

    def send(self, message) -> bool:
        if not self.connected:
            return False
        self.sent.append(message)
        return True


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def manifest(tmp_path: Path) -> Path:
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps({"id": "x", "api": 1}), encoding="utf-8")
    return path


@pytest.fixture
def echo_module() -> Path:
    """A Python stand-in for a plugin module that speaks the channel protocol."""
    return FIXTURES_DIR / "echo_module.py"


@pytest.fixture
def python_interpreter(monkeypatch):
    """Runs module entries with the current Python interpreter instead of node."""
    monkeypatch.setattr(effective_settings, "INTERPRETER", sys.executable)
    monkeypatch.setattr(effective_settings, "INTERPRETER_FLAGS", [])
    return sys.executable


@pytest.fixture
def connection_id_pattern():
    """Shape of a generated connection identity: devhost-<ms>-<hex>."""
    return CONNECTION_ID_PATTERN
