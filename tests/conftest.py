"""Shared fixtures for the deep review test suite."""

import sys
from pathlib import Path

_root = Path(__file__).resolve().parent.parent
for p in [_root / "lib", _root / "hooks", _root / "ops", Path(__file__).resolve().parent]:
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

import pytest  # noqa: E402

import deep_review.config as review_config  # noqa: E402
import deep_review.dispatcher as review_dispatcher  # noqa: E402
import deep_review.state as review_state  # noqa: E402
from deep_review.state import FileStateStore  # noqa: E402

from _review_fixtures import RecordingDispatcher  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.claude."""
    home = tmp_path / "home" / ".claude"
    monkeypatch.setattr(review_config, "GLOBAL_SETTINGS_PATH", home / "settings.json")
    monkeypatch.setattr(review_state, "DEFAULT_STATE_DIR", home / "hook-state")
    monkeypatch.setattr(review_dispatcher, "DEFAULT_LOG_DIR", home / "hook-state" / "logs")
    for var in [
        "CLAUDE_HOOK_DISABLE_CHECKTESTS",
        "CLAUDE_HOOK_DISABLE_CHECKLINT",
        "CLAUDE_HOOK_DISABLE_CHECKFILES",
        "CLAUDE_HOOK_DISABLE_CHECKBUGS",
        "CLAUDE_HOOK_DISABLE_CHECKDOCS",
        "CLAUDE_HOOK_DISABLE_CHECKSECURITY",
    ]:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def state_dir(tmp_path):
    return tmp_path / "hook-state"


@pytest.fixture
def store(state_dir):
    return FileStateStore(state_dir)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def project_dir(tmp_path):
    """A working directory that passes the [prefix]-[name] folder check."""
    path = tmp_path / "work" / "hook-checktests"
    path.mkdir(parents=True)
    return path
