"""Session state for the deep review accumulator.

Every hook invocation is a fresh process, so the edit counter lives on disk:
one JSON file per (reviewer, session) under ~/.claude/hook-state/.

    ~/.claude/hook-state/checktests-<session>.json
    {"editCount": 2, "editedFiles": ["src/a.py"], "lastDispatchAt": null,
     "dispatchInProgress": false, "dispatchMarkedAt": null}

There is no locking. Two concurrent invocations in one session may both
load, both fire and both save (double dispatch or lost update). StateStore is
the seam for a compare-and-swap capable store; the evaluator does not care.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .sanitize import sanitize_id

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = Path.home() / ".claude" / "hook-state"


@dataclass
class SessionState:
    """Edit accumulator for one reviewer in one session."""

    session_id: str = ""
    edit_count: int = 0
    edited_files: list[str] = field(default_factory=list)
    last_dispatch_at: int | None = None  # epoch ms
    dispatch_in_progress: bool = False
    dispatch_marked_at: int | None = None  # epoch ms, set with the guard

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk shape (session id lives in the file name)."""
        return {
            "editCount": self.edit_count,
            "editedFiles": list(self.edited_files),
            "lastDispatchAt": self.last_dispatch_at,
            "dispatchInProgress": self.dispatch_in_progress,
            "dispatchMarkedAt": self.dispatch_marked_at,
        }

    @classmethod
    def from_dict(cls, data: Any, session_id: str = "") -> SessionState:
        """Deserialize, raising ValueError on anything that isn't a valid state."""
        if not isinstance(data, dict):
            raise ValueError(f"state must be an object, got {type(data).__name__}")

        edit_count = data.get("editCount", 0)
        if isinstance(edit_count, bool) or not isinstance(edit_count, int):
            raise ValueError(f"editCount must be an integer, got {edit_count!r}")
        if edit_count < 0:
            raise ValueError(f"editCount must be non-negative, got {edit_count}")

        files = data.get("editedFiles", [])
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ValueError("editedFiles must be a list of strings")

        in_progress = data.get("dispatchInProgress", False)
        if not isinstance(in_progress, bool):
            raise ValueError(f"dispatchInProgress must be a boolean, got {in_progress!r}")

        return cls(
            session_id=session_id,
            edit_count=edit_count,
            edited_files=list(dict.fromkeys(files)),
            last_dispatch_at=_optional_timestamp(data.get("lastDispatchAt")),
            dispatch_in_progress=in_progress,
            dispatch_marked_at=_optional_timestamp(data.get("dispatchMarkedAt")),
        )


def _optional_timestamp(value: Any) -> int | None:
    # 0 was the "never" marker in older state files
    if value is None or value == 0:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"timestamp must be a number or null, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"timestamp must be finite, got {value!r}")
    return int(value)


class StateStore:
    """Interface for session state persistence."""

    def load(self, kind_name: str, session_id: str) -> SessionState:
        raise NotImplementedError

    def save(self, kind_name: str, session_id: str, state: SessionState) -> None:
        raise NotImplementedError


class FileStateStore(StateStore):
    """One JSON file per (reviewer, session), rewritten whole on every save."""

    def __init__(self, state_dir: Path | None = None):
        self.state_dir = Path(state_dir) if state_dir else DEFAULT_STATE_DIR

    def path_for(self, kind_name: str, session_id: str) -> Path:
        return self.state_dir / f"{sanitize_id(kind_name)}-{sanitize_id(session_id)}.json"

    def load(self, kind_name: str, session_id: str) -> SessionState:
        """Load state; missing or corrupt files yield a fresh zero state."""
        path = self.path_for(kind_name, session_id)
        try:
            data = json.loads(path.read_text())
            return SessionState.from_dict(data, session_id=session_id)
        except FileNotFoundError:
            return SessionState(session_id=session_id)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError, ValueError) as e:
            logger.warning("state file corrupted or unreadable, resetting: %s: %s", path, e)
            return SessionState(session_id=session_id)

    def save(self, kind_name: str, session_id: str, state: SessionState) -> None:
        """Atomic full-file rewrite (temp file + rename). Raises OSError."""
        path = self.path_for(kind_name, session_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(state.to_dict(), f, indent=2)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def iter_state_files(self):
        """Yield (kind_name, session_id, path) for every state file on disk."""
        if not self.state_dir.is_dir():
            return
        for path in sorted(self.state_dir.glob("*-*.json")):
            kind_name, _, session_id = path.stem.partition("-")
            yield kind_name, session_id, path

    def delete(self, kind_name: str, session_id: str) -> bool:
        """Remove a state file. Returns True if one was removed."""
        path = self.path_for(kind_name, session_id)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
