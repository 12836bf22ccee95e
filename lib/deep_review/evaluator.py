"""Threshold evaluator: count edits, decide when to fire, reset after firing.

Two states per session:

    Accumulating --(count >= threshold, no guard)--> Dispatching
    Dispatching  --(spawn issued)-------------------> Accumulating (reset)
    Dispatching  --(spawn failed)-------------------> Accumulating (kept)

The in-progress guard is set and cleared inside one process, so it stops a
single invocation from firing twice but is not mutual exclusion between
concurrent invocations (see state.py).
"""

from __future__ import annotations

import math
import time
from typing import Any, Iterable

from .config import DEFAULT_THRESHOLD, MAX_THRESHOLD, MIN_THRESHOLD
from .state import SessionState

# Longer than any host hook timeout; a guard this old belongs to a dead process
STALE_GUARD_MS = 10 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def clamp_threshold(value: Any) -> int:
    """Effective threshold: unset or non-numeric -> 3, else clamped to [3, 7]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return DEFAULT_THRESHOLD
    if math.isnan(value):
        return DEFAULT_THRESHOLD
    if math.isinf(value):
        return MAX_THRESHOLD if value > 0 else MIN_THRESHOLD
    return max(MIN_THRESHOLD, min(MAX_THRESHOLD, int(value)))


def record_edit(state: SessionState, file_paths: Iterable[str]) -> None:
    """Count one event and add any paths not seen in this window."""
    state.edit_count += 1
    for path in file_paths:
        if path not in state.edited_files:
            state.edited_files.append(path)


def should_dispatch(state: SessionState, threshold: int) -> bool:
    return state.edit_count >= threshold and not state.dispatch_in_progress


def begin_dispatch(state: SessionState, at_ms: int | None = None) -> None:
    state.dispatch_in_progress = True
    state.dispatch_marked_at = at_ms if at_ms is not None else now_ms()


def complete_dispatch(state: SessionState, at_ms: int | None = None) -> None:
    """Spawn issued: start a fresh window."""
    state.edit_count = 0
    state.edited_files = []
    state.last_dispatch_at = at_ms if at_ms is not None else now_ms()
    state.dispatch_in_progress = False
    state.dispatch_marked_at = None


def abort_dispatch(state: SessionState) -> None:
    """Spawn failed: drop the guard, keep the window so the next edit retries."""
    state.dispatch_in_progress = False
    state.dispatch_marked_at = None


def clear_stale_guard(
    state: SessionState, at_ms: int | None = None, max_age_ms: int = STALE_GUARD_MS
) -> bool:
    """Clear a guard left behind by a process that died mid-dispatch.

    A guard without a timestamp (written by older hooks) counts as stale.
    Returns True if the guard was cleared.
    """
    if not state.dispatch_in_progress:
        return False
    current = at_ms if at_ms is not None else now_ms()
    marked = state.dispatch_marked_at
    if marked is not None and current - marked < max_age_ms:
        return False
    abort_dispatch(state)
    return True
