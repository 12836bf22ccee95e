"""Deep review: edit accumulator that launches headless review agents.

Architecture:
- Gateway filters PostToolUse edit events per reviewer kind
- Session state (one JSON file per reviewer x session) counts edits
- Evaluator fires once the clamped edit threshold (3-7) is reached
- Identity resolver picks the task queue the agent files findings into
- Dispatcher launches the agent detached and returns immediately
"""

from .config import DispatchConfig, load_dispatch_config, settings_providers
from .dispatcher import (
    DispatchError,
    DispatchHandle,
    DispatchRequest,
    Dispatcher,
    SubprocessDispatcher,
    build_prompt,
)
from .gateway import DispatchEvent, check_relevance, is_edit_event, parse_event
from .identity import read_session_label, resolve_queue_id
from .kinds import REVIEWERS, ReviewerKind, enabled_reviewers, get_reviewer
from .pipeline import ReviewOutcome, process_event
from .state import FileStateStore, SessionState, StateStore

__all__ = [
    "DispatchConfig",
    "load_dispatch_config",
    "settings_providers",
    "DispatchError",
    "DispatchHandle",
    "DispatchRequest",
    "Dispatcher",
    "SubprocessDispatcher",
    "build_prompt",
    "DispatchEvent",
    "check_relevance",
    "is_edit_event",
    "parse_event",
    "read_session_label",
    "resolve_queue_id",
    "REVIEWERS",
    "ReviewerKind",
    "enabled_reviewers",
    "get_reviewer",
    "ReviewOutcome",
    "process_event",
    "FileStateStore",
    "SessionState",
    "StateStore",
]
