"""One reviewer, one event: gateway -> state -> evaluator -> identity ->
dispatcher -> state.

``process_event`` never raises for expected failures (corrupt state, missing
agent CLI, unwritable state dir); those are logged and reported through
ReviewOutcome.status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import DispatchConfig, load_dispatch_config
from .dispatcher import DispatchError, Dispatcher, DispatchHandle, DispatchRequest
from .evaluator import (
    abort_dispatch,
    begin_dispatch,
    clamp_threshold,
    clear_stale_guard,
    complete_dispatch,
    now_ms,
    record_edit,
    should_dispatch,
)
from .gateway import DispatchEvent, check_relevance
from .identity import resolve_queue_id
from .kinds import ReviewerKind
from .state import SessionState, StateStore

logger = logging.getLogger(__name__)

SKIPPED = "skipped"
ACCUMULATED = "accumulated"
IN_PROGRESS = "in_progress"
DISPATCHED = "dispatched"
DISPATCH_FAILED = "dispatch_failed"


@dataclass
class ReviewOutcome:
    kind: str
    status: str
    reason: str = ""
    edit_count: int = 0
    threshold: int = 0
    queue_id: str | None = None
    handle: DispatchHandle | None = None


def _persist(store: StateStore, kind: ReviewerKind, event: DispatchEvent, state: SessionState) -> bool:
    try:
        store.save(kind.name, event.session_id, state)
        return True
    except OSError as e:
        logger.warning("[%s] state save failed for %s: %s", kind.name, event.session_id, e)
        return False


def process_event(
    kind: ReviewerKind,
    event: DispatchEvent,
    *,
    store: StateStore,
    dispatcher: Dispatcher,
    config: DispatchConfig | None = None,
    session_label: str | None = None,
    providers: list | None = None,
    at_ms: int | None = None,
) -> ReviewOutcome:
    """Count one edit event for ``kind`` and launch a review at threshold."""
    if config is None:
        config = load_dispatch_config(kind.config_key, event.cwd, providers)

    relevance = check_relevance(kind, event, config, session_label)
    if not relevance.relevant:
        return ReviewOutcome(kind.name, SKIPPED, reason=relevance.reason)

    current = at_ms if at_ms is not None else now_ms()
    threshold = clamp_threshold(config.edit_threshold)

    state = store.load(kind.name, event.session_id)
    if clear_stale_guard(state, current):
        logger.warning("[%s] cleared abandoned dispatch guard for %s", kind.name, event.session_id)

    record_edit(state, event.file_paths)

    if not should_dispatch(state, threshold):
        status = IN_PROGRESS if state.dispatch_in_progress else ACCUMULATED
        _persist(store, kind, event, state)
        return ReviewOutcome(
            kind.name, status, edit_count=state.edit_count, threshold=threshold
        )

    resolved = resolve_queue_id(kind, config, event.cwd, session_label)
    request = DispatchRequest(
        kind=kind,
        cwd=event.cwd,
        session_id=event.session_id,
        files=tuple(state.edited_files),
        queue_id=resolved.queue_id,
        review_prompt=config.review_prompt,
        log_output=config.log_output,
    )

    begin_dispatch(state, current)
    _persist(store, kind, event, state)

    try:
        handle = dispatcher.dispatch(request)
    except DispatchError as e:
        logger.warning("[%s] dispatch failed, will retry on next edit: %s", kind.name, e)
        abort_dispatch(state)
        _persist(store, kind, event, state)
        return ReviewOutcome(
            kind.name,
            DISPATCH_FAILED,
            reason=str(e),
            edit_count=state.edit_count,
            threshold=threshold,
            queue_id=resolved.queue_id,
        )
    except Exception:
        # Never leave the guard set behind an unexpected failure
        abort_dispatch(state)
        _persist(store, kind, event, state)
        raise

    complete_dispatch(state, current)
    _persist(store, kind, event, state)
    logger.debug(
        "[%s] dispatched %d files to %s (queue from %s)",
        kind.name,
        handle.file_count,
        handle.queue_id,
        resolved.source,
    )
    return ReviewOutcome(
        kind.name,
        DISPATCHED,
        edit_count=0,
        threshold=threshold,
        queue_id=handle.queue_id,
        handle=handle,
    )
