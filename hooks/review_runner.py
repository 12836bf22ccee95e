#!/usr/bin/env python3
"""
Composite Review Runner: runs the deep review reviewers for one PostToolUse
edit event in a single process.

Register in settings.json (PostToolUse, matcher "Edit|Write|NotebookEdit"):
    python3 ~/.claude/hooks/review_runner.py              # every reviewer
    python3 ~/.claude/hooks/review_runner.py checktests   # just one

REVIEWERS INDEX:
    checktests     - missing tests            -> <project>-qa
    checklint      - lint / type errors       -> <project>-qa
    checkfiles     - general review (any dir) -> <project>-bugfixes
    checkbugs      - bugs via codex           -> <project>-bugfixes
    checkdocs      - missing documentation    -> <project>-dev
    checksecurity  - security review          -> <project>-dev

ARCHITECTURE:
  - Each reviewer keeps its own edit counter per session on disk
  - After N edits (editThreshold, 3-7) it launches a detached headless agent
  - Reviewers run independently; one failing never stops the others
  - Output is always {"decision": "approve"}
"""

import _lib_path  # noqa: F401
import json
import sys
import time

from _hook_result import HookResult
from _logging import configure_logging, log_debug

from deep_review import (
    REVIEWERS,
    FileStateStore,
    SubprocessDispatcher,
    enabled_reviewers,
    is_edit_event,
    parse_event,
    process_event,
    read_session_label,
    settings_providers,
)

SLOW_RUN_MS = 100


def select_reviewers(names: list[str]) -> list:
    """Reviewers named on the command line, or every enabled one."""
    if not names:
        return enabled_reviewers()
    selected = []
    for name in names:
        kind = REVIEWERS.get(name)
        if kind is None:
            log_debug("review-runner", f"unknown reviewer ignored: {name}")
            continue
        if kind.is_disabled_by_env():
            log_debug("review-runner", f"reviewer disabled by {kind.disable_env_var}")
            continue
        selected.append(kind)
    return selected


def run_reviewers(data, reviewers, store=None, dispatcher=None) -> list:
    """Run each reviewer against one raw event. Returns their outcomes."""
    event = parse_event(data)
    if event is None:
        log_debug("review-runner", "malformed event, nothing to do")
        return []
    if not is_edit_event(event):
        return []

    store = store or FileStateStore()
    dispatcher = dispatcher or SubprocessDispatcher()
    providers = settings_providers(event.cwd)
    session_label = read_session_label(event.transcript_path)

    outcomes = []
    for kind in reviewers:
        try:
            outcome = process_event(
                kind,
                event,
                store=store,
                dispatcher=dispatcher,
                session_label=session_label,
                providers=providers,
            )
        except Exception as e:
            print(f"[review-runner] Reviewer {kind.name} error: {e}", file=sys.stderr)
            continue
        log_debug(
            "review-runner",
            f"{kind.name}: {outcome.status} {outcome.reason}".rstrip(),
        )
        outcomes.append(outcome)
    return outcomes


def main(argv=None, stdin=None, stdout=None) -> int:
    """Main entry point."""
    start = time.time()
    configure_logging()
    args = sys.argv[1:] if argv is None else argv

    try:
        data = json.load(stdin or sys.stdin)
    except (json.JSONDecodeError, ValueError):
        data = None

    if data is not None:
        try:
            run_reviewers(data, select_reviewers(args))
        except Exception as e:
            print(f"[review-runner] error: {e}", file=sys.stderr)

    HookResult.approve().emit(stdout)

    elapsed = (time.time() - start) * 1000
    if elapsed > SLOW_RUN_MS:
        print(f"[review-runner] Slow: {elapsed:.1f}ms", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
