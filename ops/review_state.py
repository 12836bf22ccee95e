#!/usr/bin/env python3
"""
Review State - inspect and prune deep review session state files

Review hooks write one small JSON file per (reviewer, session) to
~/.claude/hook-state/ and never delete them. This tool is the retention
policy: run it by hand or from cron.

Usage:
    review_state.py status                         # files per reviewer
    review_state.py show checktests <session_id>   # print one state
    review_state.py reset checktests <session_id>  # delete one state
    review_state.py prune --days 14                # dry run
    review_state.py prune --days 14 --execute      # actually delete
"""

import argparse
import json
import sys
import time
from collections import Counter
from pathlib import Path

# Add lib to path for deep_review
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "lib"))
from deep_review.kinds import REVIEWERS  # noqa: E402
from deep_review.state import FileStateStore  # noqa: E402

SECONDS_PER_DAY = 86400
DEFAULT_RETENTION_DAYS = 14


def format_size(size_bytes: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "KB", "MB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} GB"


def find_expired(store: FileStateStore, max_days: float, now: float | None = None) -> list:
    """State files not modified for more than max_days, oldest first."""
    now = now if now is not None else time.time()
    expired = []
    for kind_name, session_id, path in store.iter_state_files():
        try:
            stat = path.stat()
        except OSError:
            continue
        age_days = (now - stat.st_mtime) / SECONDS_PER_DAY
        if age_days > max_days:
            expired.append((path, age_days, stat.st_size))
    expired.sort(key=lambda e: e[1], reverse=True)
    return expired


def cmd_status(args) -> int:
    store = FileStateStore(args.state_dir)
    counts: Counter = Counter()
    total_bytes = 0
    for kind_name, _, path in store.iter_state_files():
        counts[kind_name] += 1
        try:
            total_bytes += path.stat().st_size
        except OSError:
            pass

    print(f"State dir: {store.state_dir}")
    if not counts:
        print("No review state files.")
        return 0
    for kind_name, count in sorted(counts.items()):
        kind = REVIEWERS.get(kind_name)
        description = kind.description if kind else "(unknown reviewer)"
        print(f"  {kind_name:<15} {count:>5} sessions  {description}")
    print(f"Total: {sum(counts.values())} files, {format_size(total_bytes)}")
    return 0


def cmd_show(args) -> int:
    store = FileStateStore(args.state_dir)
    path = store.path_for(args.kind, args.session_id)
    if not path.exists():
        print(f"No state for {args.kind}/{args.session_id} ({path})")
        return 1
    state = store.load(args.kind, args.session_id)
    print(json.dumps(state.to_dict(), indent=2))
    return 0


def cmd_reset(args) -> int:
    store = FileStateStore(args.state_dir)
    if store.delete(args.kind, args.session_id):
        print(f"x Removed {store.path_for(args.kind, args.session_id)}")
        return 0
    print(f"No state for {args.kind}/{args.session_id}")
    return 1


def cmd_prune(args) -> int:
    store = FileStateStore(args.state_dir)
    expired = find_expired(store, args.days)
    if not expired:
        print("Nothing to clean up!")
        return 0

    total = sum(e[2] for e in expired)
    print(f"{len(expired)} state files older than {args.days} days ({format_size(total)})")
    removed = 0
    for path, age, size in expired:
        marker = "  "
        if args.execute:
            try:
                path.unlink()
                marker = "x "
                removed += 1
            except OSError:
                marker = "! "
        print(f"  {marker}{path.name} ({age:.0f}d)")

    if args.execute:
        print(f"Removed: {removed} files")
    else:
        print("\nRun with --execute to delete these files")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect and prune deep review session state"
    )
    parser.add_argument(
        "--state-dir", type=Path, default=None, help="Override ~/.claude/hook-state"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    status_parser = subparsers.add_parser("status", help="Show state files per reviewer")
    status_parser.set_defaults(func=cmd_status)

    show_parser = subparsers.add_parser("show", help="Print one session state")
    show_parser.add_argument("kind", help="Reviewer name, e.g. checktests")
    show_parser.add_argument("session_id")
    show_parser.set_defaults(func=cmd_show)

    reset_parser = subparsers.add_parser("reset", help="Delete one session state")
    reset_parser.add_argument("kind", help="Reviewer name, e.g. checktests")
    reset_parser.add_argument("session_id")
    reset_parser.set_defaults(func=cmd_reset)

    prune_parser = subparsers.add_parser("prune", help="Delete old state files")
    prune_parser.add_argument(
        "--days", type=float, default=DEFAULT_RETENTION_DAYS, help="Retention in days"
    )
    prune_parser.add_argument("--execute", action="store_true", help="Actually delete files")
    prune_parser.set_defaults(func=cmd_prune)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main() or 0)
