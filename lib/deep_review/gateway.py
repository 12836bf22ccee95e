"""Invocation gateway: turn one hook event into a DispatchEvent and decide
whether a reviewer should care about it.

Nothing in here touches disk except reading the event itself; an irrelevant
event never mutates state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .config import EDIT_TOOLS, DispatchConfig
from .kinds import ReviewerKind

# [prefix]-[name] folders: hook-checklint, skill-installhook, iapp-mail
PROJECT_FOLDER_PATTERN = re.compile(r"^[a-z]+-[a-z0-9-]+$", re.IGNORECASE)

FILE_PATH_KEYS = ("file_path", "notebook_path")


@dataclass(frozen=True)
class DispatchEvent:
    """The parts of a PostToolUse event the accumulator uses."""

    session_id: str
    cwd: str
    tool_name: str
    file_paths: tuple[str, ...] = ()
    transcript_path: str | None = None


@dataclass(frozen=True)
class Relevance:
    relevant: bool
    reason: str


RELEVANT = Relevance(True, "relevant")


def parse_event(data: Any) -> DispatchEvent | None:
    """Build a DispatchEvent from parsed stdin JSON, or None if malformed."""
    if not isinstance(data, dict):
        return None

    session_id = data.get("session_id")
    cwd = data.get("cwd")
    tool_name = data.get("tool_name")
    if not all(isinstance(v, str) and v for v in (session_id, cwd, tool_name)):
        return None

    tool_input = data.get("tool_input")
    if not isinstance(tool_input, dict):
        tool_input = {}
    paths = [tool_input.get(key) for key in FILE_PATH_KEYS]
    file_paths = tuple(dict.fromkeys(p for p in paths if isinstance(p, str) and p))

    transcript_path = data.get("transcript_path")
    if not isinstance(transcript_path, str) or not transcript_path:
        transcript_path = None

    return DispatchEvent(
        session_id=session_id,
        cwd=cwd,
        tool_name=tool_name,
        file_paths=file_paths,
        transcript_path=transcript_path,
    )


def is_edit_event(event: DispatchEvent) -> bool:
    return event.tool_name in EDIT_TOOLS


def project_folder_name(cwd: str) -> str:
    """Last non-empty path component of cwd ("" for "/")."""
    parts = [p for p in re.split(r"[\\/]", cwd) if p]
    return parts[-1] if parts else ""


def looks_like_project_folder(cwd: str) -> bool:
    return bool(PROJECT_FOLDER_PATTERN.match(project_folder_name(cwd)))


def keyword_matches(
    keywords: frozenset[str], session_label: str | None, config: DispatchConfig
) -> bool:
    """Keyword filter against the session title, else the configured queue id.

    No keywords configured, or nothing to match against, passes.
    """
    name_to_check = session_label or config.target_queue_id or ""
    if not keywords or not name_to_check:
        return True
    lowered = name_to_check.lower()
    return any(keyword in lowered for keyword in keywords)


def check_relevance(
    kind: ReviewerKind,
    event: DispatchEvent,
    config: DispatchConfig,
    session_label: str | None = None,
) -> Relevance:
    """Decide whether ``kind`` should count this event."""
    if not is_edit_event(event):
        return Relevance(False, "not_edit_tool")
    if kind.project_folders_only and not looks_like_project_folder(event.cwd):
        return Relevance(False, "not_project_folder")
    if not config.enabled:
        return Relevance(False, "disabled")
    if not keyword_matches(config.keyword_filters, session_label, config):
        return Relevance(False, "keyword_mismatch")
    if not event.file_paths:
        return Relevance(False, "no_file_path")
    return RELEVANT
