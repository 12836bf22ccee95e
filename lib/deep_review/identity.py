"""Task identity: which queue the headless agent files its findings into.

Precedence:
    1. targetQueueId from config
    2. session title (last "custom-title" entry in the transcript) + suffix
    3. working directory name + suffix
    4. default + suffix
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .config import DispatchConfig
from .gateway import project_folder_name
from .kinds import ReviewerKind
from .sanitize import slugify

logger = logging.getLogger(__name__)

TITLE_ENTRY_TYPE = "custom-title"
TITLE_MARKER = f'"{TITLE_ENTRY_TYPE}"'


@dataclass(frozen=True)
class ResolvedQueue:
    queue_id: str
    source: str  # "config" | "session_title" | "cwd" | "default"


def read_session_label(transcript_path: str | None) -> str | None:
    """Return the most recent session title recorded in a JSONL transcript.

    Only lines containing the title marker are parsed; malformed lines are
    skipped. Unreadable or missing transcripts yield None.
    """
    if not transcript_path:
        return None
    path = Path(transcript_path)
    last_title = None
    try:
        if not path.is_file():
            return None
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if TITLE_MARKER not in line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not isinstance(entry, dict) or entry.get("type") != TITLE_ENTRY_TYPE:
                    continue
                title = entry.get("customTitle")
                if isinstance(title, str) and title.strip():
                    last_title = title.strip()
    except OSError as e:
        logger.debug("transcript unreadable: %s: %s", path, e)
        return None

    return last_title


def queue_id_from_label(label: str | None, suffix: str) -> str | None:
    slug = slugify(label)
    return f"{slug}{suffix}" if slug else None


def queue_id_from_cwd(cwd: str, suffix: str) -> str | None:
    name = project_folder_name(cwd)
    return f"{name}{suffix}" if name else None


def resolve_queue_id(
    kind: ReviewerKind,
    config: DispatchConfig,
    cwd: str,
    session_label: str | None = None,
) -> ResolvedQueue:
    """Resolve the raw queue id. The dispatcher sanitizes it before use."""
    if config.target_queue_id:
        return ResolvedQueue(config.target_queue_id, "config")

    from_label = queue_id_from_label(session_label, kind.queue_suffix)
    if from_label:
        return ResolvedQueue(from_label, "session_title")

    from_cwd = queue_id_from_cwd(cwd, kind.queue_suffix)
    if from_cwd:
        return ResolvedQueue(from_cwd, "cwd")

    return ResolvedQueue(kind.default_queue_id, "default")
