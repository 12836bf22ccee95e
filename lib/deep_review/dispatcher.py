"""Background dispatcher: build the review prompt and launch the headless agent.

The agent runs in its own session (``start_new_session=True``) with all
standard streams detached, so it outlives the hook process and nothing it
prints reaches the tool call. We never wait on it.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from .kinds import CLAUDE_AGENT, CODEX_AGENT, ReviewerKind
from .sanitize import sanitize_id, sanitize_path

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = Path.home() / ".claude" / "hook-state" / "logs"

MAX_PROMPT_FILES = 50

# {taskListId} is the placeholder name used by older custom reviewPrompts
_PLACEHOLDER = re.compile(r"\{(files|queueId|taskListId)\}")


class DispatchError(Exception):
    """The headless agent could not be launched."""


@dataclass(frozen=True)
class DispatchRequest:
    kind: ReviewerKind
    cwd: str
    session_id: str
    files: tuple[str, ...]
    queue_id: str
    review_prompt: str | None = None
    log_output: bool = False


@dataclass(frozen=True)
class DispatchHandle:
    """What we know about a launched agent. Recorded, never awaited."""

    pid: int
    executable: str
    queue_id: str
    file_count: int
    log_path: Path | None = None


def format_file_list(files: Sequence[str], limit: int = MAX_PROMPT_FILES) -> str:
    lines = [f"- {sanitize_path(f)}" for f in files[:limit]]
    if len(files) > limit:
        lines.append(f"- ... and {len(files) - limit} more")
    return "\n".join(lines)


def build_prompt(template: str, files: Sequence[str], queue_id: str) -> str:
    """Fill ``{files}`` and ``{queueId}`` with sanitized values in one pass.

    Substituted text is never rescanned, so a placeholder inside a file
    name stays literal.
    """
    values = {
        "files": format_file_list(files),
        "queueId": sanitize_id(queue_id),
    }
    values["taskListId"] = values["queueId"]
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)


def build_agent_argv(kind: ReviewerKind, executable: str, prompt: str) -> list[str]:
    """argv for a non-interactive agent run with a bounded tool set."""
    if kind.agent == CODEX_AGENT:
        return [executable, "exec", prompt]
    if kind.agent == CLAUDE_AGENT:
        return [
            executable,
            "-p",
            prompt,
            "--permission-mode",
            "acceptEdits",
            "--allowedTools",
            ",".join(kind.allowed_tools),
            "--no-session-persistence",
        ]
    raise DispatchError(f"unsupported agent {kind.agent!r} for {kind.name}")


class Dispatcher:
    """Interface: launch a review and return immediately."""

    def dispatch(self, request: DispatchRequest) -> DispatchHandle:
        raise NotImplementedError


class SubprocessDispatcher(Dispatcher):
    """Launch the agent CLI as a detached child process."""

    def __init__(
        self,
        log_dir: Path | None = None,
        which: Callable[[str], str | None] = shutil.which,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.log_dir = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
        self._which = which
        self._popen = popen

    def _log_path(self, request: DispatchRequest) -> Path:
        stamp = time.strftime("%Y%m%d-%H%M%S")
        name = f"{request.kind.name}-{sanitize_id(request.session_id)}-{stamp}.log"
        return self.log_dir / name

    def dispatch(self, request: DispatchRequest) -> DispatchHandle:
        kind = request.kind
        executable = self._which(kind.agent)
        if not executable:
            raise DispatchError(f"{kind.agent} CLI not found on PATH")

        prompt = build_prompt(
            request.review_prompt or kind.prompt, request.files, request.queue_id
        )
        argv = build_agent_argv(kind, executable, prompt)

        log_path = None
        log_file = None
        try:
            if request.log_output:
                log_path = self._log_path(request)
                log_path.parent.mkdir(parents=True, exist_ok=True)
                log_file = open(log_path, "ab")
            output = log_file if log_file is not None else subprocess.DEVNULL
            proc = self._popen(
                argv,
                cwd=request.cwd,
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=subprocess.STDOUT if log_file is not None else subprocess.DEVNULL,
                start_new_session=True,
                close_fds=True,
            )
        except (OSError, ValueError) as e:
            # ValueError: NUL byte in argv or cwd
            raise DispatchError(f"failed to launch {kind.agent}: {e}") from e
        finally:
            # The child holds its own descriptor
            if log_file is not None:
                log_file.close()

        logger.info(
            "[%s] started review of %d files -> %s (pid %s)",
            kind.name,
            len(request.files),
            sanitize_id(request.queue_id),
            proc.pid,
        )
        return DispatchHandle(
            pid=proc.pid,
            executable=executable,
            queue_id=sanitize_id(request.queue_id),
            file_count=len(request.files),
            log_path=log_path,
        )
