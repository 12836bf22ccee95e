"""Reviewer kinds: the six parameterizations of the deep review hook.

Each kind owns its settings key, its state files, its queue suffix and the
prompt handed to the headless agent. Kinds can be switched off for a shell
with ``CLAUDE_HOOK_DISABLE_<NAME>=1`` (e.g. ``CLAUDE_HOOK_DISABLE_CHECKBUGS=1``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .prompts import (
    BUGS_PROMPT,
    DOCS_PROMPT,
    FILES_PROMPT,
    LINT_PROMPT,
    SECURITY_PROMPT,
    TESTS_PROMPT,
)

CLAUDE_AGENT = "claude"
CODEX_AGENT = "codex"


@dataclass(frozen=True)
class ReviewerKind:
    """Static description of one reviewer hook."""

    name: str  # state file prefix and CLI name, e.g. "checktests"
    config_key: str  # settings.json key, e.g. "checkTestsConfig"
    queue_suffix: str  # appended to derived queue ids, e.g. "-qa"
    prompt: str
    description: str = ""
    agent: str = CLAUDE_AGENT
    allowed_tools: tuple[str, ...] = ("Bash", "Read")
    project_folders_only: bool = True

    @property
    def default_queue_id(self) -> str:
        return f"default{self.queue_suffix}"

    @property
    def disable_env_var(self) -> str:
        return f"CLAUDE_HOOK_DISABLE_{self.name.upper()}"

    def is_disabled_by_env(self) -> bool:
        return os.environ.get(self.disable_env_var, "0") == "1"


REVIEWERS: dict[str, ReviewerKind] = {}


def register_reviewer(kind: ReviewerKind) -> ReviewerKind:
    """Add a kind to the registry. Re-registering a name replaces it."""
    REVIEWERS[kind.name] = kind
    return kind


def get_reviewer(name: str) -> ReviewerKind:
    """Look up a kind by name; raises KeyError for unknown names."""
    try:
        return REVIEWERS[name]
    except KeyError:
        raise KeyError(
            f"unknown reviewer {name!r} (known: {', '.join(sorted(REVIEWERS))})"
        ) from None


def enabled_reviewers() -> list[ReviewerKind]:
    """Registered kinds not switched off via environment, in registration order."""
    return [kind for kind in REVIEWERS.values() if not kind.is_disabled_by_env()]


# =============================================================================
# BUILT-IN REVIEWERS
# =============================================================================

CHECK_TESTS = register_reviewer(
    ReviewerKind(
        name="checktests",
        config_key="checkTestsConfig",
        queue_suffix="-qa",
        prompt=TESTS_PROMPT,
        description="Checks for missing tests after file edits",
    )
)

CHECK_LINT = register_reviewer(
    ReviewerKind(
        name="checklint",
        config_key="checkLintConfig",
        queue_suffix="-qa",
        prompt=LINT_PROMPT,
        description="Runs linting after file edits and creates tasks for errors",
    )
)

CHECK_FILES = register_reviewer(
    ReviewerKind(
        name="checkfiles",
        config_key="checkFilesConfig",
        queue_suffix="-bugfixes",
        prompt=FILES_PROMPT,
        description="Runs headless agent to review files and create tasks",
        project_folders_only=False,
    )
)

CHECK_BUGS = register_reviewer(
    ReviewerKind(
        name="checkbugs",
        config_key="checkBugsConfig",
        queue_suffix="-bugfixes",
        prompt=BUGS_PROMPT,
        description="Checks for bugs via Codex headless agent",
        agent=CODEX_AGENT,
        allowed_tools=(),
    )
)

CHECK_DOCS = register_reviewer(
    ReviewerKind(
        name="checkdocs",
        config_key="checkDocsConfig",
        queue_suffix="-dev",
        prompt=DOCS_PROMPT,
        description="Checks for missing documentation and creates tasks",
    )
)

CHECK_SECURITY = register_reviewer(
    ReviewerKind(
        name="checksecurity",
        config_key="checkSecurityConfig",
        queue_suffix="-dev",
        prompt=SECURITY_PROMPT,
        description="Runs security review via headless agent after file edits",
        allowed_tools=("Bash", "Read", "Glob", "Grep"),
    )
)
