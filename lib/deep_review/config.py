"""Per-reviewer dispatch configuration.

Each reviewer reads its own key (e.g. ``checkTestsConfig``) from Claude Code
settings documents. Providers are queried in priority order and the first one
holding a usable value for a field wins:

    <cwd>/.claude/settings.json  >  ~/.claude/settings.json  >  DEFAULTS

Example settings.json fragment:

    "checkTestsConfig": {
        "targetQueueId": "myapp-qa",
        "editThreshold": 5,
        "keywordFilters": ["dev", "feature"],
        "enabled": true
    }

``taskListId`` and ``keywords`` are accepted as aliases for
``targetQueueId`` and ``keywordFilters``.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

GLOBAL_SETTINGS_PATH = Path.home() / ".claude" / "settings.json"
PROJECT_SETTINGS_RELPATH = Path(".claude") / "settings.json"

EDIT_TOOLS = ("Edit", "Write", "NotebookEdit")

DEFAULT_THRESHOLD = 3
MIN_THRESHOLD = 3
MAX_THRESHOLD = 7
DEFAULT_KEYWORDS = ("dev",)

DEFAULTS: dict[str, Any] = {
    "editThreshold": DEFAULT_THRESHOLD,
    "keywordFilters": list(DEFAULT_KEYWORDS),
    "enabled": True,
}

# settings key -> DispatchConfig field (first listed key wins inside one document)
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "target_queue_id": ("targetQueueId", "taskListId"),
    "edit_threshold": ("editThreshold",),
    "keyword_filters": ("keywordFilters", "keywords"),
    "enabled": ("enabled",),
    "review_prompt": ("reviewPrompt",),
    "log_output": ("logOutput",),
}


@dataclass(frozen=True)
class DispatchConfig:
    """Resolved configuration for one reviewer, immutable for one invocation."""

    target_queue_id: str | None = None
    edit_threshold: int | None = None  # raw; evaluator clamps to [3, 7]
    keyword_filters: frozenset[str] = frozenset(DEFAULT_KEYWORDS)
    enabled: bool = True
    review_prompt: str | None = None
    log_output: bool = False


# =============================================================================
# FIELD COERCION (None means "absent, ask the next provider")
# =============================================================================


def _coerce_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _coerce_threshold(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def _coerce_keywords(value: Any) -> frozenset[str] | None:
    if not isinstance(value, (list, tuple)):
        return None
    return frozenset(
        k.strip().lower() for k in value if isinstance(k, str) and k.strip()
    )


def _coerce_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


_COERCERS = {
    "target_queue_id": _coerce_str,
    "edit_threshold": _coerce_threshold,
    "keyword_filters": _coerce_keywords,
    "enabled": _coerce_bool,
    "review_prompt": _coerce_str,
    "log_output": _coerce_bool,
}


# =============================================================================
# PROVIDERS
# =============================================================================


class SettingsProvider:
    """One JSON settings document. Missing or corrupt documents read as empty."""

    def __init__(self, path: Path, label: str):
        self.path = Path(path)
        self.label = label
        self._data: dict[str, Any] | None = None  # read once per invocation

    def _read(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data
        self._data = {}
        try:
            data = json.loads(self.path.read_text())
        except FileNotFoundError:
            return self._data
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.debug("%s settings unreadable (%s): %s", self.label, self.path, e)
            return self._data
        if isinstance(data, dict):
            self._data = data
        return self._data

    def section(self, config_key: str) -> dict[str, Any]:
        section = self._read().get(config_key)
        return section if isinstance(section, dict) else {}

    def __repr__(self) -> str:
        return f"SettingsProvider({self.label!r}, {str(self.path)!r})"


class DefaultsProvider:
    """Hardcoded defaults, identical for every reviewer."""

    label = "defaults"

    def section(self, config_key: str) -> dict[str, Any]:
        return dict(DEFAULTS)

    def __repr__(self) -> str:
        return "DefaultsProvider()"


def settings_providers(
    cwd: str | Path, global_path: Path | None = None
) -> list[SettingsProvider | DefaultsProvider]:
    """Providers in priority order: project, global, defaults."""
    return [
        SettingsProvider(Path(cwd) / PROJECT_SETTINGS_RELPATH, "project"),
        SettingsProvider(global_path or GLOBAL_SETTINGS_PATH, "global"),
        DefaultsProvider(),
    ]


def _field_value(section: dict[str, Any], field_name: str) -> Any:
    coerce = _COERCERS[field_name]
    for key in FIELD_ALIASES[field_name]:
        if key in section:
            value = coerce(section[key])
            if value is not None:
                return value
    return None


def load_dispatch_config(
    config_key: str,
    cwd: str | Path,
    providers: list | None = None,
) -> DispatchConfig:
    """Resolve a reviewer's DispatchConfig from the provider chain.

    Args:
        config_key: Settings key of the reviewer (e.g. "checkTestsConfig")
        cwd: Session working directory (locates project settings)
        providers: Override provider chain (default: settings_providers(cwd))

    Returns:
        DispatchConfig with every field taken from the highest-priority
        provider that has a usable value for it
    """
    chain = providers if providers is not None else settings_providers(cwd)
    sections = [provider.section(config_key) for provider in chain]

    resolved: dict[str, Any] = {}
    for field_name in FIELD_ALIASES:
        for section in sections:
            value = _field_value(section, field_name)
            if value is not None:
                resolved[field_name] = value
                break

    return DispatchConfig(**resolved)
