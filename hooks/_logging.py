"""
Logging setup for hook processes.

stdout carries the hook decision JSON, so every diagnostic goes to stderr.
Claude Code only shows hook stderr in verbose mode (ctrl+o).

Environment:
    CLAUDE_HOOK_LOG_LEVEL=INFO   # DEBUG, INFO, WARNING (default), ERROR
    CLAUDE_HOOK_DEBUG=1          # shorthand for DEBUG
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "CLAUDE_HOOK_LOG_LEVEL"
DEBUG_ENV = "CLAUDE_HOOK_DEBUG"
LOG_FORMAT = "[%(name)s] %(levelname)s: %(message)s"

_configured = False


def _level_from_env() -> int:
    if os.environ.get(DEBUG_ENV, "0") == "1":
        return logging.DEBUG
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(stream=None) -> None:
    """Attach one stderr handler to the root logger (idempotent)."""
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(_level_from_env())
    _configured = True


def log_debug(component: str, message: str) -> None:
    """Debug line tagged with the hook component that produced it."""
    logging.getLogger(f"hooks.{component}").debug(message)
