"""Sanitizers for values interpolated into agent prompts and file names.

The prompt built for the headless agent is passed as a single argv element,
but the agent itself may echo parts of it into shell commands it runs
(`service-implementation task dispatch "{queueId}" ...`). Anything we
interpolate must therefore be inert in both a shell and a prompt context.
"""

from __future__ import annotations

import re

MAX_ID_LENGTH = 100
MAX_PATH_LENGTH = 512
MAX_SLUG_LENGTH = 80

# Shell metacharacters, quoting characters and globbing characters
_PATH_UNSAFE = re.compile(r"[`$\"'\\;&|<>(){}\[\]!#*?~]")
# Newlines and other control characters would let a path inject new
# prompt lines
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")
_SLUG_UNSAFE = re.compile(r"[^a-z0-9_-]+")


def sanitize_id(value: object, fallback: str = "default") -> str:
    """Restrict an identifier to ``[A-Za-z0-9_-]``.

    Every other character becomes ``-`` so ``../etc`` cannot escape a
    directory and ``a;rm -rf`` cannot break out of a quoted argument.
    Empty or non-string input yields ``fallback``.
    """
    if not value or not isinstance(value, str):
        return fallback
    cleaned = _ID_UNSAFE.sub("-", value)[:MAX_ID_LENGTH]
    return cleaned or fallback


def sanitize_path(value: object) -> str:
    """Make a file path safe for display inside a prompt."""
    if not value or not isinstance(value, str):
        return ""
    cleaned = _CONTROL_CHARS.sub("_", value)
    cleaned = _PATH_UNSAFE.sub("_", cleaned)
    return cleaned[:MAX_PATH_LENGTH]


def slugify(value: object) -> str:
    """Lowercase slug for free-form labels (session titles).

    ``"Dev: Auth Refactor!"`` -> ``"dev-auth-refactor"``
    """
    if not value or not isinstance(value, str):
        return ""
    slug = _SLUG_UNSAFE.sub("-", value.strip().lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")
