"""Canonical JSON rendering and line diffs for configuration snapshots.

The output is meant for people reading history, not for replaying patches.
"""
import difflib
import json
from typing import Any

from agent_directory.core.exceptions import SerializationError

DIFF_LABEL = "config"


def canonicalize(content: Any) -> str:
    """Render content as stable JSON text: sorted keys, two-space indent."""
    try:
        return json.dumps(content, sort_keys=True, indent=2, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Content is not JSON-serializable: {exc}") from exc


def unified_diff(before: Any, after: Any) -> str:
    """Unified diff from `before` to `after`. Empty string when they render identically."""
    old_lines = canonicalize(before).splitlines(keepends=True)
    new_lines = canonicalize(after).splitlines(keepends=True)
    # splitlines drops the trailing newline on the last line; keep hunks well-formed
    if old_lines and not old_lines[-1].endswith("\n"):
        old_lines[-1] += "\n"
    if new_lines and not new_lines[-1].endswith("\n"):
        new_lines[-1] += "\n"
    return "".join(
        difflib.unified_diff(old_lines, new_lines, fromfile=DIFF_LABEL, tofile=DIFF_LABEL)
    )
