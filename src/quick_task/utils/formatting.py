"""
Shared task-block vocabulary.

This module is the single source of truth for the glyphs, canonical metadata
keys, line patterns and serialization dialects used on both sides of the
round trip. The parser and serializer never call each other; they agree by
importing the tables defined here. The serializer uses the same patterns to
refuse payloads whose text the parser would read back as something else.

Dialects:
- inline: ``  key:: value`` (Dataview-style inline fields)
- bullet: ``  - Key: value``
"""

import re
from typing import Dict, Optional, Tuple

INLINE_DIALECT = "inline"
BULLET_DIALECT = "bullet"
DIALECTS: Tuple[str, ...] = (INLINE_DIALECT, BULLET_DIALECT)

# Reserved priority glyphs (Obsidian Tasks plugin compatible).
PRIORITY_TO_EMOJI: Dict[str, str] = {
    "High": "🔺",
    "Medium": "⏫",
    "Low": "⏬",
}

EMOJI_TO_PRIORITY: Dict[str, str] = {v: k for k, v in PRIORITY_TO_EMOJI.items()}

# Metadata keys in the order they are rendered.
METADATA_KEYS: Tuple[str, ...] = (
    "description",
    "created",
    "due",
    "completed",
    "priority",
    "status",
)

# ---------------------------------------------------------------------------
# Line patterns
# ---------------------------------------------------------------------------

TASK_LINE = re.compile(r"^\s*-\s*\[([ xX-])\]\s*(.*)$")
TAG = re.compile(r"#[A-Za-z0-9/_-]+")

# Glyphs may carry a trailing emoji variation selector.
PRIORITY_GLYPH = re.compile(
    "(?:" + "|".join(re.escape(e) for e in EMOJI_TO_PRIORITY) + ")\ufe0f?"
)
PRIORITY_MARKER = re.compile(
    r"\b(?:priority|p)\s*::?\s*(?:high|medium|low)\b", re.IGNORECASE
)

# Status words the parser strips from the end of a title.
TRAILING_STATUS = re.compile(
    r"(?:^|\s+)(?:in[-\s]*progress|cancell?ed)\s*$", re.IGNORECASE
)

# ``key:: value`` or ``key: value`` at the start of a metadata body.
KEY_PREFIX = re.compile(r"^([A-Za-z][A-Za-z0-9_-]*)(?:::\s*|:(?:\s+|$))(.*)$")

# Accepted spellings → canonical status.
_STATUS_ALIASES: Dict[str, str] = {
    "todo": "todo",
    "to-do": "todo",
    "open": "todo",
    "in-progress": "in-progress",
    "in progress": "in-progress",
    "inprogress": "in-progress",
    "done": "done",
    "cancelled": "cancelled",
    "canceled": "cancelled",
}


def normalize_priority(value: Optional[str]) -> Optional[str]:
    """Return the canonical priority for ``value`` (any case), or None if unknown."""
    if not value:
        return None
    wanted = value.strip().lower()
    for name in PRIORITY_TO_EMOJI:
        if name.lower() == wanted:
            return name
    return None


def normalize_status(value: Optional[str]) -> Optional[str]:
    """Return the canonical status for ``value`` (any case), or None if unknown."""
    if not value:
        return None
    return _STATUS_ALIASES.get(" ".join(value.strip().lower().split()))


def render_field(key: str, value: str, dialect: str = INLINE_DIALECT) -> str:
    """
    Render a single metadata line.

    Args:
        key: Canonical lower-case key (e.g. "due")
        value: Field value, rendered verbatim
        dialect: INLINE_DIALECT or BULLET_DIALECT

    Returns:
        ``  due:: 2026-01-10`` or ``  - Due: 2026-01-10``
    """
    if dialect == BULLET_DIALECT:
        return f"  - {key.capitalize()}: {value}"
    return f"  {key}:: {value}"


def render_continuation(text: str) -> str:
    """Render an extra description line; both dialects read it back the same way."""
    return f"  - {text}"
