# team_extractor/utils.py
"""
Shared utility functions used across the codebase.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

_WS_RE = re.compile(r"\s+")


def utc_now_iso() -> str:
    """
    Return the current UTC time as an ISO 8601 string with milliseconds and 'Z'.

    Example: "2025-01-15T14:30:00.123Z"
    """
    now = datetime.now(UTC)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def clean_text(value: object) -> str:
    """Collapse all whitespace runs to single spaces and trim."""
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value)).strip()


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


__all__ = [
    "utc_now_iso",
    "clean_text",
    "clamp",
]
