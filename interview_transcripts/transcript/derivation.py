"""
Derivations shared by the persistence coordinator and the batch reconciler.

Both read the document as submitted (turn text is already cleaned), so nothing
here re-cleans or re-orders turns.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

_INVALID_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_DASH_RUNS = re.compile(r"-+")


def build_transcript_text(turns: Iterable[Mapping[str, Any]]) -> str:
    """One "<role>: <text>" line per turn, in turn order."""
    return "\n".join(f"{turn['role']}: {turn['text']}" for turn in turns)


def parse_timestamp_ms(value: Any) -> int | None:
    """ISO-8601 string -> epoch ms (floored); None when missing or unparseable. Naive = UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // _ONE_MS


def calculate_duration_seconds(started_at: Any, ended_at: Any) -> int:
    """
    floor((end - start) / 1000) in whole seconds; 0 if either bound is missing
    or unparseable. Negative results (end before start) are returned as-is.
    """
    start = parse_timestamp_ms(started_at)
    end = parse_timestamp_ms(ended_at)
    if start is None or end is None:
        return 0
    return (end - start) // 1000


def sanitize_filename(value: str) -> str:
    """Map chars outside [A-Za-z0-9._-] to '-', collapse dash runs, trim dashes. Idempotent."""
    value = _INVALID_FILENAME_CHARS.sub("-", value)
    value = _DASH_RUNS.sub("-", value)
    return value.strip("-")
