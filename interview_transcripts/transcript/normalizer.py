"""
Message normalizer: raw stream event -> zero or one Turn, plus participant info.

Pure; no I/O. Events whose text is blank after stripping produce nothing at all:
no turn, no participant contribution.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from interview_transcripts.transcript.models import (
    AGENT_TRANSCRIPT,
    USER_TRANSCRIPT,
    Participant,
    Role,
    StreamEvent,
    Turn,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def classify_role(event: StreamEvent) -> Role:
    """Origin tag first, then sender flags. Tag always wins over flags."""
    if event.type == AGENT_TRANSCRIPT:
        return "agent"
    if event.type == USER_TRANSCRIPT:
        return "user"
    if event.sender is not None and event.sender.is_agent:
        return "agent"
    if event.sender is not None and event.sender.is_local:
        return "user"
    return "unknown"


def clean_value(value: str | None) -> str | None:
    """Strip; empty or missing -> None."""
    if not value:
        return None
    trimmed = value.strip()
    return trimmed or None


def format_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and Z suffix, e.g. 2024-01-01T00:00:00.000Z."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def to_iso_timestamp(timestamp_ms: float | None) -> str | None:
    """Epoch milliseconds -> ISO string; None for missing or unrepresentable values."""
    if timestamp_ms is None or isinstance(timestamp_ms, bool):
        return None
    try:
        value = float(timestamp_ms)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    try:
        return format_iso(_EPOCH + timedelta(milliseconds=math.trunc(value)))
    except (OverflowError, ValueError):
        return None


def normalize_event(event: StreamEvent) -> Turn | None:
    """Return the cleaned Turn for one event, or None when the event has no text."""
    text = clean_value(event.message)
    if text is None:
        return None
    return Turn(
        role=classify_role(event),
        text=text,
        timestamp=to_iso_timestamp(event.timestamp),
        kind=event.type,
    )


def record_participant(participants: dict[str, Participant], turn: Turn, event: StreamEvent) -> None:
    """Add the event sender's name/identity under the turn's role (first non-empty wins)."""
    if event.sender is None:
        return
    name = clean_value(event.sender.name)
    identity = clean_value(event.sender.identity)
    if name is None and identity is None:
        return
    participants.setdefault(turn.role, Participant()).merge(name, identity)
