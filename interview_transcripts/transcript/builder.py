"""Transcript builder: ordered turns + participants -> canonical TranscriptDocument."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Sequence

from interview_transcripts.transcript.models import (
    Participant,
    TranscriptDocument,
    TranscriptMetadata,
    Turn,
)
from interview_transcripts.transcript.normalizer import format_iso

DEFAULT_SOURCE = "livekit-session"


def build_transcript_document(
    turns: Sequence[Turn],
    participants: Mapping[str, Participant],
    generated_at: datetime | None = None,
    source: str = DEFAULT_SOURCE,
) -> TranscriptDocument:
    """
    Assemble the document. startedAt/endedAt come from the first/last turn in
    arrival order, not from the earliest/latest timestamp.
    Deterministic when generated_at is given.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    started_at = turns[0].timestamp if turns else None
    ended_at = turns[-1].timestamp if turns else None
    return TranscriptDocument(
        metadata=TranscriptMetadata(
            generated_at=format_iso(generated_at),
            started_at=started_at,
            ended_at=ended_at,
            message_count=len(turns),
            source=source,
        ),
        participants={
            role: Participant(name=p.name, identity=p.identity) for role, p in participants.items()
        },
        turns=list(turns),
    )
