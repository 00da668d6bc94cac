"""Persisted interview record: the primary-store projection of a transcript document."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from interview_transcripts.transcript.derivation import (
    build_transcript_text,
    calculate_duration_seconds,
)


@dataclass
class InterviewRecord:
    owner_id: str
    transcript_text: str
    duration_seconds: int
    raw_document: dict[str, Any]

    def to_row(self) -> dict[str, Any]:
        """Column mapping of the voice_interviews table."""
        return {
            "user_id": self.owner_id,
            "transcript": self.transcript_text,
            "duration_seconds": self.duration_seconds,
            "story_threads": self.raw_document,
        }


def derive_record(owner_id: str, document: dict[str, Any]) -> InterviewRecord:
    """Build the record from an already validated document; the document is kept as-is."""
    metadata = document.get("metadata") or {}
    return InterviewRecord(
        owner_id=owner_id,
        transcript_text=build_transcript_text(document.get("turns") or []),
        duration_seconds=calculate_duration_seconds(metadata.get("startedAt"), metadata.get("endedAt")),
        raw_document=document,
    )
