"""Transcript normalization: raw stream events -> turns -> canonical document."""
from .builder import build_transcript_document
from .derivation import build_transcript_text, calculate_duration_seconds, sanitize_filename
from .models import Participant, Sender, StreamEvent, TranscriptDocument, Turn
from .normalizer import classify_role, normalize_event, to_iso_timestamp

__all__ = [
    "build_transcript_document",
    "build_transcript_text",
    "calculate_duration_seconds",
    "sanitize_filename",
    "Participant",
    "Sender",
    "StreamEvent",
    "TranscriptDocument",
    "Turn",
    "classify_role",
    "normalize_event",
    "to_iso_timestamp",
]
