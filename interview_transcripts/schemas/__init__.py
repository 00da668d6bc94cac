"""Pydantic schemas for API request/response."""
from interview_transcripts.schemas.transcript import (
    StreamEventIn,
    SubmissionResponse,
    SubmittedDocument,
    SubmittedTurn,
)

__all__ = [
    "StreamEventIn",
    "SubmissionResponse",
    "SubmittedDocument",
    "SubmittedTurn",
]
