"""
Schemas for the transcript submission API and the session relay.

Submitted documents are only validated here; the raw dict is what gets stored,
so unknown fields pass through untouched (extra="allow").
"""
from __future__ import annotations

from pydantic import BaseModel, Field

from interview_transcripts.transcript.models import Sender, StreamEvent


class SubmittedTurn(BaseModel):
    """One turn of a submitted document. role/text are required for derivation."""

    class Config:
        extra = "allow"

    role: str
    text: str


class SubmittedMetadata(BaseModel):
    """Any object; generatedAt/startedAt/endedAt are read leniently downstream."""

    class Config:
        extra = "allow"


class SubmittedDocument(BaseModel):
    """Minimum shape of a transcript document accepted by the coordinator and reconciler."""

    class Config:
        extra = "allow"

    metadata: SubmittedMetadata
    turns: list[SubmittedTurn]


class SubmissionResponse(BaseModel):
    """Response body for POST /api/interview-transcripts. interviewId absent when the primary store failed."""

    class Config:
        populate_by_name = True

    ok: bool = True
    interview_id: int | str | None = Field(None, alias="interviewId")
    file_name: str = Field(..., alias="fileName")


class SenderIn(BaseModel):
    class Config:
        populate_by_name = True
        extra = "ignore"

    name: str | None = None
    identity: str | None = None
    is_agent: bool = Field(False, alias="isAgent")
    is_local: bool = Field(False, alias="isLocal")


class StreamEventIn(BaseModel):
    """One JSON frame on /ws/session."""

    class Config:
        populate_by_name = True
        extra = "ignore"

    type: str
    message: str | None = None
    timestamp: float | None = None
    sender: SenderIn | None = Field(None, alias="from")

    def to_event(self) -> StreamEvent:
        sender = None
        if self.sender is not None:
            sender = Sender(
                name=self.sender.name,
                identity=self.sender.identity,
                is_agent=self.sender.is_agent,
                is_local=self.sender.is_local,
            )
        return StreamEvent(type=self.type, message=self.message, timestamp=self.timestamp, sender=sender)
