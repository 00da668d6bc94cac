"""
Transcript data model: raw stream events in, turns and documents out.

- StreamEvent: one event as received from the realtime session (may carry no text).
- Turn: one cleaned, attributed utterance. Immutable.
- Participant: name/identity per role; first non-empty value wins.
- TranscriptDocument: canonical, versioned record of a whole session.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "agent", "unknown"]

TRANSCRIPT_VERSION = 2

# Origin tags of transcript fragments emitted by the realtime session
AGENT_TRANSCRIPT = "agentTranscript"
USER_TRANSCRIPT = "userTranscript"


@dataclass
class Sender:
    """Sender metadata attached to a stream event."""

    name: str | None = None
    identity: str | None = None
    is_agent: bool = False
    is_local: bool = False


@dataclass
class StreamEvent:
    """Raw event: origin tag, optional text, optional epoch-ms timestamp, optional sender."""

    type: str
    message: str | None = None
    timestamp: float | None = None
    sender: Sender | None = None


@dataclass(frozen=True)
class Turn:
    role: Role
    text: str
    timestamp: str | None
    kind: str  # origin tag; serialized as "type"

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "text": self.text,
            "timestamp": self.timestamp,
            "type": self.kind,
        }


@dataclass
class Participant:
    name: str | None = None
    identity: str | None = None

    def merge(self, name: str | None, identity: str | None) -> None:
        """Fill unset fields only; a field once set is never overwritten."""
        if self.name is None:
            self.name = name
        if self.identity is None:
            self.identity = identity

    def to_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.name is not None:
            out["name"] = self.name
        if self.identity is not None:
            out["identity"] = self.identity
        return out


@dataclass
class TranscriptMetadata:
    generated_at: str
    started_at: str | None
    ended_at: str | None
    message_count: int
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "startedAt": self.started_at,
            "endedAt": self.ended_at,
            "messageCount": self.message_count,
            "source": self.source,
        }


@dataclass
class TranscriptDocument:
    metadata: TranscriptMetadata
    participants: dict[str, Participant] = field(default_factory=dict)
    turns: list[Turn] = field(default_factory=list)
    version: int = TRANSCRIPT_VERSION

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; this is the wire and backup-file shape."""
        return {
            "version": self.version,
            "metadata": self.metadata.to_dict(),
            "participants": {role: p.to_dict() for role, p in self.participants.items()},
            "turns": [t.to_dict() for t in self.turns],
        }
