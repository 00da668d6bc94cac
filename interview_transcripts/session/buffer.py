"""Turn buffer for one connection lifecycle: cleaned turns plus participants, in arrival order."""
from __future__ import annotations

from interview_transcripts.transcript.models import Participant, StreamEvent, Turn
from interview_transcripts.transcript.normalizer import normalize_event, record_participant


class TurnBuffer:
    """Owned by ExportTrigger. reset() on connect, append() per event, drain() on disconnect."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._participants: dict[str, Participant] = {}

    def reset(self) -> None:
        self._turns = []
        self._participants = {}

    def append(self, event: StreamEvent) -> Turn | None:
        """Normalize event; blank events are dropped and leave the buffer untouched."""
        turn = normalize_event(event)
        if turn is None:
            return None
        self._turns.append(turn)
        record_participant(self._participants, turn, event)
        return turn

    def drain(self) -> tuple[list[Turn], dict[str, Participant]]:
        """Return buffered turns and participants and leave the buffer empty."""
        turns, participants = self._turns, self._participants
        self.reset()
        return turns, participants

    def __len__(self) -> int:
        return len(self._turns)
