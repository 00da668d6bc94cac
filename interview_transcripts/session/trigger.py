"""
ExportTrigger: decides when a session's turns become a transcript document.

States: idle -> connected -> exported; a reconnect goes back to connected.
- on_connected: resets the buffer (any state).
- on_event: buffers while connected; ignored otherwise.
- on_disconnected: only from connected. Builds and dispatches the document if
  any turns were buffered, then moves to exported. A duplicate disconnect
  finds the trigger in exported and does nothing, so there is at most one
  export per connection lifecycle.

Dispatch is fire-and-forget: the export runs as a task and its outcome is only
logged. It never changes the trigger state.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from interview_transcripts.session.buffer import TurnBuffer
from interview_transcripts.transcript.builder import DEFAULT_SOURCE, build_transcript_document
from interview_transcripts.transcript.models import StreamEvent

logger = logging.getLogger(__name__)

Exporter = Callable[[dict[str, Any]], Awaitable[Any]]


class ExportState(str, Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    EXPORTED = "exported"


class ExportTrigger:
    def __init__(
        self,
        exporter: Exporter,
        source: str = DEFAULT_SOURCE,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._exporter = exporter
        self._source = source
        self._now = now
        self._buffer = TurnBuffer()
        self._state = ExportState.IDLE
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def state(self) -> ExportState:
        return self._state

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def on_connected(self) -> None:
        self._buffer.reset()
        self._state = ExportState.CONNECTED

    def on_event(self, event: StreamEvent) -> None:
        if self._state is not ExportState.CONNECTED:
            logger.debug("Ignoring %s event in state %s", event.type, self._state.value)
            return
        self._buffer.append(event)

    def on_disconnected(self) -> asyncio.Task[Any] | None:
        """Export once per lifecycle. Returns the dispatched task, or None when nothing was sent."""
        if self._state is not ExportState.CONNECTED:
            return None
        self._state = ExportState.EXPORTED
        turns, participants = self._buffer.drain()
        if not turns:
            logger.info("Session ended with no turns; nothing to export")
            return None
        document = build_transcript_document(
            turns,
            participants,
            generated_at=self._now() if self._now else None,
            source=self._source,
        )
        return self._dispatch(document.to_dict())

    def _dispatch(self, payload: dict[str, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(self._exporter(payload))
        self._pending.add(task)
        task.add_done_callback(self._on_export_done)
        return task

    def _on_export_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("Transcript export cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Failed to save transcript: %s", exc)
        else:
            logger.info("Transcript export finished")

    async def join(self) -> None:
        """Wait for dispatched exports to finish (their errors are already logged)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
