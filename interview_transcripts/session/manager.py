"""
SessionRelay: one WebSocket = one connection lifecycle of the realtime session.

The client relays session messages as JSON text frames, e.g.
{ "type": "agentTranscript", "message": "...", "timestamp": 1704067200000,
  "from": { "name": "...", "identity": "...", "isAgent": true, "isLocal": false } }

accept -> trigger.on_connected; each valid frame -> trigger.on_event;
socket closed (normally or not) -> trigger.on_disconnected. Frames that are
not valid events are logged and skipped.
"""
from __future__ import annotations

import json
import logging

from fastapi import WebSocket
from pydantic import ValidationError as SchemaValidationError

from interview_transcripts.schemas.transcript import StreamEventIn
from interview_transcripts.session.trigger import ExportTrigger

logger = logging.getLogger(__name__)


class SessionRelay:
    def __init__(self, websocket: WebSocket, trigger: ExportTrigger) -> None:
        self._ws = websocket
        self._trigger = trigger

    def _handle_frame(self, text: str) -> None:
        try:
            event = StreamEventIn.model_validate(json.loads(text)).to_event()
        except (ValueError, SchemaValidationError) as e:
            logger.warning("Dropping malformed session frame: %s", e)
            return
        self._trigger.on_event(event)

    async def run(self) -> None:
        """Receive until the socket disconnects. Export is dispatched on the way out."""
        self._trigger.on_connected()
        try:
            await self._ws.send_text(json.dumps({"type": "session", "state": self._trigger.state.value}))
            while True:
                msg = await self._ws.receive()
                if msg.get("type") == "websocket.disconnect":
                    break
                text = msg.get("text")
                if text is None:
                    continue
                self._handle_frame(text)
        finally:
            self._trigger.on_disconnected()
