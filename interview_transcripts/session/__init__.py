"""Session lifecycle: turn buffer, export trigger, exporters, WebSocket relay."""
from .buffer import TurnBuffer
from .exporter import CoordinatorExporter, HttpTranscriptExporter, build_exporter
from .manager import SessionRelay
from .trigger import ExportState, ExportTrigger

__all__ = [
    "TurnBuffer",
    "CoordinatorExporter",
    "HttpTranscriptExporter",
    "build_exporter",
    "SessionRelay",
    "ExportState",
    "ExportTrigger",
]
