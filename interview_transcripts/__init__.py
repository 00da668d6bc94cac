"""Voice-interview transcript capture and multi-sink persistence."""

__version__ = "0.1.0"
