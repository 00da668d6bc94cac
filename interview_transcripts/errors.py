"""
Error taxonomy for transcript persistence.

Only ValidationError, Unauthenticated and BackupWriteFailure reach the caller.
The other sink failures are recovered where they happen and only logged.
"""
from __future__ import annotations


class TranscriptError(Exception):
    """Base for all transcript pipeline errors."""


class ValidationError(TranscriptError):
    """Submitted body is not a transcript document. No writes performed."""


class Unauthenticated(TranscriptError):
    """Caller identity missing or rejected by the auth collaborator."""


class SinkWriteFailure(TranscriptError):
    """A write to one persistence sink failed."""

    sink: str = ""


class PrimaryStoreWriteFailure(SinkWriteFailure):
    sink = "primary_store"


class BackupWriteFailure(SinkWriteFailure):
    """Fatal: the backup file is the only write guaranteed to happen."""

    sink = "backup_file"


class ObjectStorageWriteFailure(SinkWriteFailure):
    sink = "object_storage"


class ReconciliationFileFailure(TranscriptError):
    """One backup file could not be replayed. The batch continues."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"{file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


class ReconciliationOwnerNotFound(TranscriptError):
    """Owner id does not resolve to a known account; batch aborts before any file."""

    def __init__(self, owner_id: str) -> None:
        super().__init__(f"User with id {owner_id} not found")
        self.owner_id = owner_id
