"""
Persistence coordinator: one transcript document -> primary store, backup file, object storage.

Sinks are written one after another. Each step is wrapped by _attempt, which
turns any exception into a SinkOutcome instead of letting it escape. This means
a failed step never stops the later ones. resolve_submission then applies the
policy (FATAL_SINKS) to the collected outcomes. Only a backup-file failure is
fatal, since the backup file is the one write guaranteed to happen.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence

from pydantic import ValidationError as SchemaValidationError

from interview_transcripts.errors import (
    BackupWriteFailure,
    ObjectStorageWriteFailure,
    PrimaryStoreWriteFailure,
    SinkWriteFailure,
    Unauthenticated,
    ValidationError,
)
from interview_transcripts.schemas.transcript import SubmittedDocument
from interview_transcripts.storage.backup import backup_file_name, serialize_document, write_backup_file
from interview_transcripts.storage.records import derive_record
from interview_transcripts.storage.supabase import ObjectStorage, PrimaryStore

logger = logging.getLogger(__name__)


class Sink(str, Enum):
    PRIMARY_STORE = "primary_store"
    BACKUP_FILE = "backup_file"
    OBJECT_STORAGE = "object_storage"


SINK_FAILURES: dict[Sink, type[SinkWriteFailure]] = {
    Sink.PRIMARY_STORE: PrimaryStoreWriteFailure,
    Sink.BACKUP_FILE: BackupWriteFailure,
    Sink.OBJECT_STORAGE: ObjectStorageWriteFailure,
}

# Sinks whose failure fails the whole submission
FATAL_SINKS: frozenset[Sink] = frozenset({Sink.BACKUP_FILE})


@dataclass
class SinkOutcome:
    sink: Sink
    ok: bool
    value: Any = None
    error: SinkWriteFailure | None = None


@dataclass
class SubmissionResult:
    file_name: str
    interview_id: Any = None
    ok: bool = True


def validate_document(body: Any) -> dict[str, Any]:
    """Check the minimum document shape; return the body unchanged. Raises ValidationError."""
    if not isinstance(body, dict):
        raise ValidationError("Invalid transcript payload: expected a JSON object")
    try:
        SubmittedDocument.model_validate(body)
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid transcript payload: {e.error_count()} field error(s)") from e
    return body


def resolve_submission(outcomes: Sequence[SinkOutcome], file_name: str) -> SubmissionResult:
    """Apply the sink policy: raise the first fatal failure, otherwise report success."""
    interview_id = None
    for outcome in outcomes:
        if outcome.ok:
            if outcome.sink is Sink.PRIMARY_STORE:
                interview_id = outcome.value
            continue
        if outcome.sink in FATAL_SINKS and outcome.error is not None:
            raise outcome.error
    return SubmissionResult(file_name=file_name, interview_id=interview_id)


class PersistenceCoordinator:
    """Writes one submission to every sink. Holds no per-submission state; safe to share."""

    def __init__(
        self,
        store: PrimaryStore,
        storage: ObjectStorage,
        backup_dir: str,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._storage = storage
        self._backup_dir = backup_dir
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def _attempt(self, sink: Sink, action: Callable[[], Awaitable[Any]]) -> SinkOutcome:
        try:
            value = await action()
        except Exception as e:
            failure = SINK_FAILURES[sink](str(e) or type(e).__name__)
            failure.__cause__ = e
            if sink in FATAL_SINKS:
                logger.error("Write to %s failed: %s", sink.value, e)
            else:
                logger.warning("Write to %s failed (continuing): %s", sink.value, e)
            return SinkOutcome(sink=sink, ok=False, error=failure)
        return SinkOutcome(sink=sink, ok=True, value=value)

    async def _write_backup(self, file_name: str, content: bytes) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, write_backup_file, self._backup_dir, file_name, content)

    async def submit(self, identity: Any, body: Any) -> SubmissionResult:
        """
        Persist body for identity (an object with .id, or None when unauthenticated).
        Raises Unauthenticated, ValidationError or BackupWriteFailure; nothing else escapes.
        """
        if identity is None:
            raise Unauthenticated("Not authenticated")
        document = validate_document(body)
        owner_id = str(identity.id)

        record = derive_record(owner_id, document)
        file_name = backup_file_name(document["metadata"].get("generatedAt"), now=self._now)
        try:
            content = serialize_document(document)
        except ValueError as e:
            raise ValidationError(f"Invalid transcript payload: {e}") from e

        outcomes = [
            await self._attempt(Sink.PRIMARY_STORE, lambda: self._store.insert_interview(record)),
            await self._attempt(Sink.BACKUP_FILE, lambda: self._write_backup(file_name, content)),
            await self._attempt(
                Sink.OBJECT_STORAGE,
                lambda: self._storage.upload(f"{owner_id}/{file_name}", content, "application/json"),
            ),
        ]
        result = resolve_submission(outcomes, file_name)
        logger.info(
            "Transcript saved: file=%s interview_id=%s sinks=%s",
            file_name,
            result.interview_id,
            {o.sink.value: o.ok for o in outcomes},
        )
        return result
