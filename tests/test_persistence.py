import asyncio
import json
import os

import pytest

from interview_transcripts.errors import (
    BackupWriteFailure,
    ObjectStorageWriteFailure,
    PrimaryStoreWriteFailure,
    Unauthenticated,
    ValidationError,
)
from interview_transcripts.services.persistence import (
    PersistenceCoordinator,
    Sink,
    SinkOutcome,
    resolve_submission,
)

from tests.conftest import FIXED_NOW, USER, FakeStorage, FakeStore


def test_end_to_end_submission(coordinator, store, storage, backup_dir, sample_document):
    result = asyncio.run(coordinator.submit(USER, sample_document))

    assert result.ok is True
    assert result.interview_id == 1
    assert result.file_name.startswith("interview-transcript-2024-01-01T00-00-10Z-")
    assert result.file_name.endswith(".json")

    record = store.records[0]
    assert record.owner_id == USER.id
    assert record.transcript_text == "user: hello\nagent: hi there"
    assert record.duration_seconds == 5
    assert record.raw_document is sample_document

    path = os.path.join(backup_dir, result.file_name)
    with open(path, "rb") as f:
        content = f.read()
    assert content == (json.dumps(sample_document, ensure_ascii=False, indent=2) + "\n").encode("utf-8")

    body, content_type = storage.objects[f"{USER.id}/{result.file_name}"]
    assert body == content
    assert content_type == "application/json"


def test_unknown_fields_are_kept_verbatim(coordinator, backup_dir, sample_document):
    sample_document["extra"] = {"nested": ["ü", 1]}
    sample_document["turns"][0]["confidence"] = 0.9
    result = asyncio.run(coordinator.submit(USER, sample_document))
    with open(os.path.join(backup_dir, result.file_name), encoding="utf-8") as f:
        assert json.load(f) == sample_document


def test_unauthenticated_rejected_without_writes(coordinator, store, backup_dir, sample_document):
    with pytest.raises(Unauthenticated):
        asyncio.run(coordinator.submit(None, sample_document))
    assert store.records == []
    assert not os.path.exists(backup_dir)


@pytest.mark.parametrize(
    "body",
    [
        None,
        [],
        "transcript",
        {"turns": []},
        {"metadata": {}},
        {"metadata": [], "turns": []},
        {"metadata": {}, "turns": [{"role": "user"}]},
        {"metadata": {}, "turns": "hello"},
        {"metadata": {"score": float("nan")}, "turns": []},
        {"metadata": {}, "turns": [{"role": "user", "text": "hi", "confidence": float("inf")}]},
    ],
)
def test_malformed_body_rejected_without_writes(coordinator, store, storage, backup_dir, body):
    with pytest.raises(ValidationError):
        asyncio.run(coordinator.submit(USER, body))
    assert store.records == []
    assert storage.objects == {}
    assert not os.path.exists(backup_dir)


def test_primary_store_failure_is_not_fatal(storage, backup_dir, sample_document):
    coordinator = PersistenceCoordinator(FakeStore(fail=True), storage, backup_dir, now=lambda: FIXED_NOW)
    result = asyncio.run(coordinator.submit(USER, sample_document))
    assert result.ok is True
    assert result.interview_id is None
    assert os.path.exists(os.path.join(backup_dir, result.file_name))
    assert f"{USER.id}/{result.file_name}" in storage.objects


def test_object_storage_failure_is_not_fatal(store, backup_dir, sample_document):
    coordinator = PersistenceCoordinator(store, FakeStorage(fail=True), backup_dir, now=lambda: FIXED_NOW)
    result = asyncio.run(coordinator.submit(USER, sample_document))
    assert result.interview_id == 1
    assert os.path.exists(os.path.join(backup_dir, result.file_name))


def test_backup_failure_is_fatal_but_other_sinks_still_run(store, storage, tmp_path, sample_document):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    coordinator = PersistenceCoordinator(store, storage, str(blocker), now=lambda: FIXED_NOW)
    with pytest.raises(BackupWriteFailure):
        asyncio.run(coordinator.submit(USER, sample_document))
    assert len(store.records) == 1
    assert len(storage.objects) == 1


def test_resubmission_creates_new_files(coordinator, store, backup_dir, sample_document):
    first = asyncio.run(coordinator.submit(USER, sample_document))
    second = asyncio.run(coordinator.submit(USER, sample_document))
    assert first.file_name != second.file_name
    assert len(os.listdir(backup_dir)) == 2
    assert len(store.records) == 2


def test_missing_generated_at_uses_clock(coordinator, sample_document):
    del sample_document["metadata"]["generatedAt"]
    result = asyncio.run(coordinator.submit(USER, sample_document))
    assert result.file_name.startswith("interview-transcript-2024-01-01T00-00-10.000Z-")


def test_resolve_submission_policy():
    ok_store = SinkOutcome(Sink.PRIMARY_STORE, ok=True, value=42)
    ok_backup = SinkOutcome(Sink.BACKUP_FILE, ok=True, value="/data/f.json")
    bad_storage = SinkOutcome(Sink.OBJECT_STORAGE, ok=False, error=ObjectStorageWriteFailure("exists"))
    result = resolve_submission([ok_store, ok_backup, bad_storage], "f.json")
    assert (result.ok, result.interview_id, result.file_name) == (True, 42, "f.json")

    bad_store = SinkOutcome(Sink.PRIMARY_STORE, ok=False, error=PrimaryStoreWriteFailure("down"))
    assert resolve_submission([bad_store, ok_backup], "f.json").interview_id is None

    bad_backup = SinkOutcome(Sink.BACKUP_FILE, ok=False, error=BackupWriteFailure("disk full"))
    with pytest.raises(BackupWriteFailure):
        resolve_submission([ok_store, bad_backup, bad_storage], "f.json")
