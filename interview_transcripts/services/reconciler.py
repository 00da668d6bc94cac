"""
Batch reconciler: replay backup files into the primary store for one owner.

Files are processed sequentially. Any exception raised while reading,
validating or inserting one file is logged and recorded as that file's
failure, and the batch moves on. The owner check happens before any file is
opened.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from interview_transcripts.errors import (
    ReconciliationFileFailure,
    ReconciliationOwnerNotFound,
)
from interview_transcripts.services.persistence import validate_document
from interview_transcripts.storage.backup import list_backup_files, read_backup_file
from interview_transcripts.storage.records import derive_record
from interview_transcripts.storage.supabase import PrimaryStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    owner_id: str
    discovered: int = 0
    uploaded: int = 0
    failures: list[ReconciliationFileFailure] = field(default_factory=list)


async def reconcile_backups(owner_id: str, backup_dir: str, store: PrimaryStore) -> ReconcileReport:
    """
    Insert one record per backup file under owner_id.
    Raises ReconciliationOwnerNotFound (before touching files) or OSError if backup_dir is unreadable.
    """
    user = await store.get_user(owner_id)
    if not user:
        raise ReconciliationOwnerNotFound(owner_id)
    logger.info("Uploading transcripts for user: %s (%s)", user.get("email", "?"), owner_id)

    files = list_backup_files(backup_dir)
    report = ReconcileReport(owner_id=owner_id, discovered=len(files))
    logger.info("Found %d transcript files", len(files))

    for file_name in files:
        try:
            document = validate_document(read_backup_file(backup_dir, file_name))
            await store.insert_interview(derive_record(owner_id, document))
        except Exception as e:
            failure = ReconciliationFileFailure(file_name, str(e) or type(e).__name__)
            failure.__cause__ = e
            report.failures.append(failure)
            logger.error("Error uploading %s: %s", file_name, failure.reason)
            continue
        report.uploaded += 1
        logger.info("Uploaded %s", file_name)

    return report
