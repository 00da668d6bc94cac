"""Services: persistence coordinator and backup reconciler."""
from interview_transcripts.services.persistence import (
    PersistenceCoordinator,
    SubmissionResult,
    resolve_submission,
    validate_document,
)
from interview_transcripts.services.reconciler import ReconcileReport, reconcile_backups

__all__ = [
    "PersistenceCoordinator",
    "SubmissionResult",
    "resolve_submission",
    "validate_document",
    "ReconcileReport",
    "reconcile_backups",
]
