#!/usr/bin/env python3
"""
Replay backup transcript files into the primary store.

Usage: interview-transcripts-reconcile <user_id> [--data-dir DIR]

Exit status 1 if settings are missing, the user does not exist, or the backup
directory cannot be read. Failures of individual files are logged and do not
change the exit status.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from interview_transcripts.config import Settings, get_settings
from interview_transcripts.errors import ReconciliationOwnerNotFound
from interview_transcripts.logging_config import setup_logging
from interview_transcripts.services.reconciler import ReconcileReport, reconcile_backups
from interview_transcripts.storage.supabase import PrimaryStore, SupabaseStore, create_supabase_client

logger = logging.getLogger(__name__)


async def run(owner_id: str, data_dir: str, settings: Settings, store: PrimaryStore | None = None) -> int:
    client = None
    if store is None:
        client = create_supabase_client(settings)
        store = SupabaseStore(client, settings.INTERVIEWS_TABLE, settings.USERS_TABLE)
    try:
        report: ReconcileReport = await reconcile_backups(owner_id, data_dir, store)
    except ReconciliationOwnerNotFound as e:
        logger.error("%s", e)
        return 1
    except OSError as e:
        logger.error("Error reading data directory %s: %s", data_dir, e)
        return 1
    finally:
        if client is not None:
            await client.aclose()

    print(
        f"Completed: {report.uploaded} of {report.discovered} transcripts uploaded"
        f" ({len(report.failures)} failed)"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Upload backup interview transcripts for one user.")
    ap.add_argument("user_id", help="Owner user id (UUID) to associate the transcripts with.")
    ap.add_argument(
        "--data-dir",
        default=settings.TRANSCRIPT_DATA_DIR,
        help="Backup directory (default: TRANSCRIPT_DATA_DIR).",
    )
    args = ap.parse_args(argv)

    setup_logging(settings)
    if not settings.supabase_configured:
        logger.error("Missing Supabase settings. Required: SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY")
        return 1
    return asyncio.run(run(args.user_id, args.data_dir, settings))


if __name__ == "__main__":
    sys.exit(main())
