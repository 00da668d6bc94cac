"""Persistence sinks: primary store, object storage, backup files."""
from .backup import (
    backup_file_name,
    list_backup_files,
    parse_document,
    read_backup_file,
    serialize_document,
    write_backup_file,
)
from .records import InterviewRecord, derive_record
from .supabase import (
    NoOpObjectStorage,
    ObjectStorage,
    PrimaryStore,
    SupabaseObjectStorage,
    SupabaseStore,
    create_supabase_client,
)

__all__ = [
    "backup_file_name",
    "list_backup_files",
    "parse_document",
    "read_backup_file",
    "serialize_document",
    "write_backup_file",
    "InterviewRecord",
    "derive_record",
    "NoOpObjectStorage",
    "ObjectStorage",
    "PrimaryStore",
    "SupabaseObjectStorage",
    "SupabaseStore",
    "create_supabase_client",
]
