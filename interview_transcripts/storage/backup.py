"""
Backup files: one immutable JSON file per export attempt.

Exclusive create ("x"): a backup is written once and never rewritten. The file
body and the object-storage body are the same bytes (serialize_document).
"""
from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from interview_transcripts.transcript.derivation import sanitize_filename
from interview_transcripts.transcript.normalizer import format_iso

logger = logging.getLogger(__name__)

FILE_PREFIX = "interview-transcript-"
FILE_EXTENSION = ".json"
SUFFIX_LENGTH = 8


def _random_suffix() -> str:
    return uuid.uuid4().hex[:SUFFIX_LENGTH]


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {token}")


def parse_document(raw: str | bytes) -> Any:
    """Strict JSON parse: NaN, Infinity and -Infinity are rejected with ValueError."""
    return json.loads(raw, parse_constant=_reject_constant)


def serialize_document(document: Any) -> bytes:
    """
    Pretty-printed JSON (2-space indent), non-ASCII kept, trailing newline.
    Raises ValueError for non-finite floats so every backup stays standard JSON.
    """
    return (json.dumps(document, ensure_ascii=False, indent=2, allow_nan=False) + "\n").encode("utf-8")


def backup_file_name(
    generated_at: Any,
    now: Callable[[], datetime] | None = None,
    suffix: Callable[[], str] = _random_suffix,
) -> str:
    """
    interview-transcript-<sanitized generatedAt>-<suffix>.json.
    Non-string generatedAt -> current ISO time; empty after sanitizing -> current epoch ms.
    """
    now = now or (lambda: datetime.now(timezone.utc))
    raw = generated_at if isinstance(generated_at, str) else format_iso(now())
    token = sanitize_filename(raw) or str(int(now().timestamp() * 1000))
    return f"{FILE_PREFIX}{token}-{suffix()}{FILE_EXTENSION}"


def write_backup_file(directory: str, file_name: str, content: bytes) -> str:
    """Create directory if needed and write content to a new file. Blocking; run in executor."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, file_name)
    with open(path, "xb") as f:
        f.write(content)
    logger.info("Backup transcript written: %s", path)
    return path


def list_backup_files(directory: str) -> list[str]:
    """Names of *.json files in directory, sorted. Raises OSError if the directory is unreadable."""
    return sorted(
        name
        for name in os.listdir(directory)
        if name.endswith(FILE_EXTENSION) and os.path.isfile(os.path.join(directory, name))
    )


def read_backup_file(directory: str, file_name: str) -> Any:
    """Parse one backup file. Raises OSError / ValueError (incl. JSONDecodeError)."""
    with open(os.path.join(directory, file_name), "r", encoding="utf-8") as f:
        return parse_document(f.read())
