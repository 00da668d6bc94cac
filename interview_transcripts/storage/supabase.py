"""
Supabase-backed sinks: PostgREST table (primary store) and Storage bucket (object storage).

Clients are plain httpx.AsyncClient instances built once per process (see
create_supabase_client) and passed in; nothing here reads settings on its own.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from interview_transcripts.config import Settings
from interview_transcripts.storage.records import InterviewRecord

logger = logging.getLogger(__name__)


def create_supabase_client(settings: Settings, api_key: str | None = None) -> httpx.AsyncClient:
    """HTTP client for the Supabase project. Defaults to the service-role key."""
    key = api_key if api_key is not None else settings.SUPABASE_SERVICE_ROLE_KEY
    return httpx.AsyncClient(
        base_url=settings.SUPABASE_URL.rstrip("/"),
        headers={"apikey": key, "Authorization": f"Bearer {key}"},
        timeout=settings.SUPABASE_TIMEOUT_SECONDS,
    )


class PrimaryStore(ABC):
    """Structured store holding persisted interview records."""

    @abstractmethod
    async def insert_interview(self, record: InterviewRecord) -> Any:
        """Insert one record; return the id assigned by the store."""
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> dict[str, Any] | None:
        """Return the account row for user_id, or None if unknown."""
        ...


class ObjectStorage(ABC):
    """Blob store for the raw document bytes."""

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: str = "application/json") -> None:
        """Create the object at path. Must not overwrite an existing object."""
        ...


class SupabaseStore(PrimaryStore):
    """PostgREST tables: voice_interviews (records) and users (accounts)."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        interviews_table: str = "voice_interviews",
        users_table: str = "users",
    ) -> None:
        self._client = client
        self._interviews_table = interviews_table
        self._users_table = users_table

    async def insert_interview(self, record: InterviewRecord) -> Any:
        resp = await self._client.post(
            f"/rest/v1/{self._interviews_table}",
            json=record.to_row(),
            headers={"Prefer": "return=representation"},
        )
        resp.raise_for_status()
        rows = resp.json()
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            return rows[0].get("id")
        if isinstance(rows, dict):
            return rows.get("id")
        return None

    async def get_user(self, user_id: str) -> dict[str, Any] | None:
        resp = await self._client.get(
            f"/rest/v1/{self._users_table}",
            params={"id": f"eq.{user_id}", "select": "id,email"},
        )
        # PostgREST rejects malformed uuids with 400; treat as unknown user
        if resp.status_code == 400:
            logger.warning("User lookup rejected for %s: %s", user_id, resp.text)
            return None
        resp.raise_for_status()
        rows = resp.json()
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            return rows[0]
        return None


class SupabaseObjectStorage(ObjectStorage):
    """Supabase Storage bucket. Uploads use x-upsert: false, so an existing object fails the upload."""

    def __init__(self, client: httpx.AsyncClient, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    async def upload(self, path: str, content: bytes, content_type: str = "application/json") -> None:
        resp = await self._client.post(
            f"/storage/v1/object/{self._bucket}/{path}",
            content=content,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        resp.raise_for_status()


class NoOpObjectStorage(ObjectStorage):
    """When object storage is disabled. No network I/O."""

    async def upload(self, path: str, content: bytes, content_type: str = "application/json") -> None:
        logger.debug("Object storage disabled; skipped %s", path)
