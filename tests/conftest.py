from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from interview_transcripts.auth import AuthenticatedUser
from interview_transcripts.services.persistence import PersistenceCoordinator
from interview_transcripts.storage.records import InterviewRecord
from interview_transcripts.storage.supabase import ObjectStorage, PrimaryStore

USER = AuthenticatedUser(id="5f1c3d2e-0000-4000-8000-000000000001", email="ada@example.com")
FIXED_NOW = datetime(2024, 1, 1, 0, 0, 10, tzinfo=timezone.utc)


class FakeStore(PrimaryStore):
    def __init__(self, users: dict[str, dict] | None = None, fail: bool = False) -> None:
        self.users = users if users is not None else {USER.id: {"id": USER.id, "email": USER.email}}
        self.fail = fail
        self.records: list[InterviewRecord] = []

    async def insert_interview(self, record: InterviewRecord) -> Any:
        if self.fail:
            raise RuntimeError("primary store unavailable")
        self.records.append(record)
        return len(self.records)

    async def get_user(self, user_id: str) -> dict | None:
        return self.users.get(user_id)


class FakeStorage(ObjectStorage):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, path: str, content: bytes, content_type: str = "application/json") -> None:
        if self.fail:
            raise RuntimeError("storage unavailable")
        if path in self.objects:
            raise RuntimeError("The resource already exists")
        self.objects[path] = (content, content_type)


class FakeAuth:
    def __init__(self, tokens: dict[str, AuthenticatedUser] | None = None) -> None:
        self.tokens = tokens if tokens is not None else {"good-token": USER}

    async def get_user(self, access_token: str | None) -> AuthenticatedUser | None:
        return self.tokens.get(access_token or "")


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def backup_dir(tmp_path) -> str:
    return str(tmp_path / "data")


@pytest.fixture
def coordinator(store, storage, backup_dir) -> PersistenceCoordinator:
    return PersistenceCoordinator(store=store, storage=storage, backup_dir=backup_dir, now=lambda: FIXED_NOW)


@pytest.fixture
def sample_document() -> dict:
    return {
        "turns": [
            {"role": "user", "text": "hello", "timestamp": "2024-01-01T00:00:00Z"},
            {"role": "agent", "text": "hi there", "timestamp": "2024-01-01T00:00:05Z"},
        ],
        "metadata": {
            "generatedAt": "2024-01-01T00:00:10Z",
            "startedAt": "2024-01-01T00:00:00Z",
            "endedAt": "2024-01-01T00:00:05Z",
        },
    }
