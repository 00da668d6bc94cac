import os

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from interview_transcripts.config import Settings
from interview_transcripts.main import create_app
from interview_transcripts.services.persistence import PersistenceCoordinator

from tests.conftest import FIXED_NOW, FakeAuth, FakeStorage, FakeStore

AUTH = {"Authorization": "Bearer good-token"}


def _client(coordinator) -> TestClient:
    app = create_app(settings=Settings(LOG_LEVEL="WARNING"), coordinator=coordinator, auth=FakeAuth())
    return TestClient(app)


def test_health(coordinator):
    with _client(coordinator) as client:
        assert client.get("/health").json() == {"status": "ok"}


def test_submit_returns_file_name_and_id(coordinator, backup_dir, sample_document):
    with _client(coordinator) as client:
        resp = client.post("/api/interview-transcripts", json=sample_document, headers=AUTH)
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["interviewId"] == 1
    assert body["fileName"].startswith("interview-transcript-2024-01-01T00-00-10Z-")
    assert os.path.exists(os.path.join(backup_dir, body["fileName"]))


def test_primary_store_failure_omits_interview_id(storage, backup_dir, sample_document):
    coordinator = PersistenceCoordinator(FakeStore(fail=True), storage, backup_dir, now=lambda: FIXED_NOW)
    with _client(coordinator) as client:
        resp = client.post("/api/interview-transcripts", json=sample_document, headers=AUTH)
    assert resp.status_code == 200
    body = resp.json()
    assert "interviewId" not in body
    assert os.path.exists(os.path.join(backup_dir, body["fileName"]))


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer bad-token"}, {"Authorization": "Basic x"}])
def test_unauthenticated_is_401(coordinator, store, sample_document, headers):
    with _client(coordinator) as client:
        resp = client.post("/api/interview-transcripts", json=sample_document, headers=headers)
    assert resp.status_code == 401
    assert store.records == []


def test_non_object_body_is_400(coordinator, store):
    with _client(coordinator) as client:
        assert client.post("/api/interview-transcripts", json=[1, 2], headers=AUTH).status_code == 400
        resp = client.post(
            "/api/interview-transcripts",
            content=b"{not json",
            headers={**AUTH, "Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert client.post("/api/interview-transcripts", json={"turns": []}, headers=AUTH).status_code == 400
    assert store.records == []


@pytest.mark.parametrize(
    "raw",
    [
        b'{"metadata": {"generatedAt": "x", "score": NaN}, "turns": []}',
        b'{"metadata": {}, "turns": [{"role": "user", "text": "hi", "confidence": Infinity}]}',
        b"[" * 100000,
    ],
)
def test_non_standard_json_body_is_400(coordinator, store, backup_dir, raw):
    with _client(coordinator) as client:
        resp = client.post(
            "/api/interview-transcripts",
            content=raw,
            headers={**AUTH, "Content-Type": "application/json"},
        )
    assert resp.status_code == 400
    assert store.records == []
    assert not os.path.exists(backup_dir)


def test_backup_failure_is_500(store, tmp_path, sample_document):
    blocker = tmp_path / "blocked"
    blocker.write_text("")
    coordinator = PersistenceCoordinator(store, FakeStorage(), str(blocker), now=lambda: FIXED_NOW)
    with _client(coordinator) as client:
        resp = client.post("/api/interview-transcripts", json=sample_document, headers=AUTH)
    assert resp.status_code == 500


def test_session_relay_without_turns_writes_nothing(coordinator, store, backup_dir):
    with _client(coordinator) as client:
        with client.websocket_connect("/ws/session?token=good-token") as ws:
            ws.receive_json()
    assert store.records == []
    assert not os.path.exists(backup_dir)


def test_session_relay_rejects_bad_token(coordinator):
    with _client(coordinator) as client:
        with pytest.raises(WebSocketDisconnect) as excinfo:
            with client.websocket_connect("/ws/session?token=nope") as ws:
                ws.receive_json()
    assert excinfo.value.code == 1008
