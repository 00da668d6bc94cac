"""
Exporters: where ExportTrigger sends a finished transcript document.

- CoordinatorExporter: in-process, straight into PersistenceCoordinator (used by /ws/session).
- HttpTranscriptExporter: POST to a remote /api/interview-transcripts with the user's token
  (used by /ws/session when TRANSCRIPT_EXPORT_URL is set).
"""
from __future__ import annotations

from typing import Any

import httpx

from interview_transcripts.config import Settings
from interview_transcripts.services.persistence import PersistenceCoordinator, SubmissionResult


class CoordinatorExporter:
    def __init__(self, coordinator: PersistenceCoordinator, identity: Any) -> None:
        self._coordinator = coordinator
        self._identity = identity

    async def __call__(self, document: dict[str, Any]) -> SubmissionResult:
        return await self._coordinator.submit(self._identity, document)


class HttpTranscriptExporter:
    """Raises httpx.HTTPStatusError on a non-2xx response; the trigger logs it."""

    def __init__(
        self,
        url: str,
        access_token: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._url = url
        self._access_token = access_token
        self._client = client
        self._timeout = timeout

    async def _post(self, client: httpx.AsyncClient, document: dict[str, Any]) -> dict[str, Any]:
        resp = await client.post(
            self._url,
            json=document,
            headers={"Authorization": f"Bearer {self._access_token}"},
        )
        resp.raise_for_status()
        return resp.json()

    async def __call__(self, document: dict[str, Any]) -> dict[str, Any]:
        if self._client is not None:
            return await self._post(self._client, document)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._post(client, document)


def build_exporter(
    settings: Settings,
    coordinator: PersistenceCoordinator,
    identity: Any,
    access_token: str | None,
) -> CoordinatorExporter | HttpTranscriptExporter:
    """Remote submission endpoint if TRANSCRIPT_EXPORT_URL is set, else the in-process coordinator."""
    if settings.TRANSCRIPT_EXPORT_URL and access_token:
        return HttpTranscriptExporter(settings.TRANSCRIPT_EXPORT_URL, access_token)
    return CoordinatorExporter(coordinator, identity)
