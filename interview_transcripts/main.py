"""
FastAPI app: transcript submission API and realtime session relay.

POST /api/interview-transcripts: persist a transcript document (primary store,
    backup file, object storage). 200 { ok, interviewId?, fileName }.
WS /ws/session?token=...: relay session messages; transcript exported once on close.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect, status

from interview_transcripts.auth import AuthenticatedUser, SupabaseAuth, get_current_user
from interview_transcripts.config import Settings, get_settings
from interview_transcripts.errors import BackupWriteFailure, Unauthenticated, ValidationError
from interview_transcripts.logging_config import setup_logging
from interview_transcripts.schemas.transcript import SubmissionResponse
from interview_transcripts.services.persistence import PersistenceCoordinator
from interview_transcripts.session import ExportTrigger, SessionRelay, build_exporter
from interview_transcripts.storage.backup import parse_document
from interview_transcripts.storage.supabase import (
    NoOpObjectStorage,
    SupabaseObjectStorage,
    SupabaseStore,
    create_supabase_client,
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    coordinator: PersistenceCoordinator | None = None,
    auth: SupabaseAuth | None = None,
) -> FastAPI:
    """Build the app. coordinator/auth are created from settings at startup unless passed in."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        clients = []
        if not settings.supabase_configured:
            logger.warning("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not set; only backup files will succeed")
        if coordinator is None:
            service_client = create_supabase_client(settings)
            clients.append(service_client)
            storage = (
                SupabaseObjectStorage(service_client, settings.TRANSCRIPT_BUCKET)
                if settings.OBJECT_STORAGE_ENABLED
                else NoOpObjectStorage()
            )
            app.state.coordinator = PersistenceCoordinator(
                store=SupabaseStore(service_client, settings.INTERVIEWS_TABLE, settings.USERS_TABLE),
                storage=storage,
                backup_dir=settings.TRANSCRIPT_DATA_DIR,
            )
        else:
            app.state.coordinator = coordinator
        if auth is None:
            auth_client = create_supabase_client(settings, api_key=settings.SUPABASE_ANON_KEY)
            clients.append(auth_client)
            app.state.auth = SupabaseAuth(auth_client)
        else:
            app.state.auth = auth
        yield
        for client in clients:
            await client.aclose()

    app = FastAPI(
        title="Interview Transcripts",
        description="Voice-interview transcript capture and multi-sink persistence",
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post(
        "/api/interview-transcripts",
        response_model=SubmissionResponse,
        response_model_exclude_none=True,
    )
    async def submit_transcript(
        request: Request,
        user: AuthenticatedUser | None = Depends(get_current_user),
    ) -> SubmissionResponse:
        """
        Persist one transcript document for the caller.
        400 malformed body, 401 not authenticated, 500 backup file not written.
        """
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
        try:
            body = parse_document(await request.body())
        except (ValueError, RecursionError):
            raise HTTPException(status_code=400, detail="Invalid transcript payload.")

        try:
            result = await request.app.state.coordinator.submit(user, body)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Unauthenticated:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
        except BackupWriteFailure as e:
            logger.error("Failed to write interview transcript: %s", e)
            raise HTTPException(status_code=500, detail="Failed to save transcript.")
        except Exception as e:
            logger.exception("Transcript submission failed: %s", e)
            raise HTTPException(status_code=500, detail="Failed to save transcript.")

        return SubmissionResponse(ok=True, interviewId=result.interview_id, fileName=result.file_name)

    @app.websocket("/ws/session")
    async def session_relay(websocket: WebSocket) -> None:
        """
        WebSocket: client relays session messages as JSON text frames.
        Closing the socket ends the lifecycle and exports the transcript once.
        """
        token = websocket.query_params.get("token")
        user = await websocket.app.state.auth.get_user(token)
        if user is None:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        await websocket.accept()
        trigger = ExportTrigger(
            build_exporter(settings, websocket.app.state.coordinator, user, token),
            source=settings.TRANSCRIPT_SOURCE,
        )
        relay = SessionRelay(websocket, trigger)
        try:
            await relay.run()
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.warning("Session relay error: %s", e)
            try:
                await websocket.close()
            except Exception:
                pass
        await trigger.join()

    return app


app = create_app()
