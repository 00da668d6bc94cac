"""Application configuration. Loads from env vars."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings. Override via environment variables."""

    # Supabase project: PostgREST (primary store), Storage (object storage), GoTrue (auth)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    # Per-request timeout; a stuck sink call must not hold back the backup write for long
    SUPABASE_TIMEOUT_SECONDS: float = 10.0

    # Primary store tables
    INTERVIEWS_TABLE: str = "voice_interviews"
    USERS_TABLE: str = "users"

    # Object storage bucket; objects live under <user_id>/<file name>
    TRANSCRIPT_BUCKET: str = "interview-transcripts"
    OBJECT_STORAGE_ENABLED: bool = True

    # Backup files: one immutable .json per export attempt
    TRANSCRIPT_DATA_DIR: str = "./data"

    # metadata.source of documents built from the realtime session
    TRANSCRIPT_SOURCE: str = "livekit-session"

    # When set, /ws/session forwards finished transcripts to this submission endpoint
    # with the caller's token instead of persisting them in this process
    TRANSCRIPT_EXPORT_URL: str = ""

    # Logging: level (DEBUG, INFO, WARNING, ERROR); file path empty = console only
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)


def get_settings() -> Settings:
    return Settings()
