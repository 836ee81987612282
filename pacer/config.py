import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/pacer.db"


@dataclass
class Config:
    """Runtime configuration, read from the environment once at startup."""

    database_url: str = DEFAULT_DATABASE_URL
    base_path: str = ""
    strava_client_id: Optional[str] = None
    strava_client_secret: Optional[str] = None
    strava_sync_minutes: int = 15
    claude_oauth_token: Optional[str] = None
    coach_model: str = "sonnet"
    public_backend_url: str = ""
    public_backend_key: str = ""

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            base_path=os.getenv("BASE_PATH", "").rstrip("/"),
            strava_client_id=os.getenv("STRAVA_CLIENT_ID"),
            strava_client_secret=os.getenv("STRAVA_CLIENT_SECRET"),
            strava_sync_minutes=int(os.getenv("STRAVA_SYNC_MINUTES", "15")),
            claude_oauth_token=os.getenv("CLAUDE_CODE_OAUTH_TOKEN"),
            coach_model=os.getenv("COACH_MODEL", "sonnet"),
            public_backend_url=os.getenv("PUBLIC_BACKEND_URL", ""),
            public_backend_key=os.getenv("PUBLIC_BACKEND_KEY", ""),
        )

    @property
    def strava_configured(self) -> bool:
        return bool(self.strava_client_id and self.strava_client_secret)
