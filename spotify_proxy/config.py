# spotify_proxy/config.py
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import find_dotenv, load_dotenv

SPOTIFY_SCOPE = (
    "user-follow-read "
    "user-modify-playback-state "
    "user-read-playback-state "
    "user-top-read "
    "streaming "
    "app-remote-control"
)


@dataclass
class Settings:
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://127.0.0.1:8888/spotify/callback"
    host: str = "0.0.0.0"
    port: int = 8888
    api_base: str = "https://api.spotify.com/v1"
    accounts_base: str = "https://accounts.spotify.com"
    scope: str = SPOTIFY_SCOPE
    request_timeout: float = 10.0
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env file, if any)."""
    load_dotenv(find_dotenv(usecwd=True))

    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        client_id=os.getenv("SPOTIFY_CLIENT_ID", ""),
        client_secret=os.getenv("SPOTIFY_CLIENT_SECRET", ""),
        # REDIRECT_URI is the older name, still honoured
        redirect_uri=os.getenv(
            "SPOTIFY_REDIRECT_URI",
            os.getenv("REDIRECT_URI", "http://127.0.0.1:8888/spotify/callback"),
        ),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8888")),
        api_base=os.getenv("SPOTIFY_API_BASE", "https://api.spotify.com/v1").rstrip("/"),
        accounts_base=os.getenv("SPOTIFY_ACCOUNTS_BASE", "https://accounts.spotify.com").rstrip("/"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
