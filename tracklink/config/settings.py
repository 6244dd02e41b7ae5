"""
Environment-based configuration using pydantic-settings.
Every value can be overridden with a TRACKLINK_-prefixed environment variable.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TRACKLINK_",
        case_sensitive=True,
    )

    # ── Core ────────────────────────────────────────────────────────────────
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # ── Backends (selected once at startup) ─────────────────────────────────
    PLAYER: str = "mpris"          # mpris | mpd
    SEARCH_METHOD: str = "file"    # file | beets

    # ── Library ─────────────────────────────────────────────────────────────
    MUSIC_DIR: Path = Path("~/Music")
    AUDIO_EXTENSIONS: tuple[str, ...] = (
        ".mp3", ".flac", ".ogg", ".opus", ".m4a", ".wav", ".aac", ".wma",
    )
    BEETS_LIBRARY: Path = Path("~/.config/beets/library.db")

    # ── MPD via mpc ─────────────────────────────────────────────────────────
    MPC_PATH: str = "mpc"
    MPC_TIMEOUT_SECONDS: float = 5.0

    # ── MPRIS ───────────────────────────────────────────────────────────────
    MPRIS_PREFIX: str = "org.mpris.MediaPlayer2."
    MPRIS_EXCLUDED: tuple[str, ...] = ("plasma-browser-integration", "kdeconnect")

    # ── Playback controller ─────────────────────────────────────────────────
    SETTLE_SECONDS: float = 0.5
    WATCHDOG_COARSE_SECONDS: float = 5.0
    WATCHDOG_FINE_WINDOW_SECONDS: float = 6.0

    # ── YouTube lookup ──────────────────────────────────────────────────────
    YOUTUBE_API_KEY: str = ""
    LOOKUP_CACHE_TTL_SECONDS: int = 24 * 3600
    LOOKUP_CACHE_MAX_ENTRIES: int = 512

    # ── HTTP client ──────────────────────────────────────────────────────────
    HTTP_TIMEOUT_SECONDS: int = 30
    HTTP_RETRY_ATTEMPTS: int = 3
    HTTP_RETRY_BACKOFF: float = 1.5

    # ── Export ───────────────────────────────────────────────────────────────
    DEFAULT_EXPORT_FORMAT: str = "org"

    @field_validator("PLAYER", "SEARCH_METHOD", "ENV", mode="before")
    @classmethod
    def lower_case(cls, v: str) -> str:
        return str(v).strip().lower()

    @field_validator("MUSIC_DIR", "BEETS_LIBRARY", mode="before")
    @classmethod
    def expand_user(cls, v: Optional[Path]) -> Path:
        return Path(v).expanduser()

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
