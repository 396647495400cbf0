"""
peer_recognition/config/settings.py
Runtime settings loaded from the environment (.env supported)
"""
import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=ENV_FILE)

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "file", "redis", "sql")


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration. Build with get_settings() or directly in tests."""
    storage_backend: str = "memory"
    data_file: str = "./data/database.json"
    redis_url: str = "redis://localhost:6379/0"
    document_key: str = "peer-recognition-db"
    database_url: str = "sqlite+aiosqlite:///./peer_recognition.db"
    auto_transition_interval_seconds: int = 0
    allowed_origins: List[str] = field(default_factory=list)
    environment: str = "development"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        backend = os.getenv("STORAGE_BACKEND", "memory").strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise EnvironmentError(
                f"STORAGE_BACKEND must be one of: {', '.join(STORAGE_BACKENDS)} (got '{backend}')"
            )

        origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]

        return cls(
            storage_backend=backend,
            data_file=os.getenv("DATA_FILE", "./data/database.json"),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            document_key=os.getenv("DOCUMENT_KEY", os.getenv("REDIS_KEY", "peer-recognition-db")),
            database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./peer_recognition.db"),
            auto_transition_interval_seconds=int(os.getenv("AUTO_TRANSITION_INTERVAL_SECONDS", "0")),
            allowed_origins=origins,
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings for the running process."""
    settings = Settings.from_env()
    logger.info(f"✓ Settings loaded (storage backend: {settings.storage_backend})")
    return settings
