"""Environment-driven settings for the guestbook and quote servers.

Values are read from the process environment; a ``.env`` file in the working
directory is loaded first so local development does not need exported vars.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()

GUESTBOOK_PORT = 3000
RECENT_LIMIT = 50


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    number = int(value)
    # 0 means retry forever
    return number if number > 0 else None


@dataclass
class Settings:
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "guestbook"
    db_user: str = "postgres"
    db_password: str = "postgres"
    database_url_override: Optional[str] = None
    db_echo: bool = False

    retry_delay: float = 2.0
    retry_backoff: float = 1.0
    retry_max_delay: float = 60.0
    retry_max_attempts: Optional[int] = None

    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_host=os.getenv("DB_HOST", "localhost"),
            db_port=int(os.getenv("DB_PORT", "5432")),
            db_name=os.getenv("DB_NAME", "guestbook"),
            db_user=os.getenv("DB_USER", "postgres"),
            db_password=os.getenv("DB_PASSWORD", "postgres"),
            database_url_override=os.getenv("DATABASE_URL") or None,
            db_echo=_env_bool("DB_ECHO"),
            retry_delay=float(os.getenv("DB_INIT_RETRY_DELAY", "2.0")),
            retry_backoff=float(os.getenv("DB_INIT_RETRY_BACKOFF", "1.0")),
            retry_max_delay=float(os.getenv("DB_INIT_RETRY_MAX_DELAY", "60.0")),
            retry_max_attempts=_env_optional_int("DB_INIT_MAX_ATTEMPTS"),
            port=int(os.getenv("PORT", "3000")),
        )

    @property
    def database_url(self):
        """SQLAlchemy URL: ``DATABASE_URL`` if set, else PostgreSQL from ``DB_*``."""
        if self.database_url_override:
            return self.database_url_override
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
