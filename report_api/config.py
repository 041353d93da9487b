"""
Configuration management for the Compliance Report Server.

Settings are read once from the process environment (and an optional
``.env`` file at the project root) into an immutable value.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)

DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024


def _env_int(env, name: str, default: int) -> int:
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    """API server configuration."""

    # Server
    api_title: str = "Compliance Report Server"
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Database
    db_user: str = ""
    db_password: str = ""
    db_server: str = "localhost"
    db_port: int = 1433
    db_name: str = ""
    db_driver: str = "mssql+pymssql"
    database_url: Optional[str] = None
    db_pool_size: int = 5
    db_timeout: int = 30

    # Report designer
    license_key: str = ""
    public_dir: Path = BASE_DIR / "public"
    reports_dir: Path = BASE_DIR / "public" / "reports"
    stimulsoft_dir: Path = BASE_DIR / "node_modules" / "stimulsoft-reports-js"
    report_extension: str = ".mrt"
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, env=None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)
        """
        env = os.environ if env is None else env

        public_dir = Path(env.get("PUBLIC_DIR") or BASE_DIR / "public")
        reports_dir = Path(env.get("REPORTS_DIR") or public_dir / "reports")
        stimulsoft_dir = Path(
            env.get("STIMULSOFT_DIR") or BASE_DIR / "node_modules" / "stimulsoft-reports-js"
        )
        origins = [o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip()]

        return cls(
            host=env.get("HOST") or "0.0.0.0",
            port=_env_int(env, "PORT", 3000),
            cors_origins=origins or ["*"],
            db_user=env.get("DB_USER", ""),
            db_password=env.get("DB_PASSWORD", ""),
            db_server=env.get("DB_SERVER") or "localhost",
            db_port=_env_int(env, "DB_PORT", 1433),
            db_name=env.get("DB_NAME", ""),
            db_driver=env.get("DB_DRIVER") or "mssql+pymssql",
            database_url=env.get("DATABASE_URL") or None,
            db_pool_size=_env_int(env, "DB_POOL_SIZE", 5),
            db_timeout=_env_int(env, "DB_TIMEOUT", 30),
            license_key=env.get("STIMULSOFT_LICENSE_KEY", ""),
            public_dir=public_dir,
            reports_dir=reports_dir,
            stimulsoft_dir=stimulsoft_dir,
            max_body_bytes=_env_int(env, "MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            log_file=env.get("LOG_FILE") or None,
        )

    def sqlalchemy_url(self):
        """Connection URL for the database engine."""
        if self.database_url:
            return self.database_url
        return URL.create(
            self.db_driver,
            username=self.db_user or None,
            password=self.db_password or None,
            host=self.db_server,
            port=self.db_port,
            database=self.db_name or None,
        )
