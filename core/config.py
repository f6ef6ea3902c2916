"""
Core Module - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the incident API, read from the
environment (a .env file is honoured).

Environment variables:
- DATABASE_URL            SQLAlchemy URL of the incident store
- DATABASE_ECHO           Log SQL statements (true/false)
- AUTO_CREATE_TABLES      Create missing tables on startup
- API_HOST / API_PORT     Bind address for the HTTP server
- LOG_LEVEL / LOG_FORMAT  Logging level, "text" or "json"
- INCIDENT_PAGE_SIZE      Max incidents per listing
- CORS_ORIGINS            Comma separated allowed origins

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


DEFAULT_DATABASE_URL = "sqlite:///./statuspage.db"
DEFAULT_PAGE_SIZE = 50

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# ============================================================
# SETTINGS
# ============================================================

@dataclass
class Settings:
    """Incident API settings."""

    database_url: str = DEFAULT_DATABASE_URL
    """SQLAlchemy database URL."""

    database_echo: bool = False
    """Log SQL statements."""

    auto_create_tables: bool = True
    """Create tables at startup if they are missing."""

    host: str = "127.0.0.1"
    port: int = 8000

    log_level: str = "INFO"
    log_format: str = "text"

    page_size: int = DEFAULT_PAGE_SIZE
    """Maximum number of incidents returned by a listing."""

    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ConfigurationError(
                "page size must be positive",
                config_key="INCIDENT_PAGE_SIZE",
                actual_value=self.page_size,
            )
        if self.log_format not in ("text", "json"):
            raise ConfigurationError(
                "log format must be 'text' or 'json'",
                config_key="LOG_FORMAT",
                actual_value=self.log_format,
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ
                after loading .env)
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        database_url = environ.get("DATABASE_URL")
        if not database_url:
            database_url = DEFAULT_DATABASE_URL
            logger.warning(f"DATABASE_URL not set, using default: {database_url}")

        origins = environ.get("CORS_ORIGINS", "*")

        return cls(
            database_url=database_url,
            database_echo=_get_bool(environ, "DATABASE_ECHO", False),
            auto_create_tables=_get_bool(environ, "AUTO_CREATE_TABLES", True),
            host=environ.get("API_HOST", "127.0.0.1"),
            port=_get_int(environ, "API_PORT", 8000),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            log_format=environ.get("LOG_FORMAT", "text").lower(),
            page_size=_get_int(environ, "INCIDENT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


# ============================================================
# HELPERS
# ============================================================

def _get_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{key} must be an integer", config_key=key, actual_value=raw, cause=e
        ) from e


def _get_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be a boolean", config_key=key, actual_value=raw)


__all__ = [
    "Settings",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_PAGE_SIZE",
]
