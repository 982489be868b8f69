"""
Application settings loaded from the environment (.env supported).
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """
    Runtime configuration for the catalogue service

    Attributes:
        db_url: SQLite file path or SQLAlchemy URL
        db_echo: Echo SQL statements (debugging)
        auth_token: Bearer token for write endpoints, empty disables the check
        boxoffice_url: Base URL of the upstream box office API
        boxoffice_api_key: API key sent as X-API-Key
        boxoffice_timeout: Upstream request timeout in seconds
        address / port: Listen address for uvicorn
        log_level: Root log level name
        enable_docs: Serve OpenAPI docs at /docs
    """
    db_url: str = "movies.db"
    db_echo: bool = False
    auth_token: str = ""
    boxoffice_url: Optional[str] = None
    boxoffice_api_key: Optional[str] = None
    boxoffice_timeout: float = 5.0
    address: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    enable_docs: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_url=os.getenv("DB_URL") or "movies.db",
            db_echo=_env_bool("DB_ECHO"),
            auth_token=os.getenv("AUTH_TOKEN", "").strip(),
            boxoffice_url=os.getenv("BOXOFFICE_URL"),
            boxoffice_api_key=os.getenv("BOXOFFICE_API_KEY"),
            boxoffice_timeout=float(os.getenv("BOXOFFICE_TIMEOUT", "5")),
            address=os.getenv("ADDRESS") or "0.0.0.0",
            port=int(os.getenv("PORT") or 8080),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            enable_docs=_env_bool("ENABLE_DOCS"),
        )
