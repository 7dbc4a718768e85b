# config.py

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL


load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class Settings:
    # LLM
    API_KEY: Optional[str] = field(default_factory=lambda: os.getenv("API_KEY"))
    MODEL_NAME: str = field(default_factory=lambda: os.getenv("MODEL_NAME", "gemini/gemini-1.5-flash"))
    LLM_TEMPERATURE: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.0")))

    # MySQL
    DB_HOST: str = field(default_factory=lambda: os.getenv("DB_HOST", "localhost"))
    DB_PORT: int = field(default_factory=lambda: int(os.getenv("DB_PORT", "3306")))
    DB_NAME: Optional[str] = field(default_factory=lambda: os.getenv("DB_NAME"))
    DB_USER: Optional[str] = field(default_factory=lambda: os.getenv("DB_USER"))
    DB_PASS: Optional[str] = field(default_factory=lambda: os.getenv("DB_PASS"))
    SQLALCHEMY_ECHO: bool = field(default_factory=lambda: _env_flag("SQLALCHEMY_ECHO"))

    # Off by default: generated SQL runs as-is unless this is switched on.
    SQL_READ_ONLY: bool = field(default_factory=lambda: _env_flag("SQL_READ_ONLY"))

    # HTTP
    HOST: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    PORT: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))
    CORS_ORIGINS: List[str] = field(
        default_factory=lambda: [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    )
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


def mysql_url(cfg: Settings) -> URL:
    """Build the SQLAlchemy URL for the configured MySQL database (PyMySQL driver)."""
    return URL.create(
        drivername="mysql+pymysql",
        username=cfg.DB_USER,
        password=cfg.DB_PASS,
        host=cfg.DB_HOST,
        port=int(cfg.DB_PORT),
        database=cfg.DB_NAME,
    )
