"""
Environment-driven settings.

`RECORDIC_DATABASE_URL` wins; otherwise the URL is assembled from the usual
``POSTGRES_*`` variables. A ``.env`` file in the working directory is honoured.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_POSTGRES_REQUIRED = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")

# sync driver prefix ➜ asyncio driver prefix
_ASYNC_DRIVERS = {
    "postgresql+psycopg2://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def async_url(url: str) -> str:
    """Point a plain database URL at the asyncio driver SQLAlchemy needs."""
    for prefix, replacement in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


def _database_url(env: Mapping[str, str]) -> str:
    if env.get("RECORDIC_DATABASE_URL"):
        return async_url(env["RECORDIC_DATABASE_URL"])

    missing = [name for name in _POSTGRES_REQUIRED if not env.get(name)]
    if missing:
        raise ValueError(
            f"Missing required database environment variables: {', '.join(missing)}"
        )

    host = env.get("POSTGRES_HOST", "localhost")
    port = env.get("POSTGRES_PORT", "5432")
    return (
        "postgresql+asyncpg://"
        + env["POSTGRES_USER"]
        + ":"
        + env["POSTGRES_PASSWORD"]
        + f"@{host}:{port}/"
        + env["POSTGRES_DB"]
    )


class Settings(BaseModel):
    database_url: str
    log_level: str = "INFO"
    log_json: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("log_level", mode="before")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"RECORDIC_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {value!r}"
            )
        return level

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from `env`, or from ``os.environ`` after loading ``.env``."""
        if env is None:
            load_dotenv()
            env = os.environ

        values = {"database_url": _database_url(env)}
        for field, name in (
            ("log_level", "RECORDIC_LOG_LEVEL"),
            ("log_json", "RECORDIC_LOG_JSON"),
            ("host", "RECORDIC_HOST"),
            ("port", "RECORDIC_PORT"),
        ):
            if env.get(name):
                values[field] = env[name]
        return cls.model_validate(values)
