"""Configuration helpers for the Motiv Quotes web application."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from secrets import token_urlsafe
from typing import Optional

from dotenv import load_dotenv

TRUE_VALUES = {"true", "1", "yes", "y"}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in TRUE_VALUES


def _resolve_secret_key() -> str:
    """Return the configured secret key or generate a one-time value."""

    configured = os.getenv("QUOTES_SECRET_KEY")
    if configured:
        return configured

    logging.getLogger("motiv_quotes.config").warning(
        "QUOTES_SECRET_KEY environment variable is not set; generated a one-time key."
    )
    return token_urlsafe(32)


@dataclass(slots=True)
class AppConfig:
    """Settings loaded from environment variables.

    ``backend`` selects the Remote Data Gateway: ``"sql"`` talks to the
    SQLAlchemy database at ``database_url`` while ``"rest"`` talks to the
    hosted PostgREST endpoint at ``rest_url`` using ``rest_api_key``.
    """

    backend: str
    database_url: str
    secret_key: str
    rest_url: str = ""
    rest_api_key: str = ""
    rest_table: str = "quotes"
    rest_timeout: float = 10.0
    rest_retries: int = 3
    rest_atomic_rpc: bool = False
    query_limit: int = 1000
    csrf_enabled: bool = True
    ratelimit_enabled: bool = True
    ratelimit_storage_uri: str = "memory://"
    submit_rate_limit: str = "10 per minute"
    vote_rate_limit: str = "60 per minute"


def load_config(env_file: Optional[Path] = None) -> AppConfig:
    """Create an :class:`AppConfig` instance from environment variables.

    Values from a local ``.env`` file are loaded first through
    :func:`dotenv.load_dotenv`; variables already present in the process
    environment take precedence.
    """

    load_dotenv(env_file)
    database = os.getenv(
        "QUOTES_DATABASE", "sqlite:///" + str(Path("instance/quotes.db"))
    )
    if database.startswith("sqlite:///") and not database.startswith("sqlite:////"):
        Path(database[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    return AppConfig(
        backend=os.getenv("QUOTES_BACKEND", "sql").strip().lower(),
        database_url=database,
        secret_key=_resolve_secret_key(),
        rest_url=os.getenv("QUOTES_REST_URL", ""),
        rest_api_key=os.getenv("QUOTES_REST_API_KEY", ""),
        rest_table=os.getenv("QUOTES_REST_TABLE", "quotes"),
        rest_timeout=float(os.getenv("QUOTES_REST_TIMEOUT", "10")),
        rest_retries=int(os.getenv("QUOTES_REST_RETRIES", "3")),
        rest_atomic_rpc=_env_flag("QUOTES_REST_ATOMIC_RPC", "false"),
        query_limit=int(os.getenv("QUOTES_QUERY_LIMIT", "1000")),
        csrf_enabled=_env_flag("QUOTES_CSRF_ENABLED", "true"),
        ratelimit_enabled=_env_flag("QUOTES_RATELIMIT_ENABLED", "true"),
        ratelimit_storage_uri=os.getenv(
            "QUOTES_RATELIMIT_STORAGE_URI", "memory://"
        ),
        submit_rate_limit=os.getenv("QUOTES_SUBMIT_RATE_LIMIT", "10 per minute"),
        vote_rate_limit=os.getenv("QUOTES_VOTE_RATE_LIMIT", "60 per minute"),
    )
