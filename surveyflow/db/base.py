"""SQLAlchemy engine construction.

Sessions and responses target PostgreSQL in production but SQLite works for
local development and tests. No ORM models are defined; repositories issue
`text()` statements over the shared Engine.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from surveyflow.config import load_config

logger = logging.getLogger(__name__)


# Module-level cached Engine so repositories share one connection pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    The URL defaults to the configured `database.dsn`. In-memory SQLite uses a
    StaticPool so every connection sees the same database.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or load_config().database.dsn

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite") and ":memory:" in resolved_url:
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(resolved_url, **kwargs)
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created dialect=%s", _ENGINE.dialect.name)

    return _ENGINE


def dispose_engine() -> None:
    """Drop the cached Engine (tests switch databases between sessions)."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None
