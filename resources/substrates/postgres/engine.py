"""SQLAlchemy engine construction for the event-log datastore."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url

from resources.substrates.postgres.config import PostgresSettings


def create_postgres_engine(config: PostgresSettings) -> Engine:
    """Build the engine for ``config.url``.

    Pool sizing and libpq connect options only apply to ``postgresql`` URLs;
    any other backend (SQLite for local runs) gets SQLAlchemy's defaults.
    """
    if make_url(config.url).get_backend_name() != "postgresql":
        return create_engine(config.url)
    return create_engine(
        config.url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        pool_pre_ping=config.pool_pre_ping,
        connect_args={
            "connect_timeout": int(config.connect_timeout_seconds),
            "sslmode": config.sslmode,
        },
    )
