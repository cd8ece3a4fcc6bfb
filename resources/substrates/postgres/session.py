"""Session helpers shared by event-log repositories."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions keep loaded state after commit and never autoflush."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Run one short transaction: commit on success, roll back on any error."""
    with session_factory() as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        session.commit()
