"""Sessions and the transaction helper.

Services own their transactions: they call transaction(db) around every
write. Routes only receive a session through get_db().
"""

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from kiosk.db.engine import get_engine


def create_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Sessions that keep loaded attributes after commit.

    Services return response schemas built from ORM rows after committing,
    so rows must stay readable without a refresh.
    """
    return sessionmaker(bind=engine or get_engine(), autoflush=False, expire_on_commit=False)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return create_session_factory()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """Commit what the block wrote, or roll it back and re-raise.

    Row locks taken inside the block (SELECT ... FOR UPDATE) are held until
    the commit.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
