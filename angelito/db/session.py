from __future__ import annotations

from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from angelito.db.models import Base

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)


def init_engine(database_url: str, create_schema: bool = True):
    options = {"pool_pre_ping": True, "future": True}
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # every session must see the same in-memory database
        options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    engine = create_engine(database_url, **options)
    if create_schema:
        Base.metadata.create_all(engine)
    SessionLocal.configure(bind=engine)
    return engine


def _ensure_initialized() -> None:
    if SessionLocal.kw.get("bind") is None:
        raise RuntimeError("Database engine not initialized. Call init_engine() before use.")


@contextmanager
def get_session():
    _ensure_initialized()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.debug("Session rolled back: {error}", error=type(exc).__name__)
        raise
    finally:
        session.close()
