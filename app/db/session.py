from __future__ import annotations

from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings


def _engine_kwargs(database_url: str, statement_timeout_ms: int) -> Dict[str, Any]:
    if database_url.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    kwargs = {"pool_pre_ping": True}
    if database_url.startswith("postgresql") and statement_timeout_ms > 0:
        kwargs["connect_args"] = {"options": f"-c statement_timeout={statement_timeout_ms}"}
    return kwargs


settings = get_settings()
engine = create_engine(
    settings.DATABASE_URL,
    **_engine_kwargs(settings.DATABASE_URL, settings.DB_STATEMENT_TIMEOUT_MS),
)
SessionLocal = sessionmaker(bind=engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
