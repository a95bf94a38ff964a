from __future__ import annotations

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith('sqlite'):
        return {'connect_args': {'check_same_thread': False}}
    return {'pool_pre_ping': True}


engine = create_engine(settings.database_url_normalized, **_engine_kwargs(settings.database_url_normalized))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def session_factory_for(request: Request) -> sessionmaker:
    return getattr(request.app.state, 'session_factory', SessionLocal)


def get_db(request: Request) -> Iterator[Session]:
    db = session_factory_for(request)()
    try:
        yield db
    finally:
        db.close()
