from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth import Principal, Role
from app.config import settings
from app.db import session_factory_for
from app.models import Principal as PrincipalModel
from app.models import WebSession


BEARER_PREFIX = 'bearer '


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def session_expiry() -> datetime:
    return _now() + timedelta(minutes=settings.session_ttl_minutes)


def create_web_session(db: Session, principal_id: int, ip: str | None, user_agent: str | None) -> tuple[str, datetime]:
    token = secrets.token_urlsafe(48)
    expires_at = session_expiry()
    web_session = WebSession(
        session_token=token,
        principal_id=principal_id,
        ip=ip,
        user_agent=user_agent,
        expires_at=expires_at,
    )
    db.add(web_session)
    db.flush()
    return token, expires_at


def revoke_web_session(db: Session, token: str) -> None:
    session = db.execute(select(WebSession).where(WebSession.session_token == token)).scalar_one_or_none()
    if not session or session.revoked_at is not None:
        return
    session.revoked_at = _now()


def load_principal_from_token(db: Session, token: str | None) -> Principal | None:
    if not token:
        return None

    row = db.execute(
        select(WebSession, PrincipalModel)
        .join(PrincipalModel, PrincipalModel.id == WebSession.principal_id)
        .where(WebSession.session_token == token)
    ).one_or_none()
    if not row:
        return None

    web_session, principal = row
    now = _now()
    if web_session.revoked_at is not None or _as_utc(web_session.expires_at) <= now:
        return None

    web_session.last_seen_at = now
    web_session.expires_at = session_expiry()
    return Principal(
        id=principal.id,
        username=principal.username,
        role=Role(principal.role),
        active=principal.active,
    )


def token_from_request(request: Request) -> str | None:
    authorization = request.headers.get('authorization', '')
    if authorization.lower().startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX) :].strip() or None
    return request.cookies.get(settings.session_cookie_name)


def install_auth_session_middleware(app: FastAPI) -> None:
    @app.middleware('http')
    async def auth_session_middleware(request: Request, call_next):
        token = token_from_request(request)
        request.state.session_token = token
        if token:
            with session_factory_for(request)() as db:
                request.state.principal = load_principal_from_token(db, token)
                db.commit()
        else:
            request.state.principal = None
        return await call_next(request)
