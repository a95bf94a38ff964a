from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.errors import StoreError, ValidationError
from app.models import Principal, PrincipalRole
from app.schemas import RegisterRequest
from app.security.passwords import hash_password
from app.store import EntityStore

logger = logging.getLogger(__name__)


def find_principal_for_login(db: Session, username_or_email: str) -> Principal | None:
    login = username_or_email.strip()
    return db.execute(
        select(Principal).where(
            or_(func.lower(Principal.username) == login.lower(), Principal.email == login.lower())
        )
    ).scalar_one_or_none()


def register_principal(db: Session, request: RegisterRequest, *, allow_role_override: bool = False) -> Principal:
    username = request.username.strip()
    email = request.email.strip().lower()
    if not email or '@' not in email:
        raise ValidationError('Invalid email format')

    store = EntityStore(db)
    if store.exists(Principal, Principal.email == email):
        logger.warning('Registration rejected, email already registered: %s', email)
        raise ValidationError('Email already registered')
    if store.exists(Principal, func.lower(Principal.username) == username.lower()):
        logger.warning('Registration rejected, username taken: %s', username)
        raise ValidationError('Username already taken')

    principal = Principal(
        username=username,
        email=email,
        password_hash=hash_password(request.password),
        role=request.role if allow_role_override and request.role else PrincipalRole.STAFF,
        active=True,
    )
    try:
        store.insert_one(principal)
    except StoreError as exc:
        store.rollback()
        raise ValidationError('User already exists') from exc
    logger.info('Principal registered: %s (%s)', username, principal.role.value)
    return principal
