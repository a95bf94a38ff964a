from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.auth import Principal, Role, any_user
from app.config import settings
from app.db import get_db
from app.dependencies import get_client_ip, get_user_agent
from app.errors import InventoryError
from app.models import Principal as PrincipalModel
from app.responses import error_response, failure_response
from app.schemas import ApiResponse, AuthResponse, LoginRequest, PrincipalResponse, RegisterRequest, ok
from app.security.passwords import verify_password
from app.security.sessions import create_web_session, revoke_web_session
from app.services.account_service import find_principal_for_login, register_principal
from app.services.audit_service import AUTH_LOGIN, AUTH_LOGOUT, AUTH_REGISTER, log_audit, record_login_attempt

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/auth', tags=['auth'])

INVALID_LOGIN = 'Invalid username or password'


def _session_response(
    db: Session,
    request: Request,
    principal: PrincipalModel,
    *,
    message: str,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    token, expires_at = create_web_session(db, principal.id, ip=get_client_ip(request), user_agent=get_user_agent(request))
    payload = AuthResponse(
        token=token,
        username=principal.username,
        email=principal.email,
        role=principal.role,
        expires_at=expires_at,
    )
    response = JSONResponse(
        status_code=status_code,
        content=ok(payload, message).model_dump(by_alias=True, mode='json'),
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_ttl_minutes * 60,
    )
    return response


@router.post('/register', response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    caller = getattr(request.state, 'principal', None)
    try:
        principal = register_principal(
            db,
            payload,
            allow_role_override=caller is not None and caller.role == Role.ADMIN,
        )
    except InventoryError as exc:
        return error_response(exc, store_message='Registration failed')

    log_audit(
        db,
        actor_principal_id=principal.id,
        action=AUTH_REGISTER,
        ip=get_client_ip(request),
        metadata={'username': principal.username, 'role': principal.role.value},
    )
    response = _session_response(
        db,
        request,
        principal,
        message='Registration successful',
        status_code=status.HTTP_201_CREATED,
    )
    db.commit()
    return response


@router.post('/login', response_model=ApiResponse[AuthResponse])
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    login_name = payload.username_or_email.strip()
    ip = get_client_ip(request)
    user_agent = get_user_agent(request)

    principal = find_principal_for_login(db, login_name)
    failure_reason = None
    if not principal:
        failure_reason = 'UNKNOWN_USERNAME'
    elif not principal.active:
        failure_reason = 'INACTIVE_PRINCIPAL'
    elif not verify_password(payload.password, principal.password_hash):
        failure_reason = 'BAD_PASSWORD'

    if failure_reason:
        logger.warning('Login rejected for %s: %s', login_name, failure_reason)
        record_login_attempt(
            db,
            attempted_username=login_name,
            failure_reason=failure_reason,
            principal_id=principal.id if principal else None,
            ip=ip,
            user_agent=user_agent,
        )
        db.commit()
        return failure_response(status.HTTP_401_UNAUTHORIZED, INVALID_LOGIN)

    record_login_attempt(db, attempted_username=login_name, principal_id=principal.id, ip=ip, user_agent=user_agent)
    log_audit(db, actor_principal_id=principal.id, action=AUTH_LOGIN, ip=ip, metadata={'username': principal.username})
    response = _session_response(db, request, principal, message='Login successful')
    db.commit()
    return response


@router.post('/logout', response_model=ApiResponse[bool])
def logout(request: Request, principal: Principal = Depends(any_user), db: Session = Depends(get_db)):
    token = getattr(request.state, 'session_token', None)
    if token:
        revoke_web_session(db, token)
    log_audit(db, actor_principal_id=principal.id, action=AUTH_LOGOUT, ip=get_client_ip(request))
    db.commit()

    response = JSONResponse(content=ok(True, 'Logged out').model_dump(by_alias=True, mode='json'))
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get('/me', response_model=ApiResponse[PrincipalResponse])
def me(principal: Principal = Depends(any_user)):
    return ok(PrincipalResponse(id=principal.id, username=principal.username, role=principal.role))
