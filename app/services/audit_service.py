from __future__ import annotations

from sqlalchemy.orm import Session

from app.models import AuditLog, AuthEvent, Order

ORDER_CREATED = 'ORDER_CREATED'
ORDER_DELETED = 'ORDER_DELETED'
CATALOG_CHANGED = 'CATALOG_CHANGED'
AUTH_LOGIN = 'AUTH_LOGIN'
AUTH_LOGOUT = 'AUTH_LOGOUT'
AUTH_REGISTER = 'AUTH_REGISTER'


def record_login_attempt(
    db: Session,
    *,
    attempted_username: str,
    ip: str | None,
    user_agent: str | None,
    principal_id: int | None = None,
    failure_reason: str | None = None,
) -> None:
    db.add(
        AuthEvent(
            attempted_username=attempted_username,
            success=failure_reason is None,
            failure_reason=failure_reason,
            principal_id=principal_id,
            ip=ip,
            user_agent=user_agent,
        )
    )


def log_audit(
    db: Session,
    *,
    actor_principal_id: int | None,
    action: str,
    ip: str | None = None,
    metadata: dict | None = None,
) -> None:
    db.add(AuditLog(actor_principal_id=actor_principal_id, action=action, ip=ip, meta=metadata or {}))


def log_order_event(db: Session, *, action: str, order: Order, actor_principal_id: int | None) -> None:
    log_audit(
        db,
        actor_principal_id=actor_principal_id,
        action=action,
        metadata={
            'order_id': order.id,
            'order_number': order.order_number,
            'type': order.type.value,
            'total_amount': str(order.total_amount),
            'lines': [{'product_id': item.product_id, 'quantity': item.quantity} for item in order.items],
        },
    )
