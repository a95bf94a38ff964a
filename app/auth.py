from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status

from app.models import PrincipalRole as Role


@dataclass(frozen=True)
class Principal:
    id: int
    username: str
    role: Role
    active: bool


def get_current_principal(request: Request) -> Principal:
    principal = getattr(request.state, 'principal', None)
    if not principal:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Authentication required')
    if not principal.active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Account is disabled')
    return principal


def require_role(*allowed: Role):
    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Insufficient role')
        return principal

    return _dep


any_user = get_current_principal
order_writer = require_role(Role.ADMIN, Role.STAFF)
admin_only = require_role(Role.ADMIN)
