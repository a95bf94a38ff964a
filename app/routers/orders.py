from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import Principal, admin_only, any_user, order_writer
from app.db import get_db
from app.errors import InventoryError
from app.responses import error_response
from app.schemas import ApiResponse, OrderCreateRequest, OrderResponse, ok
from app.services.order_service import create_order, delete_order, get_order, list_orders

router = APIRouter(prefix='/api/orders', tags=['orders'])


@router.get('', response_model=ApiResponse[list[OrderResponse]])
def list_orders_endpoint(_: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(list_orders(db))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching orders')


@router.get('/{order_id}', response_model=ApiResponse[OrderResponse])
def get_order_endpoint(order_id: int, _: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(get_order(db, order_id))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching order')


@router.post('', response_model=ApiResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
def create_order_endpoint(
    payload: OrderCreateRequest,
    principal: Principal = Depends(order_writer),
    db: Session = Depends(get_db),
):
    try:
        order = create_order(db, payload, actor_principal_id=principal.id)
    except InventoryError as exc:
        return error_response(exc, store_message='Error creating order')
    return ok(order, 'Order created successfully')


@router.delete('/{order_id}', response_model=ApiResponse[bool])
def delete_order_endpoint(order_id: int, principal: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        delete_order(db, order_id, actor_principal_id=principal.id)
    except InventoryError as exc:
        return error_response(exc, store_message='Error deleting order')
    return ok(True, 'Order deleted successfully')
