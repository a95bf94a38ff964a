from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import Principal, admin_only, any_user
from app.db import get_db
from app.errors import InventoryError
from app.responses import error_response
from app.schemas import ApiResponse, ProductPayload, ProductResponse, ok
from app.services import catalog_service

router = APIRouter(prefix='/api/products', tags=['products'])


@router.get('', response_model=ApiResponse[list[ProductResponse]])
def list_products(_: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.list_products(db))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching products')


@router.get('/{product_id}', response_model=ApiResponse[ProductResponse])
def get_product(product_id: int, _: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.get_product(db, product_id))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching product')


@router.post('', response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductPayload, _: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.create_product(db, payload), 'Product created successfully')
    except InventoryError as exc:
        return error_response(exc, store_message='Error creating product')


@router.put('/{product_id}', response_model=ApiResponse[ProductResponse])
def update_product(
    product_id: int,
    payload: ProductPayload,
    _: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    try:
        return ok(catalog_service.update_product(db, product_id, payload), 'Product updated successfully')
    except InventoryError as exc:
        return error_response(exc, store_message='Error updating product')


@router.delete('/{product_id}', response_model=ApiResponse[bool])
def delete_product(product_id: int, _: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        catalog_service.delete_product(db, product_id)
    except InventoryError as exc:
        return error_response(exc, store_message='Error deleting product')
    return ok(True, 'Product deleted successfully')
