from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import Principal, admin_only, any_user
from app.db import get_db
from app.errors import InventoryError
from app.responses import error_response
from app.schemas import ApiResponse, CategoryPayload, CategoryResponse, ok
from app.services import catalog_service

router = APIRouter(prefix='/api/categories', tags=['categories'])


@router.get('', response_model=ApiResponse[list[CategoryResponse]])
def list_categories(_: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.list_categories(db))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching categories')


@router.get('/{category_id}', response_model=ApiResponse[CategoryResponse])
def get_category(category_id: int, _: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.get_category(db, category_id))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching category')


@router.post('', response_model=ApiResponse[CategoryResponse], status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryPayload, _: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.create_category(db, payload), 'Category created successfully')
    except InventoryError as exc:
        return error_response(exc, store_message='Error creating category')


@router.put('/{category_id}', response_model=ApiResponse[CategoryResponse])
def update_category(
    category_id: int,
    payload: CategoryPayload,
    _: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    try:
        return ok(catalog_service.update_category(db, category_id, payload), 'Category updated successfully')
    except InventoryError as exc:
        return error_response(exc, store_message='Error updating category')


@router.delete('/{category_id}', response_model=ApiResponse[bool])
def delete_category(category_id: int, _: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        catalog_service.delete_category(db, category_id)
    except InventoryError as exc:
        return error_response(exc, store_message='Error deleting category')
    return ok(True, 'Category deleted successfully')
