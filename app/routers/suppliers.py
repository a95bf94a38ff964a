from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import Principal, admin_only, any_user
from app.db import get_db
from app.errors import InventoryError
from app.responses import error_response
from app.schemas import ApiResponse, SupplierPayload, SupplierResponse, ok
from app.services import catalog_service

router = APIRouter(prefix='/api/suppliers', tags=['suppliers'])


@router.get('', response_model=ApiResponse[list[SupplierResponse]])
def list_suppliers(_: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.list_suppliers(db))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching suppliers')


@router.get('/{supplier_id}', response_model=ApiResponse[SupplierResponse])
def get_supplier(supplier_id: int, _: Principal = Depends(any_user), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.get_supplier(db, supplier_id))
    except InventoryError as exc:
        return error_response(exc, store_message='Error fetching supplier')


@router.post('', response_model=ApiResponse[SupplierResponse], status_code=status.HTTP_201_CREATED)
def create_supplier(payload: SupplierPayload, _: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        return ok(catalog_service.create_supplier(db, payload), 'Supplier created successfully')
    except InventoryError as exc:
        return error_response(exc, store_message='Error creating supplier')


@router.put('/{supplier_id}', response_model=ApiResponse[SupplierResponse])
def update_supplier(
    supplier_id: int,
    payload: SupplierPayload,
    _: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    try:
        return ok(catalog_service.update_supplier(db, supplier_id, payload), 'Supplier updated successfully')
    except InventoryError as exc:
        return error_response(exc, store_message='Error updating supplier')


@router.delete('/{supplier_id}', response_model=ApiResponse[bool])
def delete_supplier(supplier_id: int, _: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        catalog_service.delete_supplier(db, supplier_id)
    except InventoryError as exc:
        return error_response(exc, store_message='Error deleting supplier')
    return ok(True, 'Supplier deleted successfully')
