from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.errors import NotFoundError, StoreError, ValidationError
from app.models import Category, Product, Supplier
from app.schemas import (
    CategoryPayload,
    CategoryResponse,
    ProductPayload,
    ProductResponse,
    SupplierPayload,
    SupplierResponse,
)
from app.store import EntityStore

logger = logging.getLogger(__name__)


def normalize_sku(raw: str | None) -> str:
    return (raw or '').strip().upper()


def _clean(value: str | None) -> str | None:
    cleaned = (value or '').strip()
    return cleaned or None


def _committed(store: EntityStore) -> None:
    try:
        store.commit()
    except StoreError:
        store.rollback()
        raise


# Categories


def list_categories(db: Session) -> list[CategoryResponse]:
    rows = EntityStore(db).find(Category, order_by=Category.name.asc())
    return [CategoryResponse.model_validate(row) for row in rows]


def _category_or_404(store: EntityStore, category_id: int) -> Category:
    category = store.find_one(Category, Category.id == category_id)
    if category is None:
        raise NotFoundError('Category not found')
    return category


def get_category(db: Session, category_id: int) -> CategoryResponse:
    return CategoryResponse.model_validate(_category_or_404(EntityStore(db), category_id))


def create_category(db: Session, payload: CategoryPayload) -> CategoryResponse:
    name = _clean(payload.name)
    if not name:
        raise ValidationError('Category name is required')
    store = EntityStore(db)
    category = store.insert_one(Category(name=name, description=_clean(payload.description)))
    _committed(store)
    logger.info('Category created: %s', name)
    return CategoryResponse.model_validate(category)


def update_category(db: Session, category_id: int, payload: CategoryPayload) -> CategoryResponse:
    name = _clean(payload.name)
    if not name:
        raise ValidationError('Category name is required')
    store = EntityStore(db)
    category = _category_or_404(store, category_id)
    category.name = name
    category.description = _clean(payload.description)
    _committed(store)
    return CategoryResponse.model_validate(category)


def delete_category(db: Session, category_id: int) -> None:
    store = EntityStore(db)
    if store.delete_one(Category, Category.id == category_id) == 0:
        raise NotFoundError('Category not found')
    _committed(store)
    logger.info('Category deleted: %s', category_id)


# Suppliers


def list_suppliers(db: Session) -> list[SupplierResponse]:
    rows = EntityStore(db).find(Supplier, order_by=Supplier.name.asc())
    return [SupplierResponse.model_validate(row) for row in rows]


def _supplier_or_404(store: EntityStore, supplier_id: int) -> Supplier:
    supplier = store.find_one(Supplier, Supplier.id == supplier_id)
    if supplier is None:
        raise NotFoundError('Supplier not found')
    return supplier


def get_supplier(db: Session, supplier_id: int) -> SupplierResponse:
    return SupplierResponse.model_validate(_supplier_or_404(EntityStore(db), supplier_id))


def _validated_supplier_fields(payload: SupplierPayload) -> dict:
    name = _clean(payload.name)
    email = (payload.contact_email or '').strip().lower()
    if not name:
        raise ValidationError('Supplier name is required')
    if not email or '@' not in email:
        raise ValidationError('A valid contact email is required')
    return {
        'name': name,
        'contact_email': email,
        'phone': _clean(payload.phone),
        'address': _clean(payload.address),
    }


def create_supplier(db: Session, payload: SupplierPayload) -> SupplierResponse:
    store = EntityStore(db)
    supplier = store.insert_one(Supplier(**_validated_supplier_fields(payload)))
    _committed(store)
    logger.info('Supplier created: %s', supplier.name)
    return SupplierResponse.model_validate(supplier)


def update_supplier(db: Session, supplier_id: int, payload: SupplierPayload) -> SupplierResponse:
    fields = _validated_supplier_fields(payload)
    store = EntityStore(db)
    supplier = _supplier_or_404(store, supplier_id)
    for key, value in fields.items():
        setattr(supplier, key, value)
    _committed(store)
    return SupplierResponse.model_validate(supplier)


def delete_supplier(db: Session, supplier_id: int) -> None:
    store = EntityStore(db)
    if store.delete_one(Supplier, Supplier.id == supplier_id) == 0:
        raise NotFoundError('Supplier not found')
    _committed(store)
    logger.info('Supplier deleted: %s', supplier_id)


# Products


def _product_response(store: EntityStore, product: Product) -> ProductResponse:
    category = store.find_one(Category, Category.id == product.category_id)
    supplier = (
        store.find_one(Supplier, Supplier.id == product.supplier_id) if product.supplier_id is not None else None
    )
    return ProductResponse(
        id=product.id,
        name=product.name,
        sku=product.sku,
        category_id=product.category_id,
        category_name=category.name if category else 'Unknown',
        supplier_id=product.supplier_id,
        supplier_name=supplier.name if supplier else None,
        quantity=product.quantity,
        reorder_level=product.reorder_level,
        unit_price=product.unit_price,
        created_at=product.created_at,
    )


def _validated_product_fields(store: EntityStore, payload: ProductPayload, *, product_id: int | None = None) -> dict:
    name = _clean(payload.name)
    sku = normalize_sku(payload.sku)
    if not name:
        raise ValidationError('Product name is required')
    if not sku:
        raise ValidationError('SKU is required')
    if payload.quantity < 0 or payload.unit_price < 0:
        raise ValidationError('Quantity and price cannot be negative')
    if payload.reorder_level < 0:
        raise ValidationError('Reorder level cannot be negative')

    sku_taken = (
        store.exists(Product, Product.sku == sku, Product.id != product_id)
        if product_id is not None
        else store.exists(Product, Product.sku == sku)
    )
    if sku_taken:
        raise ValidationError('SKU already exists')
    if not store.exists(Category, Category.id == payload.category_id):
        raise ValidationError('Category not found')
    if payload.supplier_id is not None and not store.exists(Supplier, Supplier.id == payload.supplier_id):
        raise ValidationError('Supplier not found')

    return {
        'name': name,
        'sku': sku,
        'category_id': payload.category_id,
        'supplier_id': payload.supplier_id,
        'quantity': payload.quantity,
        'reorder_level': payload.reorder_level,
        'unit_price': Decimal(payload.unit_price),
    }


def list_products(db: Session) -> list[ProductResponse]:
    store = EntityStore(db)
    return [_product_response(store, product) for product in store.find(Product, order_by=Product.name.asc())]


def get_product(db: Session, product_id: int) -> ProductResponse:
    store = EntityStore(db)
    product = store.find_one(Product, Product.id == product_id)
    if product is None:
        raise NotFoundError('Product not found')
    return _product_response(store, product)


def create_product(db: Session, payload: ProductPayload) -> ProductResponse:
    store = EntityStore(db)
    product = store.insert_one(Product(**_validated_product_fields(store, payload)))
    _committed(store)
    logger.info('Product created: %s (%s)', product.name, product.sku)
    return _product_response(store, product)


def update_product(db: Session, product_id: int, payload: ProductPayload) -> ProductResponse:
    store = EntityStore(db)
    if not store.exists(Product, Product.id == product_id):
        raise NotFoundError('Product not found')
    fields = _validated_product_fields(store, payload, product_id=product_id)
    store.update_one(Product, Product.id == product_id, values=fields)
    _committed(store)
    logger.info('Product updated: %s', product_id)
    return get_product(db, product_id)


def delete_product(db: Session, product_id: int) -> None:
    store = EntityStore(db)
    if store.delete_one(Product, Product.id == product_id) == 0:
        raise NotFoundError('Product not found')
    _committed(store)
    logger.info('Product deleted: %s', product_id)
