from __future__ import annotations

from decimal import Decimal

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base, Category, Product, Supplier


def memory_session_factory() -> sessionmaker:
    # One shared connection so every session sees the same in-memory database.
    engine = create_engine('sqlite://', poolclass=StaticPool, connect_args={'check_same_thread': False})
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def add_category(db: Session, name: str = 'Stationery') -> Category:
    category = Category(name=name)
    db.add(category)
    db.flush()
    return category


def add_supplier(db: Session, name: str = 'Acme Supplies', address: str | None = None) -> Supplier:
    supplier = Supplier(name=name, contact_email=f"{name.split()[0].lower()}@example.com", address=address)
    db.add(supplier)
    db.flush()
    return supplier


def add_product(
    db: Session,
    category: Category,
    *,
    name: str,
    sku: str,
    quantity: int,
    reorder_level: int = 0,
    unit_price: str = '1.00',
    supplier: Supplier | None = None,
) -> Product:
    product = Product(
        name=name,
        sku=sku,
        category_id=category.id,
        supplier_id=supplier.id if supplier else None,
        quantity=quantity,
        reorder_level=reorder_level,
        unit_price=Decimal(unit_price),
    )
    db.add(product)
    db.flush()
    return product


def quantity_of(db: Session, product_id: int) -> int:
    return db.execute(select(Product.quantity).where(Product.id == product_id)).scalar_one()
