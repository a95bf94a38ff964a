from decimal import Decimal

from sqlalchemy import select

from app.db import SessionLocal
from app.models import Category, Principal, PrincipalRole, Product, Supplier
from app.security.passwords import hash_password


CATEGORIES = [
    ('Stationery', 'Paper, pens and desk supplies'),
    ('Electronics', 'Peripherals and accessories'),
    ('Furniture', 'Office seating and desks'),
]

SUPPLIERS = [
    ('Acme Supplies', 'orders@acme.example', '555-0100', '12 Market Street, Springfield, USA'),
    ('TechSource', 'sales@techsource.example', '555-0142', '88 Harbour Road, Leeds, UK'),
]

PRODUCTS = [
    ('Printer Paper A4', 'PRP-001', 'Stationery', 'Acme Supplies', 120, 30, Decimal('4.50')),
    ('Office Chair', 'OFF-CHA', 'Furniture', 'Acme Supplies', 8, 10, Decimal('89.00')),
    ('Wireless Mouse', 'TEC-MSE', 'Electronics', 'TechSource', 0, 15, Decimal('19.99')),
]


def _ensure_principal(db, username: str, email: str, password: str, role: PrincipalRole) -> None:
    existing = db.execute(select(Principal).where(Principal.username == username)).scalar_one_or_none()
    if existing:
        return
    db.add(
        Principal(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=role,
            active=True,
        )
    )


def seed() -> None:
    with SessionLocal() as db:
        categories = {}
        for name, description in CATEGORIES:
            category = db.execute(select(Category).where(Category.name == name)).scalar_one_or_none()
            if not category:
                category = Category(name=name, description=description)
                db.add(category)
                db.flush()
            categories[name] = category

        suppliers = {}
        for name, email, phone, address in SUPPLIERS:
            supplier = db.execute(select(Supplier).where(Supplier.name == name)).scalar_one_or_none()
            if not supplier:
                supplier = Supplier(name=name, contact_email=email, phone=phone, address=address)
                db.add(supplier)
                db.flush()
            suppliers[name] = supplier

        for name, sku, category_name, supplier_name, quantity, reorder_level, unit_price in PRODUCTS:
            if db.execute(select(Product).where(Product.sku == sku)).scalar_one_or_none():
                continue
            db.add(
                Product(
                    name=name,
                    sku=sku,
                    category_id=categories[category_name].id,
                    supplier_id=suppliers[supplier_name].id,
                    quantity=quantity,
                    reorder_level=reorder_level,
                    unit_price=unit_price,
                )
            )

        _ensure_principal(db, 'admin', 'admin@inventory.example', 'admin123', PrincipalRole.ADMIN)
        _ensure_principal(db, 'staff', 'staff@inventory.example', 'staff123', PrincipalRole.STAFF)

        db.commit()


if __name__ == '__main__':
    seed()
