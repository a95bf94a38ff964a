from __future__ import annotations

import unittest
from decimal import Decimal

from app.errors import NotFoundError, ValidationError
from app.schemas import CategoryPayload, ProductPayload, SupplierPayload
from app.services import catalog_service
from tests.db_support import add_category, memory_session_factory


class CatalogServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = memory_session_factory()()
        self.category = add_category(self.db, 'Stationery')
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def _payload(self, **overrides) -> ProductPayload:
        values = {
            'name': 'Printer Paper',
            'sku': ' prp-001 ',
            'category_id': self.category.id,
            'quantity': 10,
            'reorder_level': 3,
            'unit_price': Decimal('4.50'),
        }
        values.update(overrides)
        return ProductPayload(**values)

    def test_sku_is_trimmed_and_upper_cased(self) -> None:
        product = catalog_service.create_product(self.db, self._payload())
        self.assertEqual(product.sku, 'PRP-001')
        self.assertEqual(product.category_name, 'Stationery')

    def test_duplicate_sku_rejected_case_insensitively(self) -> None:
        catalog_service.create_product(self.db, self._payload())
        with self.assertRaises(ValidationError) as ctx:
            catalog_service.create_product(self.db, self._payload(name='Other', sku='Prp-001'))
        self.assertEqual(ctx.exception.message, 'SKU already exists')

    def test_update_may_keep_own_sku(self) -> None:
        product = catalog_service.create_product(self.db, self._payload())
        updated = catalog_service.update_product(self.db, product.id, self._payload(quantity=42))
        self.assertEqual(updated.quantity, 42)
        self.assertEqual(updated.sku, 'PRP-001')

    def test_negative_values_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            catalog_service.create_product(self.db, self._payload(quantity=-1))
        self.assertEqual(ctx.exception.message, 'Quantity and price cannot be negative')

    def test_unknown_category_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            catalog_service.create_product(self.db, self._payload(category_id=999))
        self.assertEqual(ctx.exception.message, 'Category not found')

    def test_product_survives_category_delete_as_unknown(self) -> None:
        product = catalog_service.create_product(self.db, self._payload())
        catalog_service.delete_category(self.db, self.category.id)
        self.assertEqual(catalog_service.get_product(self.db, product.id).category_name, 'Unknown')

    def test_supplier_requires_email(self) -> None:
        with self.assertRaises(ValidationError):
            catalog_service.create_supplier(self.db, SupplierPayload(name='Acme', contact_email='not-an-email'))

    def test_category_crud(self) -> None:
        created = catalog_service.create_category(self.db, CategoryPayload(name=' Furniture '))
        self.assertEqual(created.name, 'Furniture')
        catalog_service.delete_category(self.db, created.id)
        with self.assertRaises(NotFoundError):
            catalog_service.get_category(self.db, created.id)


if __name__ == '__main__':
    unittest.main()
