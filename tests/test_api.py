from __future__ import annotations

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.config import settings
from app.db import SessionLocal
from app.main import app
from app.models import Principal, PrincipalRole
from app.security.passwords import hash_password
from tests.db_support import add_category, add_product, add_supplier, memory_session_factory, quantity_of


class InventoryApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = memory_session_factory()
        app.state.session_factory = self.session_factory
        with self.session_factory() as db:
            for username, role in (('admin', PrincipalRole.ADMIN), ('staff', PrincipalRole.STAFF)):
                db.add(
                    Principal(
                        username=username,
                        email=f'{username}@example.com',
                        password_hash=hash_password(f'{username}-pass'),
                        role=role,
                        active=True,
                    )
                )
            category = add_category(db)
            self.supplier_id = add_supplier(db, 'Acme Supplies', address='1 Road, Springfield, USA').id
            self.paper_id = add_product(db, category, name='Paper', sku='PRP-001', quantity=10, reorder_level=3).id
            db.commit()
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.client.close()
        app.state.session_factory = SessionLocal

    def _login(self, username: str) -> dict[str, str]:
        response = self.client.post(
            '/api/auth/login',
            json={'usernameOrEmail': username, 'password': f'{username}-pass'},
        )
        self.assertEqual(response.status_code, 200, response.text)
        # Rely on the bearer header only, so anonymous calls stay anonymous.
        self.client.cookies.clear()
        return {'Authorization': f"Bearer {response.json()['data']['token']}"}

    def _sale(self, quantity: int) -> dict:
        return {
            'type': 'Sales',
            'customerName': 'Jane Doe',
            'items': [{'productId': self.paper_id, 'quantity': quantity, 'unitPrice': 4.5}],
        }

    def _stock(self) -> int:
        with self.session_factory() as db:
            return quantity_of(db, self.paper_id)

    def test_health(self) -> None:
        self.assertEqual(self.client.get('/health').json()['ok'], True)

    def test_startup_creates_tables_only_when_enabled(self) -> None:
        with patch('app.main.Base') as base_mock:
            create_all = base_mock.metadata.create_all
            with patch.object(settings, 'create_tables_on_startup', False):
                with TestClient(app):
                    pass
            create_all.assert_not_called()

            with patch.object(settings, 'create_tables_on_startup', True):
                with TestClient(app):
                    pass
            create_all.assert_called_once()

    def test_anonymous_requests_are_rejected_with_wrapper(self) -> None:
        response = self.client.get('/api/orders')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'success': False, 'message': 'Authentication required', 'data': None})

    def test_bad_login_is_unauthorized(self) -> None:
        response = self.client.post('/api/auth/login', json={'usernameOrEmail': 'admin', 'password': 'wrong-pass'})
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_staff_creates_order_and_admin_deletes_it(self) -> None:
        staff = self._login('staff')
        created = self.client.post('/api/orders', json=self._sale(2), headers=staff)
        self.assertEqual(created.status_code, 201, created.text)
        body = created.json()
        self.assertTrue(body['success'])
        self.assertTrue(body['data']['orderNumber'].startswith('SO-'))
        self.assertEqual(body['data']['totalAmount'], 9.0)
        self.assertEqual(self._stock(), 8)

        order_id = body['data']['id']
        forbidden = self.client.delete(f'/api/orders/{order_id}', headers=staff)
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(self._stock(), 8)

        deleted = self.client.delete(f'/api/orders/{order_id}', headers=self._login('admin'))
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(deleted.json()['data'], True)
        self.assertEqual(self._stock(), 10)

    def test_oversell_returns_bad_request(self) -> None:
        response = self.client.post('/api/orders', json=self._sale(11), headers=self._login('staff'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Insufficient stock for Paper')
        self.assertEqual(self._stock(), 10)

    def test_malformed_order_returns_bad_request(self) -> None:
        response = self.client.post('/api/orders', json={'items': []}, headers=self._login('staff'))
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_sub_cent_unit_price_is_bad_request(self) -> None:
        payload = self._sale(3)
        payload['items'][0]['unitPrice'] = '0.333'
        response = self.client.post('/api/orders', json=payload, headers=self._login('staff'))
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])
        self.assertEqual(self._stock(), 10)

    def test_purchase_order_for_unknown_supplier(self) -> None:
        payload = {
            'type': 'Purchase',
            'supplierId': 999,
            'items': [{'productId': self.paper_id, 'quantity': 1, 'unitPrice': 1}],
        }
        response = self.client.post('/api/orders', json=payload, headers=self._login('admin'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Supplier not found')

    def test_missing_order_is_not_found(self) -> None:
        response = self.client.get('/api/orders/4242', headers=self._login('staff'))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['message'], 'Order not found')

    def test_catalog_writes_require_admin(self) -> None:
        payload = {'name': 'Stapler', 'sku': 'stp-01', 'categoryId': 1, 'quantity': 4, 'unitPrice': 7}
        self.assertEqual(self.client.post('/api/products', json=payload, headers=self._login('staff')).status_code, 403)

        created = self.client.post('/api/products', json=payload, headers=self._login('admin'))
        self.assertEqual(created.status_code, 201, created.text)
        self.assertEqual(created.json()['data']['sku'], 'STP-01')

    def test_dashboard_summary(self) -> None:
        staff = self._login('staff')
        self.client.post('/api/orders', json=self._sale(7), headers=staff)

        response = self.client.get('/api/dashboard', headers=staff)
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()['data']
        self.assertEqual(data['totalProducts'], 1)
        self.assertEqual(data['totalOrders'], 1)
        self.assertEqual(data['lowStockCount'], 1)
        self.assertEqual(data['lowStockProducts'][0]['sku'], 'PRP-001')
        self.assertEqual(len(data['monthlyTrend']), 6)
        self.assertEqual(data['salesValue'], 31.5)

        regions = self.client.get('/api/dashboard/suppliers/regions', headers=staff).json()['data']
        self.assertEqual(regions, [{'name': 'USA', 'count': 1}])

    def test_self_registration_always_gets_staff_role(self) -> None:
        response = self.client.post(
            '/api/auth/register',
            json={'username': 'newbie', 'email': 'newbie@example.com', 'password': 'secret1', 'role': 'ADMIN'},
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json()['data']['role'], 'STAFF')

        duplicate = self.client.post(
            '/api/auth/register',
            json={'username': 'other', 'email': 'newbie@example.com', 'password': 'secret1'},
        )
        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.json()['message'], 'Email already registered')

    def test_me_and_logout(self) -> None:
        headers = self._login('admin')
        me = self.client.get('/api/auth/me', headers=headers)
        self.assertEqual(me.json()['data']['role'], 'ADMIN')

        self.assertEqual(self.client.post('/api/auth/logout', headers=headers).status_code, 200)
        self.assertEqual(self.client.get('/api/auth/me', headers=headers).status_code, 401)


if __name__ == '__main__':
    unittest.main()
