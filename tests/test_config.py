from __future__ import annotations

import unittest

from app.config import Settings


class SettingsTests(unittest.TestCase):
    def test_postgres_urls_use_psycopg_driver(self) -> None:
        self.assertEqual(
            Settings(database_url='postgres://u:p@db/inventory').database_url_normalized,
            'postgresql+psycopg://u:p@db/inventory',
        )
        self.assertEqual(Settings(database_url='sqlite:///./local.db').database_url_normalized, 'sqlite:///./local.db')

    def test_only_settings_the_app_reads_are_declared(self) -> None:
        self.assertNotIn('app_secret_key', Settings.model_fields)
        self.assertEqual(Settings().session_cookie_name, 'inventory_session')
