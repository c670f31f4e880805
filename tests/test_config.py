import os
import unittest
from unittest.mock import patch

from sqlalchemy.engine import make_url

from rolltheworld.config import DEFAULT_POPULATION, Settings
from rolltheworld.db.store import DrawStore
from rolltheworld.errors import ConfigurationError


class SettingsFromEnvTests(unittest.TestCase):
    def _from_env(self, **env):
        with patch.dict(os.environ, env, clear=True), patch("rolltheworld.config.load_dotenv"):
            return Settings.from_env()

    def test_defaults(self):
        settings = self._from_env()
        self.assertIsNone(settings.database_url)
        self.assertIsNone(settings.auth_token)
        self.assertEqual(settings.population_today, DEFAULT_POPULATION)
        self.assertTrue(settings.local_cache_url.startswith("sqlite:///"))
        self.assertEqual(settings.store_timeout, 10.0)

    def test_reads_values(self):
        settings = self._from_env(
            DB_URL="postgresql+psycopg://roller@db.example.com/rolls/",
            DB_AUTH_TOKEN="tok",
            WORLD_POPULATION_TODAY="1234",
            DB_TIMEOUT_SECONDS="2.5",
        )
        self.assertEqual(settings.database_url, "postgresql+psycopg://roller@db.example.com/rolls")
        self.assertEqual(settings.auth_token, "tok")
        self.assertEqual(settings.population_today, 1234)
        self.assertEqual(settings.store_timeout, 2.5)

    def test_invalid_population_falls_back(self):
        for raw in ("abc", "0", "-5", "inf", "1e400", "8.1e9"):
            with self.assertLogs("rolltheworld.config", level="WARNING"):
                settings = self._from_env(WORLD_POPULATION_TODAY=raw)
            self.assertEqual(settings.population_today, DEFAULT_POPULATION)

    def test_large_population_is_exact(self):
        settings = self._from_env(WORLD_POPULATION_TODAY="9007199254740993")
        self.assertEqual(settings.population_today, 9007199254740993)

    def test_non_positive_population_rejected_directly(self):
        with self.assertRaises(ValueError):
            Settings(population_today=0)


class StoreUrlTests(unittest.TestCase):
    def test_missing_endpoint(self):
        with self.assertRaises(ConfigurationError):
            Settings().store_url()

    def test_missing_credential_for_remote_store(self):
        with self.assertRaises(ConfigurationError):
            Settings(database_url="postgresql+psycopg://roller@db.example.com/rolls").store_url()

    def test_credential_is_applied(self):
        url = Settings(
            database_url="postgresql+psycopg://roller@db.example.com/rolls",
            auth_token="s3cret",
        ).store_url()
        self.assertEqual(make_url(url).password, "s3cret")

    def test_sqlite_needs_no_credential(self):
        self.assertEqual(Settings(database_url="sqlite:///:memory:").store_url(), "sqlite:///:memory:")

    def test_unparseable_endpoint(self):
        with self.assertRaises(ConfigurationError):
            Settings(database_url="not a url").store_url()

    def test_store_reports_missing_endpoint_lazily(self):
        store = DrawStore(Settings())
        with self.assertRaises(ConfigurationError):
            store.ensure_schema()
        self.assertFalse(store.schema.initialized)


if __name__ == "__main__":
    unittest.main()
