from unittest.mock import MagicMock

import psycopg2
import pytest

from spend_categorizer.core.categories import Category
from spend_categorizer.core.category_cache import CategoryCache
from spend_categorizer.core.errors import CacheTransportError
from spend_categorizer.storage.remote_cache import RemoteCategoryStore


@pytest.fixture
def connection():
    conn = MagicMock()
    conn.cursor.return_value.fetchone.return_value = None
    return conn


@pytest.fixture
def store(connection) -> RemoteCategoryStore:
    return RemoteCategoryStore(connection_factory=lambda: connection)


class TestRemoteGet:

    def test_returns_stored_category(self, store, connection):
        connection.cursor.return_value.fetchone.return_value = ("Utilities",)

        assert store.get("XYZ CORP 123") == "Utilities"

        sql, params = connection.cursor.return_value.execute.call_args.args
        assert "FROM category_transaction" in sql
        assert params == ("XYZ CORP 123",)
        connection.close.assert_called_once()

    def test_not_found(self, store):
        assert store.get("NOBODY") is None

    def test_query_failure_raises_transport_error(self, store, connection):
        connection.cursor.return_value.execute.side_effect = psycopg2.OperationalError("server closed")

        with pytest.raises(CacheTransportError):
            store.get("TESCO")

        connection.close.assert_called_once()

    def test_connect_failure_raises_transport_error(self):
        def refuse():
            raise psycopg2.OperationalError("connection refused")

        store = RemoteCategoryStore(connection_factory=refuse)

        with pytest.raises(CacheTransportError):
            store.get("TESCO")


    def test_bad_port_setting_raises_transport_error(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("DB_HOST", "localhost")
        monkeypatch.setenv("DB_PORT", "abc")

        with pytest.raises(CacheTransportError):
            RemoteCategoryStore().get("ACME")

    def test_bad_port_setting_falls_back_to_local(self, monkeypatch, local_cache):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("DB_HOST", "localhost")
        monkeypatch.setenv("DB_PORT", "abc")
        cache = CategoryCache(local=local_cache, remote=RemoteCategoryStore())
        local_cache.put("ACME", Category.SHOPPING)

        assert cache.get("ACME") is Category.SHOPPING
        cache.put("NETFLIX", Category.ENTERTAINMENT)
        assert local_cache.get("NETFLIX") is Category.ENTERTAINMENT


class TestRemotePut:

    def test_factory_failure_raises_transport_error(self):
        def broken():
            raise ValueError("invalid literal for int()")

        with pytest.raises(CacheTransportError):
            RemoteCategoryStore(connection_factory=broken).put("NETFLIX", "Entertainment")

    def test_upserts_on_transaction_name(self, store, connection):
        store.put("NETFLIX", "Entertainment")

        sql, params = connection.cursor.return_value.execute.call_args.args
        assert "ON CONFLICT (transaction_name) DO UPDATE" in sql
        assert params == ("NETFLIX", "Entertainment")
        connection.commit.assert_called_once()
        connection.close.assert_called_once()

    def test_failed_write_rolls_back(self, store, connection):
        connection.cursor.return_value.execute.side_effect = psycopg2.IntegrityError("boom")

        with pytest.raises(CacheTransportError):
            store.put("NETFLIX", "Entertainment")

        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()
