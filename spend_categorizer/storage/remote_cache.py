"""
Remote category store (PostgreSQL)

Durable tier of the category cache. One row per normalized transaction name
in `category_transaction`; writes are upserts that overwrite the category.
"""
import logging
from typing import Callable, Optional

import psycopg2

from ..core.errors import CacheTransportError
from ..utils.db_connection import get_db_connection

logger = logging.getLogger(__name__)


SELECT_CATEGORY_SQL = """
    SELECT category
    FROM category_transaction
    WHERE transaction_name = %s
"""

UPSERT_CATEGORY_SQL = """
    INSERT INTO category_transaction (transaction_name, category, usage_count)
    VALUES (%s, %s, 1)
    ON CONFLICT (transaction_name) DO UPDATE
    SET category = EXCLUDED.category,
        usage_count = category_transaction.usage_count + 1
"""


class RemoteCategoryStore:
    """
    Reads and upserts category mappings in PostgreSQL

    A fresh connection is opened per call so the store can be shared between
    the lookup and write-back threads.
    """

    def __init__(self,
                 dsn: Optional[str] = None,
                 port: Optional[int] = None,
                 connect_timeout: int = 5,
                 connection_factory: Optional[Callable] = None):
        """
        Args:
            dsn: libpq connection string (falls back to DATABASE_URL / DB_* env vars)
            port: Server port (falls back to DB_PORT)
            connect_timeout: Seconds to wait for the server
            connection_factory: Zero-argument callable returning a DB-API
                connection; overrides dsn (used by tests)
        """
        self.dsn = dsn
        self.port = port
        self.connect_timeout = connect_timeout
        self._connection_factory = connection_factory or self._connect

    def _connect(self):
        return get_db_connection(self.dsn, port=self.port, connect_timeout=self.connect_timeout)

    def get(self, key: str) -> Optional[str]:
        """
        Look up the stored category for a normalized key

        Returns:
            The stored category name, or None if there is no row

        Raises:
            CacheTransportError: if the database cannot be reached or the query fails
        """
        try:
            conn = self._connection_factory()
        except Exception as e:  # bad connection settings land here too
            raise CacheTransportError(f"Could not connect to remote category store: {e}") from e

        try:
            cursor = conn.cursor()
            try:
                cursor.execute(SELECT_CATEGORY_SQL, (key,))
                row = cursor.fetchone()
            finally:
                cursor.close()
        except psycopg2.Error as e:
            raise CacheTransportError(f"Remote lookup failed for {key!r}: {e}") from e
        finally:
            conn.close()

        return row[0] if row else None

    def put(self, key: str, category: str):
        """
        Upsert the category for a normalized key

        Raises:
            CacheTransportError: if the database cannot be reached or the write fails
        """
        try:
            conn = self._connection_factory()
        except Exception as e:
            raise CacheTransportError(f"Could not connect to remote category store: {e}") from e

        try:
            cursor = conn.cursor()
            try:
                cursor.execute(UPSERT_CATEGORY_SQL, (key, category))
                conn.commit()
            except psycopg2.Error:
                conn.rollback()
                raise
            finally:
                cursor.close()
        except psycopg2.Error as e:
            raise CacheTransportError(f"Remote upsert failed for {key!r}: {e}") from e
        finally:
            conn.close()

        logger.debug("Remote store: %s -> %s", key, category)

    def __repr__(self) -> str:
        return "RemoteCategoryStore(postgresql)"
