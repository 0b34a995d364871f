"""
Database connection utilities for the remote category store
"""
import os
from typing import Optional

import psycopg2
from dotenv import load_dotenv


# Load environment variables
load_dotenv()


def get_db_connection(
    dsn: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    database: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    connect_timeout: int = 5
):
    """
    Get database connection using a DSN, provided values or environment variables

    Args:
        dsn: libpq connection string (default: from DATABASE_URL env var)
        host: Database host (default: from DB_HOST env var)
        port: Database port (default: from DB_PORT env var)
        database: Database name (default: from DB_NAME env var)
        user: Database user (default: from DB_USER env var)
        password: Database password (default: from DB_PASSWORD env var)
        connect_timeout: Seconds to wait for the server before giving up

    Returns:
        psycopg2 connection object
    """
    dsn = dsn or os.getenv('DATABASE_URL')
    if dsn:
        return psycopg2.connect(dsn, connect_timeout=connect_timeout)

    return psycopg2.connect(
        host=host or os.getenv('DB_HOST', 'localhost'),
        port=port or int(os.getenv('DB_PORT', '5432')),
        database=database or os.getenv('DB_NAME', 'spend_db'),
        user=user or os.getenv('DB_USER', 'spend_user'),
        password=password or os.getenv('DB_PASSWORD', ''),
        connect_timeout=connect_timeout
    )
