#!/usr/bin/env python3
"""
Database initialization script

Creates the remote category store table in PostgreSQL.
"""
import argparse
import sys
from pathlib import Path

import psycopg2

from spend_categorizer.utils.db_connection import get_db_connection

SCHEMA_FILE = Path(__file__).parent.parent / "db" / "schema.sql"


def run_sql_file(conn, sql_file: Path, description: str):
    """Execute a SQL file"""
    print(f"\n📄 {description}")
    print(f"   File: {sql_file}")

    with open(sql_file, 'r') as f:
        sql = f.read()

    cursor = conn.cursor()
    try:
        cursor.execute(sql)
        conn.commit()
        print(f"   ✅ Success")
    except psycopg2.Error as e:
        conn.rollback()
        print(f"   ❌ Error: {e}")
        raise
    finally:
        cursor.close()


def print_summary(conn):
    """Print category store summary"""
    cursor = conn.cursor()

    print("\n" + "=" * 80)
    print("📊 CATEGORY STORE SUMMARY")
    print("=" * 80)

    cursor.execute("SELECT COUNT(*) FROM category_transaction")
    print(f"Cached mappings: {cursor.fetchone()[0]}")

    cursor.execute("""
        SELECT category, COUNT(*)
        FROM category_transaction
        GROUP BY category
        ORDER BY COUNT(*) DESC
    """)
    for category, count in cursor.fetchall():
        print(f"  • {category}: {count}")

    print("=" * 80)
    cursor.close()


def main(argv=None):
    """Main initialization function"""
    parser = argparse.ArgumentParser(description='Create the remote category store schema')
    parser.add_argument('--dsn', help='PostgreSQL connection string (default: DATABASE_URL / DB_* env vars)')
    parser.add_argument('--schema', type=Path, default=SCHEMA_FILE, help='Schema file to apply')
    args = parser.parse_args(argv)

    print("=" * 80)
    print("🗄️  CATEGORY STORE INITIALIZATION")
    print("=" * 80)

    print("\n🔌 Connecting to database...")
    try:
        conn = get_db_connection(args.dsn)
        print("   ✅ Connected")
    except (psycopg2.Error, ValueError) as e:
        print(f"   ❌ Connection failed: {e}")
        sys.exit(1)

    try:
        run_sql_file(conn, args.schema, "Creating category_transaction table")
        print_summary(conn)
    except psycopg2.Error:
        sys.exit(1)
    finally:
        conn.close()

    print("\n✅ Category store ready!")


if __name__ == "__main__":
    main()
